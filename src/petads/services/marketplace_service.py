"""
Business operations of the pet-ads marketplace.

The service is stateless: every method is expressed as one or more executor
calls plus validation and password verification. Uniqueness of users and
favorites is enforced by the database's unique constraints, not by locks here,
so concurrent duplicate registrations end with one success and one
DuplicateError.
"""
import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncConnection

from petads.exceptions.base import (
    DuplicateError,
    ExecutionError,
    NotAllowedError,
)
from petads.repositories import statements as sql
from petads.repositories.query_executor import QueryExecutor, count_affected_rows
from petads.repositories.row_mapper import map_row_to_record, map_rows_to_records
from petads.schemas.records import AdDetail, AdPage, UserProfile
from petads.security.passwords import PasswordHasher
from petads.validators.field_validators import (
    validate_identity,
    validate_password,
    validate_pet_age,
    validate_user_fields,
)

from .pagination import (
    DEFAULT_PAGE_SIZE,
    compute_offset,
    extract_total,
    resolve_category_id,
)

logger = logging.getLogger(__name__)


class MarketplaceService:
    """
    Users, ads, favorites and paginated listings on top of a QueryExecutor.

    Errors raised to callers:
        InvalidFieldError: malformed input, raised before any database call.
        NotAllowedError: ad-creation ownership check failed.
        DuplicateError: duplicate username/email, or an ad favorited twice.
        ExecutionError: any other database failure, a missing row that a
            mutation requires, or retries exhausted.
    """

    def __init__(self, executor: QueryExecutor, password_hasher: PasswordHasher):
        self.executor = executor
        self.password_hasher = password_hasher

    # =================================================================================================================
    # Users
    # =================================================================================================================

    async def create_user(self, username: str, password: str, display_name: str, email: str, phone: str) -> None:
        """
        Register a user.

        Email and phone formats are checked first; a malformed value never
        reaches the database. The password is stored as a bcrypt digest.
        """
        validate_user_fields(email, phone)
        validate_password(password)

        # Hashing is CPU bound; keep it off the event loop.
        digest = await asyncio.to_thread(self.password_hasher.hash, password)

        affected_rows = await self.executor.update(
            sql.SQL_CREATE_NEW_USER,
            {
                "username": username,
                "password": digest,
                "display_name": display_name,
                "email": email,
                "phone": phone,
            },
        )
        if affected_rows < 1:
            raise ExecutionError("Failed to create user")

        logger.info("service.user.created", extra={"username": username})

    async def login(self, username: str, password: str) -> UserProfile | None:
        """
        Return the user's public profile when the password matches, else None.

        An unknown username is a failed login, not an error.
        """
        rows = await self.executor.query(sql.SQL_GET_USER_PROFILE_DATA, {"username": username})
        if not rows:
            logger.info("service.login.unknown_user", extra={"username": username})
            return None

        row = rows[0]
        matched = await asyncio.to_thread(self.password_hasher.verify, password, row.get("password") or "")
        if not matched:
            logger.info("service.login.password_mismatch", extra={"username": username})
            return None

        return map_row_to_record(row, UserProfile)

    async def is_allowed_to_create_ad(self, username: str, user_id: int) -> bool:
        """True only when exactly one user row has this (username, id) pair."""
        rows = await self.executor.query(sql.SQL_VALIDATE_USER, {"username": username, "user_id": user_id})
        return len(rows) == 1

    # =================================================================================================================
    # Categories
    # =================================================================================================================

    async def find_category_id(self, category: str | None) -> int:
        """Id of the named category; unknown or empty names fall back to the default category."""
        if not category:
            return resolve_category_id([])
        rows = await self.executor.query(sql.SQL_GET_CATEGORY_ID, {"category": category})
        return resolve_category_id(rows)

    # =================================================================================================================
    # Ads
    # =================================================================================================================

    async def create_ad(
        self,
        username: str,
        user_id: int,
        category: str | None,
        pet_name: str,
        pet_age: float,
        pet_gender: str,
        ad_content: str,
        image_path: str | None = "",
    ) -> None:
        """
        Post an ad for an existing user.

        The (username, user_id) identity is re-checked against the users table on
        every call. `image_path` is stored as given; an empty string means no image.
        """
        validate_identity(username, user_id)
        validate_pet_age(pet_age)

        if not await self.is_allowed_to_create_ad(username, user_id):
            logger.warning("service.ad.not_allowed", extra={"username": username, "user_id": user_id})
            raise NotAllowedError("Must be a registered user to create an ad", fields=["username", "user_id"])

        category_id = await self.find_category_id(category)

        affected_rows = await self.executor.update(
            sql.SQL_CREATE_NEW_AD,
            {
                "category_id": category_id,
                "author_id": user_id,
                "pet_name": pet_name,
                "pet_age": pet_age,
                "pet_gender": pet_gender,
                "ad_content": ad_content,
                "image_path": image_path if image_path is not None else "",
            },
        )
        if affected_rows < 1:
            raise ExecutionError("Failed to create ad")

        logger.info("service.ad.created", extra={"user_id": user_id, "category_id": category_id})

    async def delete_ad(self, ad_id: int) -> int:
        """
        Delete an ad and every favorite that references it, in one transaction.

        Returns:
            Number of favorite rows removed (zero is normal).

        Raises:
            ExecutionError: no ad with this id; the favorite removal is rolled back.
        """
        params = {"ad_id": ad_id}

        async def work(connection: AsyncConnection) -> int:
            removed_favorites = await count_affected_rows(connection, sql.SQL_DELETE_FAVORITE_AD, params)
            logger.info("service.ad.favorites_removed", extra={"ad_id": ad_id, "count": removed_favorites})

            deleted = await count_affected_rows(connection, sql.SQL_DELETE_AD, params)
            if deleted < 1:
                raise ExecutionError(f"Ad {ad_id} not found", fields=["ad_id"])
            return removed_favorites

        removed = await self.executor.run_in_transaction(work, operation="delete_ad")
        logger.info("service.ad.deleted", extra={"ad_id": ad_id, "favorites_removed": removed})
        return removed

    # =================================================================================================================
    # Favorites
    # =================================================================================================================

    async def favorite_ad(self, user_id: int, ad_id: int) -> None:
        """
        Raises:
            DuplicateError: the pair is already a favorite.
        """
        try:
            await self.executor.update(sql.SQL_CREATE_NEW_FAVORITE_AD, {"user_id": user_id, "ad_id": ad_id})
        except DuplicateError as exc:
            raise DuplicateError(
                "Ad is already in favorites",
                fields=exc.fields or ["user_id", "ad_id"],
                values=exc.values,
                constraint=exc.constraint,
            ) from exc

        logger.info("service.favorite.added", extra={"user_id": user_id, "ad_id": ad_id})

    async def unfavorite_ad(self, user_id: int, ad_id: int) -> int:
        """Remove a favorite. Removing a pair that does not exist is not an error; returns rows removed."""
        removed = await self.executor.update(sql.SQL_DELETE_USER_FAVORITE_AD, {"user_id": user_id, "ad_id": ad_id})
        if removed == 0:
            logger.info("service.favorite.not_found", extra={"user_id": user_id, "ad_id": ad_id})
        else:
            logger.info("service.favorite.removed", extra={"user_id": user_id, "ad_id": ad_id})
        return removed

    # =================================================================================================================
    # Listings
    # =================================================================================================================

    async def get_ads(self, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE, category: str | None = None) -> list[AdDetail]:
        """Newest ads first, optionally restricted to one category name."""
        offset = compute_offset(page, page_size)
        if category:
            rows = await self.executor.query(
                sql.SQL_GET_ALL_ADS_SPECIFIC_CATEGORIES,
                {"category": category, "limit": page_size, "offset": offset},
            )
        else:
            rows = await self.executor.query(sql.SQL_GET_ALL_ADS, {"limit": page_size, "offset": offset})
        return map_rows_to_records(rows, AdDetail)

    async def count_ads(self, category: str | None = None) -> int:
        if category:
            rows = await self.executor.query(sql.SQL_COUNT_ADS_SPECIFIC_CATEGORIES, {"category": category})
        else:
            rows = await self.executor.query(sql.SQL_COUNT_ALL_ADS)
        return extract_total(rows)

    async def get_user_ads(self, user_id: int, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> list[AdDetail]:
        offset = compute_offset(page, page_size)
        rows = await self.executor.query(
            sql.SQL_GET_USER_ADS,
            {"user_id": user_id, "limit": page_size, "offset": offset},
        )
        return map_rows_to_records(rows, AdDetail)

    async def count_user_ads(self, user_id: int) -> int:
        rows = await self.executor.query(sql.SQL_COUNT_ALL_ADS_OF_USER, {"user_id": user_id})
        return extract_total(rows)

    async def get_user_favorite_ads(
        self, user_id: int, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE
    ) -> list[AdDetail]:
        offset = compute_offset(page, page_size)
        rows = await self.executor.query(
            sql.SQL_GET_USER_FAVORITE_ADS,
            {"user_id": user_id, "limit": page_size, "offset": offset},
        )
        return map_rows_to_records(rows, AdDetail)

    async def count_user_favorite_ads(self, user_id: int) -> int:
        rows = await self.executor.query(sql.SQL_COUNT_ALL_FAVORITE_ADS_OF_USER, {"user_id": user_id})
        return extract_total(rows)

    # Page + total. The two queries run in separate transactions and may
    # disagree under concurrent writes.

    async def list_ads(self, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE, category: str | None = None) -> AdPage:
        ads = await self.get_ads(page, page_size, category)
        total = await self.count_ads(category)
        return AdPage(ads=ads, total_ads=total, page=page, page_size=page_size)

    async def list_user_ads(self, user_id: int, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> AdPage:
        ads = await self.get_user_ads(user_id, page, page_size)
        total = await self.count_user_ads(user_id)
        return AdPage(ads=ads, total_ads=total, page=page, page_size=page_size)

    async def list_user_favorites(self, user_id: int, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> AdPage:
        ads = await self.get_user_favorite_ads(user_id, page, page_size)
        total = await self.count_user_favorite_ads(user_id)
        return AdPage(ads=ads, total_ads=total, page=page, page_size=page_size)
