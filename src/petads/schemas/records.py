"""
Typed record shapes produced from query rows.

Fields are declared in the order the row mapper walks them. Every field
tolerates absence (defaults to None) because a row map missing a declared
column yields an unset field rather than a failure.
"""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class UserProfile(BaseModel):
    """Public profile projection of a user. The password digest is never part of it."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    username: str | None = None
    display_name: str | None = None
    email: str | None = None
    phone: str | None = None


class AdDetail(BaseModel):
    """An ad joined with its author's contact details and its category name."""

    model_config = ConfigDict(frozen=True)

    ad_id: int | None = None
    display_name: str | None = None
    email: str | None = None
    phone: str | None = None
    pet_name: str | None = None
    category: str | None = None
    pet_age: float | None = None
    pet_gender: str | None = None
    ad_content: str | None = None
    image_path: str | None = None
    created_at: datetime | None = None


class AdPage(BaseModel):
    """
    One page of ads plus the separately queried total.

    The two values come from different transactions and may disagree under
    concurrent writes.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    ads: list[AdDetail] = Field(default_factory=list)
    total_ads: int = Field(default=0, serialization_alias="totalAds")
    page: int = 1
    page_size: int = 10
