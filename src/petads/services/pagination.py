"""Pure helpers for pagination and category resolution."""
from typing import Any, Mapping, Sequence

from petads.exceptions.base import InvalidFieldError

DEFAULT_CATEGORY_ID = 1
DEFAULT_PAGE_SIZE = 10


def compute_offset(page: int, page_size: int) -> int:
    """
    Row offset of a 1-based page: `(page - 1) * page_size`.

    Raises:
        InvalidFieldError: page or page_size below 1.
    """
    invalid = []
    if page is None or page < 1:
        invalid.append("page")
    if page_size is None or page_size < 1:
        invalid.append("page_size")
    if invalid:
        raise InvalidFieldError("Page and page size must be positive integers", fields=invalid)
    return (page - 1) * page_size


def resolve_category_id(rows: Sequence[Mapping[str, Any]]) -> int:
    """Id from a category lookup result, or the default category when nothing matched."""
    if not rows or rows[0].get("id") is None:
        return DEFAULT_CATEGORY_ID
    return int(rows[0]["id"])


def extract_total(rows: Sequence[Mapping[str, Any]]) -> int:
    """Value of the `count` column of a COUNT(*) result (0 when empty)."""
    if not rows:
        return 0
    return int(rows[0].get("count") or 0)
