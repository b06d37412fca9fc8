from .marketplace_service import MarketplaceService
from .pagination import DEFAULT_CATEGORY_ID, compute_offset, extract_total, resolve_category_id

__all__ = [
    "MarketplaceService",
    "DEFAULT_CATEGORY_ID",
    "compute_offset",
    "extract_total",
    "resolve_category_id",
]
