"""Pydantic schemas shared by the catalog and preference stores."""

from .catalog import (
    DEFAULT_PRICE_RANGE,
    PAGINATION_ELLIPSIS,
    CatalogQueryResult,
    CatalogSnapshot,
    FilterCriteria,
    FilterField,
    PageRequest,
    PageToken,
    PriceRange,
    SortKey,
)
from .preferences import RECENTLY_VIEWED_LIMIT, PreferenceState, Theme
from .product import CATEGORIES, CONDITIONS, Category, Condition, Product

__all__ = [
    "CATEGORIES",
    "CONDITIONS",
    "CatalogQueryResult",
    "CatalogSnapshot",
    "Category",
    "Condition",
    "DEFAULT_PRICE_RANGE",
    "FilterCriteria",
    "FilterField",
    "PAGINATION_ELLIPSIS",
    "PageRequest",
    "PageToken",
    "PreferenceState",
    "PriceRange",
    "Product",
    "RECENTLY_VIEWED_LIMIT",
    "SortKey",
    "Theme",
]
