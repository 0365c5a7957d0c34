"""Schemas for catalog filtering, sorting, pagination and store snapshots."""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from marketplace.schemas.product import Category, Condition, Product

PAGINATION_ELLIPSIS = "ellipsis"
"""Marker emitted in a pagination window where page numbers are skipped."""

PageToken = int | Literal["ellipsis"]

FilterField = Literal["category", "condition", "search"]


class SortKey(str, Enum):
    """Supported listing orders."""

    NEWEST = "newest"
    OLDEST = "oldest"
    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"


class FilterCriteria(BaseModel):
    """Currently selected filters; active fields combine with logical AND.

    Assignment is validated and recorded in ``model_fields_set``, which lets
    callers tell a field explicitly cleared to ``None`` apart from a field
    that was never touched.
    """

    model_config = ConfigDict(validate_assignment=True)

    category: Category | None = None
    condition: Condition | None = None
    search: str = ""

    @field_validator("search", mode="before")
    @classmethod
    def _blank_search(cls, value: object) -> object:
        return "" if value is None else value

    def is_set(self, field: FilterField) -> bool:
        """Return ``True`` once ``field`` has been explicitly assigned."""

        return field in self.model_fields_set

    @property
    def search_term(self) -> str | None:
        """Return the trimmed search text or ``None`` when it is blank."""

        term = self.search.strip()
        return term or None

    @property
    def is_active(self) -> bool:
        return (
            self.category is not None
            or self.condition is not None
            or self.search_term is not None
        )


class PriceRange(BaseModel):
    """Inclusive price bounds owned by the browsing view."""

    model_config = ConfigDict(frozen=True)

    min_price: float = Field(0.0, ge=0.0)
    max_price: float | None = Field(
        None, ge=0.0, description="Upper bound; ``None`` leaves the range open"
    )

    @model_validator(mode="after")
    def _check_bounds(self) -> PriceRange:
        if self.max_price is not None and self.min_price > self.max_price:
            raise ValueError("min_price must not exceed max_price")
        return self

    def contains(self, price: float) -> bool:
        if price < self.min_price:
            return False
        return self.max_price is None or price <= self.max_price


DEFAULT_PRICE_RANGE = PriceRange(min_price=0.0, max_price=1000.0)


class PageRequest(BaseModel):
    """One-indexed page selection."""

    model_config = ConfigDict(frozen=True)

    page_size: int = Field(12, ge=1)
    page_number: int = Field(1, ge=1)


class CatalogQueryResult(BaseModel):
    """A displayable page plus the metadata needed to render pagination."""

    items: list[Product] = Field(default_factory=list)
    total_count: int = Field(..., ge=0)
    total_pages: int = Field(..., ge=0)
    page_number: int = Field(..., ge=1)
    page_size: int = Field(..., ge=1)
    pagination_window: list[PageToken] = Field(default_factory=list)


class CatalogSnapshot(BaseModel):
    """Immutable view of the catalog store handed to observers."""

    model_config = ConfigDict(frozen=True)

    products: tuple[Product, ...] = ()
    featured_products: tuple[Product, ...] = ()
    is_loading: bool = False
    error: str | None = None
    filters: FilterCriteria = Field(default_factory=FilterCriteria)


__all__ = [
    "CatalogQueryResult",
    "CatalogSnapshot",
    "DEFAULT_PRICE_RANGE",
    "FilterCriteria",
    "FilterField",
    "PAGINATION_ELLIPSIS",
    "PageRequest",
    "PageToken",
    "PriceRange",
    "SortKey",
]
