"""Read models returned by the listing service to browsing views."""

from __future__ import annotations

from pydantic import BaseModel, Field

from marketplace.schemas.catalog import PageToken, SortKey
from marketplace.schemas.product import Category, Product


class ProductCard(BaseModel):
    """A product decorated with the local profile's favorite flag."""

    product: Product
    is_favorite: bool = False


class ListingPage(BaseModel):
    """One page of the browse listing after filters, sorting and clamping."""

    cards: list[ProductCard] = Field(default_factory=list)
    total_count: int = Field(..., ge=0)
    total_pages: int = Field(..., ge=0)
    page_number: int = Field(..., ge=1)
    page_size: int = Field(..., ge=1)
    sort_key: SortKey
    pagination_window: list[PageToken] = Field(default_factory=list)


class ProductDetailView(BaseModel):
    """Everything the product page needs for a single listing."""

    product: Product
    is_favorite: bool = False
    related: list[Product] = Field(
        default_factory=list,
        description="Other listings from the same category, catalog order.",
    )


class HomeSections(BaseModel):
    featured: list[ProductCard] = Field(default_factory=list)
    featured_categories: list[Category] = Field(default_factory=list)


__all__ = [
    "HomeSections",
    "ListingPage",
    "ProductCard",
    "ProductDetailView",
]
