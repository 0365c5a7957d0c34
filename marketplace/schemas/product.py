"""Pydantic schemas describing catalog products."""

from __future__ import annotations

from enum import Enum

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field


class Category(str, Enum):
    """Fixed set of listing categories."""

    ELECTRONICS = "Electronics"
    CLOTHING = "Clothing"
    HOME_AND_GARDEN = "Home & Garden"
    SPORTS = "Sports"
    TOYS_AND_GAMES = "Toys & Games"
    BOOKS = "Books"
    VEHICLES = "Vehicles"
    JEWELRY = "Jewelry"
    FURNITURE = "Furniture"
    OTHER = "Other"


class Condition(str, Enum):
    """Item condition, declared from best to worst."""

    NEW = "New"
    LIKE_NEW = "Like New"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"

    @property
    def rank(self) -> int:
        """Ordinal position where ``New`` is highest (4) and ``Poor`` lowest (0)."""

        members = list(type(self))
        return len(members) - 1 - members.index(self)


CATEGORIES: tuple[Category, ...] = tuple(Category)
CONDITIONS: tuple[Condition, ...] = tuple(Condition)


class Product(BaseModel):
    """A single marketplace listing.

    Instances are frozen: the catalog store hands the same objects to every
    consumer, so nothing downstream may edit a loaded product.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Unique, stable listing identifier")
    title: str
    description: str = ""
    price: float = Field(..., ge=0.0, description="Asking price, never negative")
    images: tuple[str, ...] = Field(
        ..., min_length=1, description="Ordered image URIs; the first is the cover"
    )
    category: Category
    condition: Condition
    location: str = ""
    seller_id: str
    seller_name: str
    seller_avatar: str | None = None
    created_at: AwareDatetime = Field(
        ..., description="Listing time; naive timestamps are rejected"
    )
    featured: bool = False


__all__ = [
    "CATEGORIES",
    "CONDITIONS",
    "Category",
    "Condition",
    "Product",
]
