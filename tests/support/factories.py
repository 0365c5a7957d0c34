"""Deterministic products plus source and storage doubles for store tests."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta

from marketplace.schemas.product import Category, Condition, Product
from marketplace.services.product_source import FetchError
from marketplace.storage import InMemoryDurableStore

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


def make_product(
    product_id: str,
    *,
    title: str = "Sample Listing",
    description: str = "",
    price: float = 100.0,
    category: Category = Category.OTHER,
    condition: Condition = Condition.GOOD,
    seller_id: str = "1",
    days_old: int = 0,
    featured: bool = False,
) -> Product:
    return Product(
        id=product_id,
        title=title,
        description=description or f"Description for {title}",
        price=price,
        images=(f"https://img.example.com/{product_id}.jpg",),
        category=category,
        condition=condition,
        location="Chicago",
        seller_id=seller_id,
        seller_name=f"Seller {seller_id}",
        created_at=BASE_TIME - timedelta(days=days_old),
        featured=featured,
    )


def sample_catalog() -> list[Product]:
    """Eight listings with deliberate ties on price and creation date."""

    return [
        make_product(
            "p1",
            title="Sony WH-1000XM4 Headphones",
            price=250.0,
            category=Category.ELECTRONICS,
            condition=Condition.LIKE_NEW,
            seller_id="1",
            days_old=1,
            featured=True,
        ),
        make_product(
            "p2",
            title="Vintage Leather Jacket - Size M",
            price=120.0,
            category=Category.CLOTHING,
            condition=Condition.GOOD,
            seller_id="2",
            days_old=3,
            featured=True,
        ),
        make_product(
            "p3",
            title="Nintendo Switch with 3 Games",
            price=250.0,
            category=Category.ELECTRONICS,
            condition=Condition.GOOD,
            seller_id="1",
            days_old=2,
        ),
        make_product(
            "p4",
            title="IKEA MALM Desk - White",
            price=80.0,
            category=Category.FURNITURE,
            condition=Condition.FAIR,
            seller_id="3",
            days_old=5,
        ),
        make_product(
            "p5",
            title="Vintage Film Camera",
            price=400.0,
            category=Category.ELECTRONICS,
            condition=Condition.NEW,
            seller_id="2",
            days_old=1,
        ),
        make_product(
            "p6",
            title="Cast Iron Cookware Set - 5 Pieces",
            price=80.0,
            category=Category.HOME_AND_GARDEN,
            condition=Condition.NEW,
            seller_id="4",
            days_old=10,
        ),
        make_product(
            "p7",
            title="Mountain Bike - Trek Marlin 7",
            price=1200.0,
            category=Category.SPORTS,
            condition=Condition.POOR,
            seller_id="5",
            days_old=7,
            featured=True,
        ),
        make_product(
            "p8",
            title="Harry Potter Complete Book Collection",
            description="First printing, VINTAGE edition with slipcase",
            price=45.0,
            category=Category.BOOKS,
            condition=Condition.LIKE_NEW,
            seller_id="3",
            days_old=3,
        ),
    ]


class RecordingDurableStore(InMemoryDurableStore):
    """In-memory durable store that counts writes and can be told to fail."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        super().__init__(initial)
        self.writes: list[tuple[str, str]] = []
        self.fail_writes = False

    def write(self, key: str, blob: str) -> None:
        if self.fail_writes:
            raise OSError("disk full")
        self.writes.append((key, blob))
        super().write(key, blob)


class GatedProductSource:
    """Product source that blocks until the test releases it."""

    def __init__(self, products: Sequence[Product]) -> None:
        self.products = tuple(products)
        self.release = asyncio.Event()
        self.calls = 0
        self.fail = False
        self.error: BaseException | None = None

    async def load_products(self) -> Sequence[Product]:
        self.calls += 1
        await self.release.wait()
        if self.error is not None:
            raise self.error
        if self.fail:
            raise FetchError("Failed to fetch products")
        return self.products
