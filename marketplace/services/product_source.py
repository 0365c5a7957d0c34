"""Product sources feeding the catalog store.

The only source shipped today is :class:`MockProductSource`, which simulates a
network round trip over a generated catalog. A real backend only has to honour
:class:`ProductSourceProtocol`: return the whole collection or raise
:class:`FetchError`, never a partial result.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from typing import Protocol, runtime_checkable

from marketplace.schemas.product import CATEGORIES, CONDITIONS, Product

logger = logging.getLogger(__name__)

FEATURED_COUNT = 5

_SAMPLE_IMAGES = (
    "https://images.pexels.com/photos/2113994/pexels-photo-2113994.jpeg",
    "https://images.pexels.com/photos/3780681/pexels-photo-3780681.jpeg",
    "https://images.pexels.com/photos/3945683/pexels-photo-3945683.jpeg",
    "https://images.pexels.com/photos/4397840/pexels-photo-4397840.jpeg",
    "https://images.pexels.com/photos/404280/pexels-photo-404280.jpeg",
    "https://images.pexels.com/photos/2536965/pexels-photo-2536965.jpeg",
    "https://images.pexels.com/photos/1619651/pexels-photo-1619651.jpeg",
    "https://images.pexels.com/photos/325153/pexels-photo-325153.jpeg",
    "https://images.pexels.com/photos/1667088/pexels-photo-1667088.jpeg",
)

_SAMPLE_TITLES = (
    "iPhone 12 Pro - Excellent Condition",
    "Vintage Leather Jacket - Size M",
    "IKEA MALM Desk - White",
    "Sony WH-1000XM4 Headphones",
    "Mountain Bike - Trek Marlin 7",
    "Harry Potter Complete Book Collection",
    "Nintendo Switch with 3 Games",
    "Mid-Century Modern Coffee Table",
    "Diamond Engagement Ring - Size 7",
    "Cast Iron Cookware Set - 5 Pieces",
    "Designer Handbag - Barely Used",
    'Macbook Pro 16" 2023 M2',
    "Vintage Film Camera",
    "Air Fryer - Ninja 5.5L",
    "Professional Painting Set",
)

_SAMPLE_SELLERS = (
    ("1", "Alice Smith", "https://i.pravatar.cc/150?img=1"),
    ("2", "Bob Johnson", "https://i.pravatar.cc/150?img=2"),
    ("3", "Charlie Williams", "https://i.pravatar.cc/150?img=3"),
    ("4", "Diana Davis", "https://i.pravatar.cc/150?img=4"),
    ("5", "Ethan Brown", "https://i.pravatar.cc/150?img=5"),
)

_SAMPLE_LOCATIONS = ("New York", "Los Angeles", "Chicago", "Houston", "Phoenix")


class FetchError(RuntimeError):
    """Raised when the catalog could not be loaded; retrying may succeed."""


@runtime_checkable
class ProductSourceProtocol(Protocol):
    """Minimal surface required by :class:`~marketplace.services.catalog_store.CatalogStore`."""

    async def load_products(self) -> Sequence[Product]:
        """Return the complete product collection or raise :class:`FetchError`."""


def generate_mock_products(
    count: int = 24,
    *,
    seed: int | None = None,
    now: datetime | None = None,
) -> list[Product]:
    """Build ``count`` listings with ids ``product-1`` .. ``product-<count>``.

    The first :data:`FEATURED_COUNT` listings are featured. ``seed`` makes the
    random picks reproducible and ``now`` anchors ``created_at`` (each listing
    is between 0 and 29 days old).
    """

    rng = random.Random(seed)
    anchor = now or datetime.now(UTC)
    products: list[Product] = []

    for index in range(count):
        seller_id, seller_name, seller_avatar = rng.choice(_SAMPLE_SELLERS)
        category = rng.choice(CATEGORIES)
        condition = rng.choice(CONDITIONS)
        price = float(rng.randrange(10, 1010))
        title = _SAMPLE_TITLES[index % len(_SAMPLE_TITLES)]
        images = tuple(rng.choice(_SAMPLE_IMAGES) for _ in range(rng.randint(1, 3)))

        products.append(
            Product(
                id=f"product-{index + 1}",
                title=title,
                description=(
                    f"This is a detailed description for {title}. The item is in "
                    f"{condition.value.lower()} condition and ready for a new home. "
                    "Don't miss this great deal!"
                ),
                price=price,
                images=images,
                category=category,
                condition=condition,
                location=rng.choice(_SAMPLE_LOCATIONS),
                seller_id=seller_id,
                seller_name=seller_name,
                seller_avatar=seller_avatar,
                created_at=anchor - timedelta(days=rng.randrange(0, 30)),
                featured=index < FEATURED_COUNT,
            )
        )

    return products


class MockProductSource(ProductSourceProtocol):
    """Serve a fixed product list after a simulated network delay."""

    def __init__(
        self,
        products: Sequence[Product] | None = None,
        *,
        delay_seconds: float = 0.8,
        fail: bool = False,
    ) -> None:
        self._products: tuple[Product, ...] = tuple(
            products if products is not None else generate_mock_products()
        )
        self.delay_seconds = delay_seconds
        self.fail = fail
        self.calls = 0

    async def load_products(self) -> Sequence[Product]:
        self.calls += 1
        if self.delay_seconds > 0:
            await asyncio.sleep(self.delay_seconds)
        if self.fail:
            raise FetchError("Failed to fetch products")
        logger.debug("Mock source served %d products", len(self._products))
        return self._products


__all__ = [
    "FEATURED_COUNT",
    "FetchError",
    "MockProductSource",
    "ProductSourceProtocol",
    "generate_mock_products",
]
