"""Tests for the listing service that backs the browsing views."""

from __future__ import annotations

import pytest

from marketplace.schemas.catalog import DEFAULT_PRICE_RANGE, PriceRange, SortKey
from marketplace.schemas.listing import ProductCard
from marketplace.schemas.product import Category
from marketplace.services.catalog_store import CatalogStore
from marketplace.services.listing_service import (
    FEATURED_CATEGORIES,
    RELATED_PRODUCTS_LIMIT,
    ListingService,
)
from marketplace.services.preference_store import PreferenceStore
from marketplace.services.product_source import MockProductSource
from tests.support.factories import make_product


@pytest.fixture
def service(
    loaded_catalog: CatalogStore, preferences: PreferenceStore
) -> ListingService:
    return ListingService(loaded_catalog, preferences, page_size=3)


def _ids(cards: list[ProductCard]) -> list[str]:
    return [card.product.id for card in cards]


# -- Browse ----------------------------------------------------------------------


@pytest.mark.asyncio
async def test_browse_first_page(service: ListingService) -> None:
    page = service.browse()

    assert _ids(page.cards) == ["p1", "p5", "p3"]
    assert page.total_count == 7
    assert page.total_pages == 3
    assert page.page_number == 1
    assert page.sort_key is SortKey.NEWEST
    assert page.pagination_window == [1, 2, 3]


@pytest.mark.asyncio
async def test_browse_defaults_to_the_standard_price_range(
    service: ListingService,
) -> None:
    bounded = service.browse(page_size=10)
    unbounded = service.browse(page_size=10, price_range=None)

    assert DEFAULT_PRICE_RANGE.max_price == 1000
    assert "p7" not in _ids(bounded.cards)
    assert _ids(unbounded.cards)[-2] == "p7"
    assert unbounded.total_count == 8


@pytest.mark.asyncio
async def test_browse_uses_store_filters_and_price_range(service: ListingService) -> None:
    service.catalog.set_filter("category", Category.ELECTRONICS)

    page = service.browse(
        sort_key="price-asc", price_range=PriceRange(min_price=0, max_price=300)
    )

    assert _ids(page.cards) == ["p1", "p3"]
    assert page.total_pages == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(("requested", "expected"), [(0, 1), (-4, 1), (2, 2), (99, 3)])
async def test_browse_clamps_page_number(
    service: ListingService, requested: int, expected: int
) -> None:
    page = service.browse(page_number=requested)

    assert page.page_number == expected
    assert page.cards


@pytest.mark.asyncio
async def test_browse_with_no_matches(service: ListingService) -> None:
    service.catalog.set_filter("search", "spaceship")

    page = service.browse(page_number=4)

    assert page.cards == []
    assert page.total_count == 0
    assert page.total_pages == 0
    assert page.page_number == 1
    assert page.pagination_window == []


@pytest.mark.asyncio
async def test_browse_marks_favorites(service: ListingService) -> None:
    service.toggle_favorite("p5")

    page = service.browse()

    assert [card.is_favorite for card in page.cards] == [False, True, False]


@pytest.mark.asyncio
async def test_browse_page_size_override(service: ListingService) -> None:
    page = service.browse(page_size=10)

    assert len(page.cards) == 7
    assert page.page_size == 10


def test_page_size_must_be_positive(
    source: MockProductSource, preferences: PreferenceStore
) -> None:
    with pytest.raises(ValueError):
        ListingService(CatalogStore(source), preferences, page_size=0)


# -- Query parameters --------------------------------------------------------------


@pytest.mark.asyncio
async def test_apply_query_params(service: ListingService) -> None:
    sort_key = service.apply_query_params(
        {"category": "Electronics", "query": "switch", "sort": "price-desc"}
    )

    filters = service.catalog.filters
    assert sort_key is SortKey.PRICE_DESC
    assert filters.category is Category.ELECTRONICS
    assert filters.search == "switch"
    assert _ids(service.browse(sort_key=sort_key).cards) == ["p3"]


@pytest.mark.asyncio
async def test_apply_query_params_ignores_unknown_values(service: ListingService) -> None:
    sort_key = service.apply_query_params({"category": "Spaceships", "sort": "random"})

    assert sort_key is None
    assert not service.catalog.filters.is_set("category")
    assert service.apply_query_params({}) is None


# -- Product page ----------------------------------------------------------------


@pytest.mark.asyncio
async def test_view_product_records_history_and_related(
    service: ListingService,
) -> None:
    detail = service.view_product("p3")

    assert detail is not None
    assert detail.product.id == "p3"
    assert [product.id for product in detail.related] == ["p1", "p5"]
    assert not detail.is_favorite
    assert service.preferences.recently_viewed == ("p3",)


@pytest.mark.asyncio
async def test_view_unknown_product_records_nothing(service: ListingService) -> None:
    assert service.view_product("missing") is None
    assert service.preferences.recently_viewed == ()


@pytest.mark.asyncio
async def test_related_products_are_capped(preferences: PreferenceStore) -> None:
    bikes = [make_product(f"bike-{n}", category=Category.SPORTS) for n in range(7)]
    catalog = CatalogStore(MockProductSource(bikes, delay_seconds=0))
    await catalog.fetch()
    service = ListingService(catalog, preferences)

    detail = service.view_product("bike-0")

    assert detail is not None
    assert len(detail.related) == RELATED_PRODUCTS_LIMIT
    assert "bike-0" not in [product.id for product in detail.related]


# -- Profile lists ---------------------------------------------------------------


@pytest.mark.asyncio
async def test_favorite_products_follow_most_recent_first(
    service: ListingService,
) -> None:
    service.toggle_favorite("p2")
    service.toggle_favorite("p5")
    service.preferences.add_to_favorites("not-in-catalog")

    cards = service.favorite_products()

    assert _ids(cards) == ["p5", "p2"]
    assert all(card.is_favorite for card in cards)


@pytest.mark.asyncio
async def test_recently_viewed_products(service: ListingService) -> None:
    for product_id in ["p1", "p4", "p1"]:
        service.view_product(product_id)

    assert _ids(service.recently_viewed_products()) == ["p1", "p4"]


@pytest.mark.asyncio
async def test_seller_products(service: ListingService) -> None:
    assert _ids(service.seller_products("1")) == ["p1", "p3"]
    assert service.seller_products("404") == []


@pytest.mark.asyncio
async def test_home_sections(service: ListingService) -> None:
    sections = service.home_sections()

    assert _ids(sections.featured) == ["p1", "p2", "p7"]
    assert sections.featured_categories == list(FEATURED_CATEGORIES)
