"""Compose the catalog store, query engine and preference store for views.

Each method mirrors what one browsing screen needs: the browse listing, a
product page, the favorites list, the profile history and the home page.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from marketplace.schemas.catalog import DEFAULT_PRICE_RANGE, PageRequest, PriceRange, SortKey
from marketplace.schemas.listing import (
    HomeSections,
    ListingPage,
    ProductCard,
    ProductDetailView,
)
from marketplace.schemas.product import Category, Product
from marketplace.services.catalog_query import clamp_page_number, query_catalog
from marketplace.services.catalog_store import CatalogStore
from marketplace.services.preference_store import PreferenceStore

logger = logging.getLogger(__name__)

RELATED_PRODUCTS_LIMIT = 4
FEATURED_CATEGORIES: tuple[Category, ...] = (
    Category.ELECTRONICS,
    Category.CLOTHING,
    Category.HOME_AND_GARDEN,
    Category.SPORTS,
)


class ListingService:
    """Read-side orchestration shared by every browsing view."""

    def __init__(
        self,
        catalog: CatalogStore,
        preferences: PreferenceStore,
        *,
        page_size: int = 12,
    ) -> None:
        if page_size < 1:
            raise ValueError("page_size must be positive")
        self._catalog = catalog
        self._preferences = preferences
        self._page_size = page_size

    @property
    def catalog(self) -> CatalogStore:
        return self._catalog

    @property
    def preferences(self) -> PreferenceStore:
        return self._preferences

    def _cards(self, products: Iterable[Product]) -> list[ProductCard]:
        return [
            ProductCard(product=product, is_favorite=self._preferences.is_favorite(product.id))
            for product in products
        ]

    def _resolve(self, product_ids: Iterable[str]) -> list[Product]:
        """Map ids to loaded products, skipping ids missing from the catalog."""

        resolved: list[Product] = []
        for product_id in product_ids:
            product = self._catalog.get_by_id(product_id)
            if product is not None:
                resolved.append(product)
        return resolved

    def apply_query_params(self, params: Mapping[str, str]) -> SortKey | None:
        """Apply ``category``/``query`` URL parameters and return a valid ``sort``.

        Unknown categories and sort values are ignored.
        """

        category = params.get("category")
        if category:
            try:
                self._catalog.set_filter("category", Category(category))
            except ValueError:
                logger.info("Ignoring unknown category parameter: %s", category)

        query = params.get("query")
        if query:
            self._catalog.set_filter("search", query)

        sort = params.get("sort")
        if not sort:
            return None
        try:
            return SortKey(sort)
        except ValueError:
            logger.info("Ignoring unknown sort parameter: %s", sort)
            return None

    def browse(
        self,
        *,
        sort_key: SortKey | str = SortKey.NEWEST,
        price_range: PriceRange | None = DEFAULT_PRICE_RANGE,
        page_number: int = 1,
        page_size: int | None = None,
    ) -> ListingPage:
        """Return the requested page, clamped into the available page range.

        Listings are limited to ``DEFAULT_PRICE_RANGE`` unless another range is
        given; pass ``None`` for no price bounds.
        """

        size = page_size or self._page_size
        key = SortKey(sort_key)
        criteria = self._catalog.filters
        products = self._catalog.products

        requested = max(1, page_number)
        result = query_catalog(
            products,
            criteria=criteria,
            sort_key=key,
            price_range=price_range,
            page=PageRequest(page_size=size, page_number=requested),
        )
        clamped = clamp_page_number(requested, result.total_pages)
        if clamped != requested:
            result = query_catalog(
                products,
                criteria=criteria,
                sort_key=key,
                price_range=price_range,
                page=PageRequest(page_size=size, page_number=clamped),
            )

        return ListingPage(
            cards=self._cards(result.items),
            total_count=result.total_count,
            total_pages=result.total_pages,
            page_number=result.page_number,
            page_size=result.page_size,
            sort_key=key,
            pagination_window=result.pagination_window,
        )

    def view_product(self, product_id: str) -> ProductDetailView | None:
        """Open a product page and record the visit in the history.

        Unknown ids return ``None`` and leave the history untouched.
        """

        product = self._catalog.get_by_id(product_id)
        if product is None:
            return None

        self._preferences.add_to_recently_viewed(product.id)
        related = [
            candidate
            for candidate in self._catalog.get_by_category(product.category)
            if candidate.id != product.id
        ][:RELATED_PRODUCTS_LIMIT]

        return ProductDetailView(
            product=product,
            is_favorite=self._preferences.is_favorite(product.id),
            related=related,
        )

    def toggle_favorite(self, product_id: str) -> bool:
        return self._preferences.toggle_favorite(product_id)

    def favorite_products(self) -> list[ProductCard]:
        """Favorites in most-recently-added order."""

        return self._cards(self._resolve(self._preferences.favorites))

    def recently_viewed_products(self) -> list[ProductCard]:
        return self._cards(self._resolve(self._preferences.recently_viewed))

    def seller_products(self, seller_id: str) -> list[ProductCard]:
        return self._cards(self._catalog.get_by_seller(seller_id))

    def home_sections(self) -> HomeSections:
        return HomeSections(
            featured=self._cards(self._catalog.featured_products),
            featured_categories=list(FEATURED_CATEGORIES),
        )


__all__ = [
    "FEATURED_CATEGORIES",
    "ListingService",
    "RELATED_PRODUCTS_LIMIT",
]
