"""In-memory catalog store: the single source of truth for loaded products.

The store owns the product collection, the loading flag, the last load error
and the currently selected :class:`FilterCriteria`. It does not hold query
results; views derive those with :mod:`marketplace.services.catalog_query`.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from typing import Any

from marketplace.schemas.catalog import CatalogSnapshot, FilterCriteria, FilterField
from marketplace.schemas.product import Category, Product
from marketplace.services.product_source import FetchError, ProductSourceProtocol

logger = logging.getLogger(__name__)

CatalogListener = Callable[[CatalogSnapshot], None]


def _index_products(products: Iterable[Product]) -> dict[str, Product]:
    """Map ids to products, rejecting collections with repeated ids."""

    index: dict[str, Product] = {}
    for product in products:
        if product.id in index:
            raise FetchError(f"Duplicate product id in catalog: {product.id}")
        index[product.id] = product
    return index


def _log_unexpected_load_error(task: asyncio.Task[None]) -> None:
    """Retrieve the load outcome even when every awaiting caller was cancelled."""

    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Catalog load raised an unexpected error: %r", exc)


class CatalogStore:
    """Hold the product collection and the active filter criteria.

    ``fetch`` is the only coroutine. Overlapping calls share one in-flight
    load, and the load is shielded so a cancelled caller does not abort it
    for everybody else.
    """

    def __init__(self, source: ProductSourceProtocol) -> None:
        self._source = source
        self._products: tuple[Product, ...] = ()
        self._featured_products: tuple[Product, ...] = ()
        self._index: dict[str, Product] = {}
        self._is_loading = False
        self._loaded = False
        self._error: str | None = None
        self._filters = FilterCriteria()
        self._listeners: list[CatalogListener] = []
        self._inflight: asyncio.Task[None] | None = None

    # -- Read surface ---------------------------------------------------------

    @property
    def products(self) -> tuple[Product, ...]:
        return self._products

    @property
    def featured_products(self) -> tuple[Product, ...]:
        return self._featured_products

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def filters(self) -> FilterCriteria:
        """Return a copy of the criteria; mutate them through :meth:`set_filter`."""

        return self._filters.model_copy()

    def snapshot(self) -> CatalogSnapshot:
        return CatalogSnapshot(
            products=self._products,
            featured_products=self._featured_products,
            is_loading=self._is_loading,
            error=self._error,
            filters=self._filters.model_copy(),
        )

    def get_by_id(self, product_id: str) -> Product | None:
        return self._index.get(product_id)

    def get_by_category(self, category: Category | str) -> list[Product]:
        try:
            wanted = Category(category)
        except ValueError:
            logger.debug("Unknown category requested: %s", category)
            return []
        return [product for product in self._products if product.category == wanted]

    def get_by_seller(self, seller_id: str) -> list[Product]:
        return [product for product in self._products if product.seller_id == seller_id]

    # -- Loading ----------------------------------------------------------------

    async def fetch(self, *, force: bool = False) -> None:
        """Load the catalog from the product source.

        Already-loaded stores return immediately unless ``force`` is set. A
        failed load records :attr:`error` and keeps the previous collection.
        """

        if self._inflight is not None and not self._inflight.done():
            logger.debug("Catalog fetch already in flight; joining it")
        elif self._loaded and not force:
            return
        else:
            self._inflight = asyncio.get_running_loop().create_task(self._load())
            self._inflight.add_done_callback(_log_unexpected_load_error)

        await asyncio.shield(self._inflight)

    async def _load(self) -> None:
        self._is_loading = True
        self._notify()
        try:
            products = tuple(await self._source.load_products())
            index = _index_products(products)
        except FetchError as exc:
            self._error = str(exc) or "Failed to fetch products"
            logger.warning("Catalog fetch failed: %s", self._error)
        else:
            self._products = products
            self._featured_products = tuple(p for p in products if p.featured)
            self._index = index
            self._loaded = True
            self._error = None
            logger.info(
                "Catalog loaded with %d products (%d featured)",
                len(self._products),
                len(self._featured_products),
            )
        finally:
            self._is_loading = False
            self._notify()

    # -- Filters ----------------------------------------------------------------

    def set_filter(self, field: FilterField, value: Any) -> FilterCriteria:
        """Assign one criterion; ``None`` (or ``""`` for search) unsets it."""

        if field not in FilterCriteria.model_fields:
            raise ValueError(f"Unknown filter field: {field}")

        updated = self._filters.model_copy()
        setattr(updated, field, value)
        self._filters = updated
        self._notify()
        return updated.model_copy()

    def clear_filters(self) -> FilterCriteria:
        self._filters = FilterCriteria()
        self._notify()
        return self._filters.model_copy()

    # -- Observers ----------------------------------------------------------------

    def subscribe(self, listener: CatalogListener) -> Callable[[], None]:
        """Register ``listener`` for state changes and return an unsubscribe hook."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)


__all__ = ["CatalogListener", "CatalogStore"]
