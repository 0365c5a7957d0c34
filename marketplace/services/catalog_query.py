"""Pure helpers that turn the catalog into a displayable page.

Nothing here keeps state: views call :func:`query_catalog` on every change of
filters, sort order or page, and the same inputs always give the same page.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence

from marketplace.schemas.catalog import (
    PAGINATION_ELLIPSIS,
    CatalogQueryResult,
    FilterCriteria,
    PageRequest,
    PageToken,
    PriceRange,
    SortKey,
)
from marketplace.schemas.product import Product

# Windows with at most this many pages list every page number.
MAX_PAGES_WITHOUT_ELLIPSIS = 5


def filter_products(
    products: Iterable[Product],
    *,
    criteria: FilterCriteria,
    price_range: PriceRange | None = None,
) -> list[Product]:
    """Return products that satisfy every active criterion."""

    search_lower = criteria.search_term.lower() if criteria.search_term else None

    filtered: list[Product] = []
    for product in products:
        matches_category = True
        if criteria.category is not None:
            matches_category = product.category == criteria.category

        matches_condition = True
        if criteria.condition is not None:
            matches_condition = product.condition == criteria.condition

        matches_price = True
        if price_range is not None:
            matches_price = price_range.contains(product.price)

        matches_search = True
        if search_lower:
            matches_search = (
                search_lower in product.title.lower()
                or search_lower in product.description.lower()
            )

        if matches_category and matches_condition and matches_price and matches_search:
            filtered.append(product)

    return filtered


def sort_products(products: Iterable[Product], sort_key: SortKey | str) -> list[Product]:
    """Order ``products`` by ``sort_key``; equal keys keep their input order."""

    key = SortKey(sort_key)
    # ``sorted`` stays stable with ``reverse=True``, so ties are never flipped.
    if key is SortKey.NEWEST:
        return sorted(products, key=lambda product: product.created_at, reverse=True)
    if key is SortKey.OLDEST:
        return sorted(products, key=lambda product: product.created_at)
    if key is SortKey.PRICE_ASC:
        return sorted(products, key=lambda product: product.price)
    return sorted(products, key=lambda product: product.price, reverse=True)


def count_pages(total_count: int, page_size: int) -> int:
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    if total_count <= 0:
        return 0
    return math.ceil(total_count / page_size)


def paginate_products(
    products: Sequence[Product],
    *,
    page: PageRequest,
) -> list[Product]:
    """Slice one page; pages past the end come back empty."""

    start = (page.page_number - 1) * page.page_size
    return list(products[start : start + page.page_size])


def build_pagination_window(current_page: int, total_pages: int) -> list[PageToken]:
    """Return the page indicators shown under a listing.

    Small listings show every page. Larger ones always show the first and
    last page around a three page window centred on ``current_page``. The
    window grows to four pages when it touches either edge, and ellipses mark
    the gaps.

    >>> build_pagination_window(5, 10)
    [1, 'ellipsis', 4, 5, 6, 'ellipsis', 10]
    """

    if total_pages <= 0:
        return []
    if total_pages <= MAX_PAGES_WITHOUT_ELLIPSIS:
        return list(range(1, total_pages + 1))

    start = max(2, current_page - 1)
    end = min(total_pages - 1, current_page + 1)
    if start == 2:
        end = min(4, total_pages - 1)
    if end == total_pages - 1:
        start = max(2, total_pages - 3)

    window: list[PageToken] = [1]
    if start > 2:
        window.append(PAGINATION_ELLIPSIS)
    window.extend(range(start, end + 1))
    if end < total_pages - 1:
        window.append(PAGINATION_ELLIPSIS)
    window.append(total_pages)
    return window


def query_catalog(
    products: Iterable[Product],
    *,
    criteria: FilterCriteria,
    sort_key: SortKey | str = SortKey.NEWEST,
    price_range: PriceRange | None = None,
    page: PageRequest | None = None,
) -> CatalogQueryResult:
    """Filter, sort and paginate ``products`` in one call.

    ``page.page_number`` is used as given; clamping it to the available pages
    is up to the caller.
    """

    page = page or PageRequest()
    filtered = filter_products(products, criteria=criteria, price_range=price_range)
    ordered = sort_products(filtered, sort_key)
    total_pages = count_pages(len(ordered), page.page_size)

    return CatalogQueryResult(
        items=paginate_products(ordered, page=page),
        total_count=len(ordered),
        total_pages=total_pages,
        page_number=page.page_number,
        page_size=page.page_size,
        pagination_window=build_pagination_window(page.page_number, total_pages),
    )


def clamp_page_number(page_number: int, total_pages: int) -> int:
    """Clamp ``page_number`` into ``[1, total_pages]`` (``1`` when empty)."""

    if total_pages <= 0:
        return 1
    return max(1, min(page_number, total_pages))


__all__ = [
    "MAX_PAGES_WITHOUT_ELLIPSIS",
    "build_pagination_window",
    "clamp_page_number",
    "count_pages",
    "filter_products",
    "paginate_products",
    "query_catalog",
    "sort_products",
]
