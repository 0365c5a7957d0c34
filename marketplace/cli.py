"""Command line front end for browsing the catalog and managing preferences.

Usage:
    python -m marketplace browse --category Electronics --sort price-asc --page 2
    python -m marketplace view product-3
    python -m marketplace favorites add product-3
    python -m marketplace favorites list
    python -m marketplace recent
    python -m marketplace theme dark
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from collections.abc import Sequence

from pydantic import ValidationError

from marketplace.schemas.catalog import (
    DEFAULT_PRICE_RANGE,
    PAGINATION_ELLIPSIS,
    PriceRange,
    SortKey,
)
from marketplace.schemas.listing import ProductCard
from marketplace.schemas.preferences import Theme
from marketplace.schemas.product import CATEGORIES, CONDITIONS
from marketplace.services.catalog_store import CatalogStore
from marketplace.services.listing_service import ListingService
from marketplace.services.preference_store import PreferenceStore
from marketplace.services.product_source import MockProductSource, generate_mock_products
from marketplace.settings import AppSettings, get_settings
from marketplace.storage import DurableStore, build_durable_store

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(active_settings: AppSettings) -> None:
    logging.basicConfig(level=active_settings.log_level_numeric, format=LOG_FORMAT)


def validate_environment(active_settings: AppSettings) -> None:
    """Log warnings for optional settings that were left at their defaults."""

    warnings = active_settings.optional_config_warnings()
    if not warnings:
        return
    logger.warning("Environment Configuration Warnings:")
    for warning in warnings:
        logger.warning("  • %s", warning)


def build_listing_service(
    active_settings: AppSettings,
    *,
    storage: DurableStore | None = None,
) -> ListingService:
    """Wire the stores the way the CLI uses them."""

    source = MockProductSource(
        generate_mock_products(active_settings.catalog_size, seed=active_settings.catalog_seed),
        delay_seconds=active_settings.catalog_fetch_delay_seconds,
    )
    preferences = PreferenceStore(
        storage if storage is not None else build_durable_store(active_settings),
        recently_viewed_limit=active_settings.recently_viewed_limit,
    )
    return ListingService(
        CatalogStore(source),
        preferences,
        page_size=active_settings.catalog_page_size,
    )


def _format_card(card: ProductCard) -> str:
    product = card.product
    marker = "*" if card.is_favorite else " "
    return (
        f"{marker} {product.id:<12} ${product.price:>8.2f}  "
        f"{product.category.value:<14} {product.condition.value:<9} {product.title}"
    )


def _format_window(tokens: Sequence[int | str], current: int) -> str:
    rendered: list[str] = []
    for token in tokens:
        if token == PAGINATION_ELLIPSIS:
            rendered.append("...")
        elif token == current:
            rendered.append(f"[{token}]")
        else:
            rendered.append(str(token))
    return " ".join(rendered)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="marketplace", description="Browse the marketplace catalog"
    )
    commands = parser.add_subparsers(dest="command", required=True)

    browse = commands.add_parser("browse", help="List products with filters")
    browse.add_argument("--category", choices=[c.value for c in CATEGORIES])
    browse.add_argument("--condition", choices=[c.value for c in CONDITIONS])
    browse.add_argument("--search", default="")
    browse.add_argument("--min-price", type=float, default=DEFAULT_PRICE_RANGE.min_price)
    browse.add_argument("--max-price", type=float, default=DEFAULT_PRICE_RANGE.max_price)
    browse.add_argument(
        "--sort", choices=[key.value for key in SortKey], default=SortKey.NEWEST.value
    )
    browse.add_argument("--page", type=int, default=1)
    browse.add_argument("--page-size", type=int, default=None)

    view = commands.add_parser("view", help="Show one product and record the visit")
    view.add_argument("product_id")

    favorites = commands.add_parser("favorites", help="Manage favorites")
    favorites.add_argument("action", choices=["list", "add", "remove", "toggle"])
    favorites.add_argument("product_id", nargs="?")

    commands.add_parser("recent", help="Show recently viewed products")

    theme = commands.add_parser("theme", help="Show or change the theme")
    theme.add_argument("value", nargs="?", choices=[t.value for t in Theme])

    return parser


def _run_browse(service: ListingService, args: argparse.Namespace) -> int:
    try:
        price_range = PriceRange(min_price=args.min_price, max_price=args.max_price)
    except ValidationError as exc:
        logger.debug("Rejected price range: %s", exc)
        print(
            "Invalid price range: --min-price must be non-negative and not "
            "exceed --max-price"
        )
        return 2

    if args.category:
        service.catalog.set_filter("category", args.category)
    if args.condition:
        service.catalog.set_filter("condition", args.condition)
    if args.search:
        service.catalog.set_filter("search", args.search)

    page = service.browse(
        sort_key=args.sort,
        price_range=price_range,
        page_number=args.page,
        page_size=args.page_size,
    )
    if not page.cards:
        print("No products match these filters.")
        return 0
    for card in page.cards:
        print(_format_card(card))
    print()
    print(
        f"{page.total_count} products, page {page.page_number} of {page.total_pages}: "
        f"{_format_window(page.pagination_window, page.page_number)}"
    )
    return 0


def _run_view(service: ListingService, args: argparse.Namespace) -> int:
    detail = service.view_product(args.product_id)
    if detail is None:
        print(f"Product not found: {args.product_id}")
        return 1
    product = detail.product
    print(f"{product.title} ({product.id})")
    print(f"  ${product.price:.2f} - {product.condition.value} - {product.location}")
    print(f"  Sold by {product.seller_name}")
    print(f"  {product.description}")
    print(f"  Favorite: {'yes' if detail.is_favorite else 'no'}")
    if detail.related:
        print("  Related:")
        for related in detail.related:
            print(f"    {related.id:<12} {related.title}")
    return 0


def _run_favorites(service: ListingService, args: argparse.Namespace) -> int:
    if args.action == "list":
        cards = service.favorite_products()
        if not cards:
            print("No favorites yet.")
        for card in cards:
            print(_format_card(card))
        return 0

    if not args.product_id:
        print(f"favorites {args.action} needs a product id")
        return 2
    # Only saving needs a catalog match; stale favorites can still be removed.
    adding = args.action == "add" or (
        args.action == "toggle" and not service.preferences.is_favorite(args.product_id)
    )
    if adding and service.catalog.get_by_id(args.product_id) is None:
        print(f"Product not found: {args.product_id}")
        return 1

    if args.action == "add":
        service.preferences.add_to_favorites(args.product_id)
    elif args.action == "remove":
        service.preferences.remove_from_favorites(args.product_id)
    else:
        service.toggle_favorite(args.product_id)
    state = "saved" if service.preferences.is_favorite(args.product_id) else "not saved"
    print(f"{args.product_id} is {state}")
    return 0


def _run_recent(service: ListingService, _args: argparse.Namespace) -> int:
    cards = service.recently_viewed_products()
    if not cards:
        print("Nothing viewed yet.")
    for card in cards:
        print(_format_card(card))
    return 0


def _run_theme(service: ListingService, args: argparse.Namespace) -> int:
    if args.value:
        service.preferences.set_theme(args.value)
    print(f"Theme: {service.preferences.theme.value}")
    return 0


_HANDLERS = {
    "browse": _run_browse,
    "view": _run_view,
    "favorites": _run_favorites,
    "recent": _run_recent,
    "theme": _run_theme,
}


def main(
    argv: Sequence[str] | None = None,
    *,
    active_settings: AppSettings | None = None,
    storage: DurableStore | None = None,
) -> int:
    args = _build_parser().parse_args(argv)
    active_settings = active_settings or get_settings()
    configure_logging(active_settings)
    validate_environment(active_settings)

    service = build_listing_service(active_settings, storage=storage)
    if args.command != "theme":
        asyncio.run(service.catalog.fetch())
        if service.catalog.error:
            print(f"Could not load the catalog: {service.catalog.error}")
            return 1

    return _HANDLERS[args.command](service, args)


__all__ = [
    "build_listing_service",
    "configure_logging",
    "main",
    "validate_environment",
]
