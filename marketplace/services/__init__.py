"""Stores and services forming the marketplace client data layer.

The catalog store, query helpers and preference store are independent; the
listing service composes them for browsing views.
"""

from .catalog_store import CatalogListener, CatalogStore
from .listing_service import ListingService
from .preference_store import InvalidPreferenceBlob, PreferenceListener, PreferenceStore
from .product_source import (
    FetchError,
    MockProductSource,
    ProductSourceProtocol,
    generate_mock_products,
)

__all__ = [
    "CatalogListener",
    "CatalogStore",
    "FetchError",
    "InvalidPreferenceBlob",
    "ListingService",
    "MockProductSource",
    "PreferenceListener",
    "PreferenceStore",
    "ProductSourceProtocol",
    "generate_mock_products",
]
