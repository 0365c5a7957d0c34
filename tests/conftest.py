"""Pytest configuration and shared fixtures for the marketplace test suite.

The ``pytest`` plugin system automatically imports ``tests.conftest``. We use
that behavior to ensure the repository root is present on ``sys.path`` before
any test modules import application code.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio

from marketplace.schemas.product import Product
from marketplace.services.catalog_store import CatalogStore
from marketplace.services.preference_store import PreferenceStore
from marketplace.services.product_source import MockProductSource
from marketplace.storage import InMemoryDurableStore
from tests import _ensure_repo_on_path
from tests.support.factories import sample_catalog


def pytest_configure(config: pytest.Config) -> None:
    """Hook executed by pytest prior to running any tests."""

    _ensure_repo_on_path()


@pytest.fixture
def products() -> list[Product]:
    return sample_catalog()


@pytest.fixture
def storage() -> InMemoryDurableStore:
    return InMemoryDurableStore()


@pytest.fixture
def preferences(storage: InMemoryDurableStore) -> PreferenceStore:
    return PreferenceStore(storage)


@pytest.fixture
def source(products: list[Product]) -> MockProductSource:
    return MockProductSource(products, delay_seconds=0)


@pytest_asyncio.fixture
async def loaded_catalog(source: MockProductSource) -> AsyncIterator[CatalogStore]:
    """Catalog store that has already completed one successful fetch."""

    store = CatalogStore(source)
    await store.fetch()
    yield store
