import pytest

from pos.catalog import load_catalog
from pos.errors import CatalogUnavailable
from pos.persistence import TransactionStore


def test_load_catalog_returns_available_items(store):
    items = load_catalog(store)
    assert items
    assert all(item.is_available for item in items)


def test_load_catalog_failure_is_retryable(tmp_path):
    store = TransactionStore(tmp_path / "empty.db")
    with pytest.raises(CatalogUnavailable):
        load_catalog(store)

    store.bootstrap_schema()
    assert load_catalog(store)
