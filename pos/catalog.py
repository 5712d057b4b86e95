"""Read-only access to the menu catalog."""

from __future__ import annotations

import sqlite3

from pos.debuglog import log_debug
from pos.errors import CatalogUnavailable
from pos.models import MenuItem
from pos.persistence import TransactionStore


def load_catalog(store: TransactionStore) -> list[MenuItem]:
    """Fetch available menu items once per cart session."""
    try:
        items = store.fetch_available_menu()
    except sqlite3.Error as exc:
        log_debug(f"catalog_load_failed error={exc!r}")
        raise CatalogUnavailable(f"Could not load menu: {exc}") from exc
    log_debug(f"catalog_loaded items={len(items)}")
    return items
