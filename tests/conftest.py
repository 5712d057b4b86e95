from decimal import Decimal

import pytest

from pos.models import MenuItem
from pos.persistence import TransactionStore


@pytest.fixture(autouse=True)
def _isolated_runtime(tmp_path, monkeypatch):
    monkeypatch.setattr("pos.debuglog.DEBUG_LOG_PATH", str(tmp_path / "debug.log"))
    monkeypatch.setattr("pos.receipt.RECEIPT_TIMEZONE", "Asia/Jakarta")


@pytest.fixture
def store(tmp_path):
    store = TransactionStore(tmp_path / "pos.db")
    store.bootstrap_schema()
    return store


@pytest.fixture
def nasi_goreng():
    return MenuItem(item_id="nasi_goreng", name="Nasi Goreng", price=Decimal("25000"), category="Makanan")


@pytest.fixture
def es_teh():
    return MenuItem(item_id="es_teh", name="Es Teh Manis", price=Decimal("5000"), category="Minuman")
