import sqlite3
from concurrent.futures import ThreadPoolExecutor
from contextlib import closing, contextmanager
from decimal import Decimal

import pytest

from pos.cart import Cart
from pos.committer import TransactionCommitter
from pos.errors import CommitFailure, EmptyCartError, InvalidDiscount, PartialCommitAnomaly
from pos.persistence import TransactionPayload, TransactionStore, WriteUnit


class _FailingLinesUnit(WriteUnit):
    def create_transaction_lines(self, transaction_id, lines):
        raise sqlite3.OperationalError("disk I/O error")


class FailingLinesStore(TransactionStore):
    """Line-item insert fails inside the atomic unit."""

    @contextmanager
    def atomic(self):
        with closing(self._connect()) as conn:
            with conn:
                yield _FailingLinesUnit(conn)


class TwoStepStore(TransactionStore):
    """Parent row commits on its own before the line insert fails."""

    @contextmanager
    def atomic(self):
        with closing(self._connect()) as conn:
            conn.isolation_level = None
            yield _FailingLinesUnit(conn)


@pytest.fixture
def cart(nasi_goreng, es_teh):
    cart = Cart()
    cart.add_item(nasi_goreng)
    cart.add_item(nasi_goreng)
    cart.add_item(es_teh)
    return cart


def test_commit_persists_transaction_and_lines(store, cart):
    committed = TransactionCommitter(store).commit(cart, 10, "cashier-01")
    record = committed.transaction

    assert record.transaction_id > 0
    assert record.transaction_number.startswith("TRX")
    assert record.payment_method == "cash"
    assert record.cashier_id == "cashier-01"
    assert record.subtotal == Decimal("55000")
    assert record.discount_rate == 10
    assert record.discount_amount == Decimal("5500")
    assert record.tax_amount == Decimal("4950")
    assert record.total_amount == Decimal("54450")

    stored = store.list_transaction_lines(record.transaction_id)
    assert stored == committed.lines
    assert [(line.item_id, line.quantity, line.unit_price) for line in stored] == [
        ("nasi_goreng", 2, Decimal("25000")),
        ("es_teh", 1, Decimal("5000")),
    ]
    assert sum(line.subtotal for line in stored) == record.subtotal


def test_commit_does_not_mutate_cart(store, cart):
    TransactionCommitter(store).commit(cart, 0, "cashier-01")
    assert [(line.item.item_id, line.quantity) for line in cart] == [("nasi_goreng", 2), ("es_teh", 1)]


def test_empty_cart_is_rejected_without_records(store):
    with pytest.raises(EmptyCartError):
        TransactionCommitter(store).commit(Cart(), 0, "cashier-01")
    assert store.list_recent_transactions() == []


def test_invalid_discount_is_rejected_without_records(store, cart):
    with pytest.raises(InvalidDiscount):
        TransactionCommitter(store).commit(cart, 150, "cashier-01")
    assert store.list_recent_transactions() == []


def test_failed_line_write_leaves_nothing_behind(tmp_path, cart):
    failing = FailingLinesStore(tmp_path / "pos.db")
    failing.bootstrap_schema()

    with pytest.raises(CommitFailure):
        TransactionCommitter(failing).commit(cart, 10, "cashier-01")

    assert failing.list_recent_transactions() == []
    assert failing.find_orphaned_transactions() == []
    assert len(cart) == 2


def test_retry_after_failure_creates_exactly_one_transaction(tmp_path, cart):
    db_path = tmp_path / "pos.db"
    failing = FailingLinesStore(db_path)
    failing.bootstrap_schema()
    with pytest.raises(CommitFailure):
        TransactionCommitter(failing).commit(cart, 10, "cashier-01")

    healthy = TransactionStore(db_path)
    TransactionCommitter(healthy).commit(cart, 10, "cashier-01")
    transactions = healthy.list_recent_transactions()
    assert len(transactions) == 1
    assert len(healthy.list_transaction_lines(transactions[0].transaction_id)) == 2


def test_parent_without_lines_is_reported_as_anomaly(tmp_path, cart):
    two_step = TwoStepStore(tmp_path / "pos.db")
    two_step.bootstrap_schema()

    with pytest.raises(PartialCommitAnomaly) as excinfo:
        TransactionCommitter(two_step, number_source=lambda: "TRX-PARTIAL").commit(cart, 0, "cashier-01")

    assert excinfo.value.transaction_number == "TRX-PARTIAL"
    assert [t.transaction_number for t in two_step.find_orphaned_transactions()] == ["TRX-PARTIAL"]


def test_number_collision_fails_cleanly(store, cart):
    committer = TransactionCommitter(store, number_source=lambda: "TRX-SAME")
    first = committer.commit(cart, 0, "cashier-01")

    with pytest.raises(CommitFailure):
        committer.commit(cart, 0, "cashier-02")

    transactions = store.list_recent_transactions()
    assert [t.transaction_id for t in transactions] == [first.transaction.transaction_id]
    assert store.find_orphaned_transactions() == []


def test_concurrent_stations_get_unique_numbers(store, nasi_goreng):
    def checkout(station):
        cart = Cart()
        cart.add_item(nasi_goreng)
        committer = TransactionCommitter(TransactionStore(store.db_path))
        return committer.commit(cart, 0, f"station-{station}").transaction.transaction_number

    with ThreadPoolExecutor(max_workers=4) as pool:
        numbers = list(pool.map(checkout, range(20)))

    assert len(set(numbers)) == 20
    assert len(store.list_recent_transactions(limit=50)) == 20
    assert store.find_orphaned_transactions() == []


def test_collision_with_older_lineless_record_is_not_an_anomaly(store, cart):
    """The older row is not ours, so a number clash stays a plain CommitFailure."""
    with store.atomic() as unit:
        unit.create_transaction(
            TransactionPayload(
                transaction_number="TRX-OLD",
                subtotal=Decimal("0"),
                discount_rate=Decimal("0"),
                discount_amount=Decimal("0"),
                tax_rate=Decimal("10"),
                tax_amount=Decimal("0"),
                total_amount=Decimal("0"),
                payment_method="cash",
                cashier_id="cashier-09",
            )
        )

    with pytest.raises(CommitFailure):
        TransactionCommitter(store, number_source=lambda: "TRX-OLD").commit(cart, 0, "cashier-01")

    assert len(store.list_recent_transactions()) == 1


def test_unreachable_storage_path_is_a_commit_failure(tmp_path, cart):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    unreachable = TransactionStore(blocker / "pos.db")

    with pytest.raises(CommitFailure):
        TransactionCommitter(unreachable).commit(cart, 0, "cashier-01")
    assert len(cart) == 2
