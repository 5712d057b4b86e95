"""Atomic checkout: cart + discount -> one persisted transaction with its lines."""

from __future__ import annotations

import sqlite3
from typing import Callable, Iterable

from pos.cart import Cart
from pos.config import PAYMENT_METHOD_CASH, TAX_RATE
from pos.debuglog import log_debug
from pos.errors import CommitFailure, EmptyCartError, PartialCommitAnomaly
from pos.models import CartLine, CommittedTransaction
from pos.numbering import generate_transaction_number
from pos.persistence import TransactionLinePayload, TransactionPayload, TransactionStore
from pos.pricing import calculate_totals


def _is_number_collision(exc: Exception) -> bool:
    return isinstance(exc, sqlite3.IntegrityError) and "transactions.transaction_number" in str(exc)


class TransactionCommitter:
    """Turns a cart into a committed transaction.

    The cart is never mutated here; callers clear it after a successful
    commit so a failed checkout can be retried with the same selections.
    """

    def __init__(
        self,
        store: TransactionStore,
        tax_rate: object = TAX_RATE,
        number_source: Callable[[], str] = generate_transaction_number,
    ) -> None:
        self.store = store
        self.tax_rate = tax_rate
        self.number_source = number_source

    def commit(
        self,
        cart: Cart | Iterable[CartLine],
        discount_rate: object,
        cashier_id: str | None,
    ) -> CommittedTransaction:
        lines = list(cart)
        if not lines:
            raise EmptyCartError()

        pricing = calculate_totals(lines, discount_rate, self.tax_rate)
        transaction_number = self.number_source()

        payload = TransactionPayload(
            transaction_number=transaction_number,
            subtotal=pricing.subtotal,
            discount_rate=pricing.discount_rate,
            discount_amount=pricing.discount_amount,
            tax_rate=pricing.tax_rate,
            tax_amount=pricing.tax_amount,
            total_amount=pricing.total,
            payment_method=PAYMENT_METHOD_CASH,
            cashier_id=cashier_id,
        )
        # Unit prices are snapshotted now so later catalog edits do not leak in.
        line_payloads = [
            TransactionLinePayload(
                item_id=line.item.item_id,
                item_name=line.item.name,
                quantity=line.quantity,
                unit_price=line.item.price,
                subtotal=line.subtotal,
            )
            for line in lines
        ]

        log_debug(f"commit_start number={transaction_number} lines={len(line_payloads)} cashier={cashier_id!r}")
        try:
            with self.store.atomic() as unit:
                record = unit.create_transaction(payload)
                stored_lines = unit.create_transaction_lines(record.transaction_id, line_payloads)
        except (sqlite3.Error, OSError) as exc:
            log_debug(f"commit_failed number={transaction_number} error={exc!r}")
            # A number collision means the existing row belongs to another checkout.
            if not _is_number_collision(exc):
                self._raise_if_orphaned(transaction_number, exc)
            raise CommitFailure(f"Could not save transaction {transaction_number}: {exc}") from exc

        log_debug(f"commit_ok number={transaction_number} id={record.transaction_id}")
        return CommittedTransaction(transaction=record, lines=stored_lines)

    def _raise_if_orphaned(self, transaction_number: str, cause: Exception) -> None:
        """Surface a parent record left behind without lines as an anomaly."""
        try:
            orphan = self.store.find_transaction(transaction_number)
            if orphan is None:
                return
            has_lines = bool(self.store.list_transaction_lines(orphan.transaction_id))
        except (sqlite3.Error, OSError) as exc:
            log_debug(f"commit_orphan_check_failed number={transaction_number} error={exc!r}")
            return
        if has_lines:
            return
        log_debug(f"commit_partial_anomaly number={transaction_number} id={orphan.transaction_id}")
        raise PartialCommitAnomaly(transaction_number) from cause
