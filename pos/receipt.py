"""Receipt content built from a committed transaction."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable
from zoneinfo import ZoneInfo

from pos.config import (
    BUSINESS_ADDRESS,
    BUSINESS_NAME,
    BUSINESS_PHONE,
    RECEIPT_CLOSING_MESSAGE,
    RECEIPT_TIMEZONE,
)
from pos.models import Transaction, TransactionLine
from pos.pricing import format_money, format_rate

RECEIPT_DATETIME_FORMAT = "%d/%m/%Y %H:%M"
TEXT_RECEIPT_WIDTH = 42
_QTY_WIDTH = 4
_AMOUNT_WIDTH = 12


@dataclass(frozen=True)
class ReceiptItemRow:
    """One item table row, already formatted for display."""

    name: str
    quantity: str
    unit_price: str
    subtotal: str


@dataclass(frozen=True)
class ReceiptTotalRow:
    label: str
    amount: str
    emphasized: bool = False


@dataclass(frozen=True)
class ReceiptDocument:
    """Printable receipt content in display order."""

    header: tuple[str, ...]
    transaction_number: str
    created_at: str
    cashier_name: str
    items: tuple[ReceiptItemRow, ...]
    totals: tuple[ReceiptTotalRow, ...]
    closing_message: str

    @property
    def meta_lines(self) -> tuple[str, ...]:
        return (
            f"No. Transaksi: {self.transaction_number}",
            f"Tanggal: {self.created_at}",
            f"Kasir: {self.cashier_name}",
        )

    def text_lines(self, width: int = TEXT_RECEIPT_WIDTH) -> list[str]:
        """Render as fixed-width plain text, one string per line."""
        name_width = width - _QTY_WIDTH - (_AMOUNT_WIDTH * 2) - 3
        heavy = "=" * width
        light = "-" * width

        lines = [line.center(width).rstrip() for line in self.header]
        lines.append(heavy)
        lines.extend(self.meta_lines)
        lines.append(heavy)
        lines.append(
            f"{'ITEM':<{name_width}} {'QTY':>{_QTY_WIDTH}} {'HARGA':>{_AMOUNT_WIDTH}} {'SUBTOTAL':>{_AMOUNT_WIDTH}}"
        )
        lines.append(light)
        for row in self.items:
            name = row.name
            if len(name) > name_width:
                lines.append(name)
                name = ""
            lines.append(
                f"{name:<{name_width}} {row.quantity:>{_QTY_WIDTH}} "
                f"{row.unit_price:>{_AMOUNT_WIDTH}} {row.subtotal:>{_AMOUNT_WIDTH}}"
            )
        lines.append(heavy)
        for total in self.totals:
            label = total.label.upper() if total.emphasized else total.label
            gap = max(1, width - len(label) - len(total.amount))
            lines.append(f"{label}{' ' * gap}{total.amount}")
        lines.append("")
        lines.append(self.closing_message.center(width).rstrip())
        return lines


def local_receipt_time(created_at: datetime) -> datetime:
    """Convert a stored UTC timestamp to the till's wall-clock time."""
    if not RECEIPT_TIMEZONE:
        return created_at.astimezone()
    return created_at.astimezone(ZoneInfo(RECEIPT_TIMEZONE))


def receipt_filename(transaction_number: str, suffix: str = ".pdf") -> str:
    """Deterministic export file name for a transaction."""
    return f"receipt-{transaction_number}{suffix}"


def compose_receipt(
    transaction: Transaction,
    lines: Iterable[TransactionLine],
    cashier_name: str,
) -> ReceiptDocument:
    """
    Build receipt content from stored transaction values.

    Amounts come from the persisted transaction, never from the live cart,
    so a receipt can be reproduced after menu prices change.
    """
    items = tuple(
        ReceiptItemRow(
            name=line.item_name,
            quantity=str(line.quantity),
            unit_price=format_money(line.unit_price),
            subtotal=format_money(line.subtotal),
        )
        for line in sorted(lines, key=lambda line: line.line_index)
    )

    totals = [ReceiptTotalRow("Subtotal", format_money(transaction.subtotal))]
    if transaction.discount_amount > 0:
        totals.append(
            ReceiptTotalRow(
                f"Diskon ({format_rate(transaction.discount_rate)}%)",
                f"-{format_money(transaction.discount_amount)}",
            )
        )
    totals.append(ReceiptTotalRow(f"Pajak ({format_rate(transaction.tax_rate)}%)", format_money(transaction.tax_amount)))
    totals.append(ReceiptTotalRow("Total", format_money(transaction.total_amount), emphasized=True))

    return ReceiptDocument(
        header=(BUSINESS_NAME, BUSINESS_ADDRESS, BUSINESS_PHONE),
        transaction_number=transaction.transaction_number,
        created_at=local_receipt_time(transaction.created_at).strftime(RECEIPT_DATETIME_FORMAT),
        cashier_name=cashier_name,
        items=items,
        totals=tuple(totals),
        closing_message=RECEIPT_CLOSING_MESSAGE,
    )
