"""Domain models for the restaurant point of sale."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class MenuItem:
    """A purchasable menu item, owned by the catalog."""

    item_id: str
    name: str
    price: Decimal
    is_available: bool = True
    category: str | None = None
    description: str | None = None


@dataclass
class CartLine:
    """One aggregated cart entry for a menu item."""

    item: MenuItem
    quantity: int = 1

    @property
    def subtotal(self) -> Decimal:
        return self.item.price * self.quantity


@dataclass(frozen=True)
class PricingResult:
    """Exact (unrounded) totals for a cart at a given discount rate."""

    subtotal: Decimal
    discount_rate: Decimal
    discount_amount: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total: Decimal


@dataclass(frozen=True)
class Operator:
    """Authenticated cashier identity supplied by the session layer."""

    cashier_id: str
    display_name: str


@dataclass(frozen=True)
class Transaction:
    """A committed sale. Immutable once stored."""

    transaction_id: int
    transaction_number: str
    subtotal: Decimal
    discount_rate: Decimal
    discount_amount: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    payment_method: str
    cashier_id: str | None
    created_at: datetime


@dataclass(frozen=True)
class TransactionLine:
    """A stored line item with the unit price captured at commit time."""

    transaction_id: int
    item_id: str
    item_name: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal
    line_index: int = 0


@dataclass(frozen=True)
class CommittedTransaction:
    """Result of a successful checkout."""

    transaction: Transaction
    lines: list[TransactionLine] = field(default_factory=list)
