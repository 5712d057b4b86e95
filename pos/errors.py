"""Error taxonomy for the transaction engine."""

from __future__ import annotations


class PosError(Exception):
    """Base class for all point-of-sale engine errors."""


class EmptyCartError(PosError):
    """Checkout attempted with no cart lines."""

    def __init__(self) -> None:
        super().__init__("Cart is empty")


class InvalidDiscount(PosError, ValueError):
    """Discount rate outside the inclusive 0..100 range."""

    def __init__(self, rate: object) -> None:
        super().__init__(f"Discount rate must be between 0 and 100, got {rate!r}")
        self.rate = rate


class CatalogUnavailable(PosError):
    """Menu catalog could not be loaded. Safe to retry."""


class CommitFailure(PosError):
    """A transaction write failed and nothing was persisted."""


class PartialCommitAnomaly(PosError):
    """A parent transaction is visible without its line items.

    This is a data-integrity fault that needs reconciliation, not a normal
    user-facing checkout error.
    """

    def __init__(self, transaction_number: str) -> None:
        super().__init__(f"Transaction {transaction_number} persisted without its line items")
        self.transaction_number = transaction_number
