"""Deterministic cart pricing with a single presentation-time rounding step."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable

from pos.config import CURRENCY_DECIMALS, CURRENCY_SYMBOL, TAX_RATE
from pos.errors import InvalidDiscount
from pos.models import CartLine, PricingResult

_HUNDRED = Decimal(100)
_ZERO = Decimal(0)


def to_decimal(value: object) -> Decimal:
    """Convert an int, str, float or Decimal to an exact Decimal."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # Go through str so 0.1 stays 0.1 rather than its binary expansion.
        return Decimal(str(value))
    return Decimal(value)


def validate_discount_rate(rate: object) -> Decimal:
    """Return the rate as a Decimal, or raise InvalidDiscount."""
    if isinstance(rate, bool):
        raise InvalidDiscount(rate)
    try:
        value = to_decimal(rate)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise InvalidDiscount(rate) from exc
    if not value.is_finite() or not (_ZERO <= value <= _HUNDRED):
        raise InvalidDiscount(rate)
    return value


def calculate_totals(
    lines: Iterable[CartLine],
    discount_rate: object = 0,
    tax_rate: object = TAX_RATE,
) -> PricingResult:
    """
    Price a cart.

    Tax is charged on the post-discount amount. Every intermediate value is
    kept exact; use `round_money` only when displaying or printing.
    """
    rate = validate_discount_rate(discount_rate)
    tax = to_decimal(tax_rate)

    subtotal = sum((line.subtotal for line in lines), _ZERO)
    discount_amount = subtotal * rate / _HUNDRED
    taxable = subtotal - discount_amount
    tax_amount = taxable * tax / _HUNDRED
    total = taxable + tax_amount

    return PricingResult(
        subtotal=subtotal,
        discount_rate=rate,
        discount_amount=discount_amount,
        tax_rate=tax,
        tax_amount=tax_amount,
        total=max(_ZERO, total),
    )


def round_money(value: Decimal) -> Decimal:
    """Round to the currency minor unit (half up)."""
    quantum = Decimal(1).scaleb(-CURRENCY_DECIMALS)
    return value.quantize(quantum, rounding=ROUND_HALF_UP)


def format_money(value: Decimal) -> str:
    """Format an amount for display, e.g. ``Rp 49,500``."""
    return f"{CURRENCY_SYMBOL} {round_money(value):,.{CURRENCY_DECIMALS}f}"


def format_rate(rate: Decimal) -> str:
    """Format a percent rate without trailing zeros (``10``, ``12.5``)."""
    normalized = rate.normalize()
    if normalized == normalized.to_integral_value():
        return str(normalized.quantize(Decimal(1)))
    return format(normalized, "f")
