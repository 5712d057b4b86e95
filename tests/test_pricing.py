from decimal import Decimal

import pytest

from pos.errors import InvalidDiscount
from pos.models import CartLine, MenuItem
from pos.pricing import calculate_totals, format_money, format_rate, round_money


def _line(price, qty, item_id="x"):
    return CartLine(item=MenuItem(item_id=item_id, name=item_id, price=Decimal(price)), quantity=qty)


def test_nasi_goreng_with_discount(nasi_goreng):
    """2 x 25000, 10% discount, 10% tax"""
    result = calculate_totals([CartLine(item=nasi_goreng, quantity=2)], 10, 10)
    assert result.subtotal == 50000
    assert result.discount_amount == 5000
    assert result.tax_amount == 4500
    assert result.total == 49500


def test_single_item_without_discount():
    result = calculate_totals([_line("10000", 1)], 0, 10)
    assert result.subtotal == 10000
    assert result.discount_amount == 0
    assert result.tax_amount == 1000
    assert result.total == 11000


def test_empty_cart_prices_to_zero():
    result = calculate_totals([], 0)
    assert result.subtotal == 0
    assert result.total == 0


@pytest.mark.parametrize("rate", [0, 1, 10, 33, 50, 99, 100, "12.5"])
@pytest.mark.parametrize("price,qty", [("0", 1), ("1005", 1), ("25000", 3), ("7", 13)])
def test_tax_applies_after_discount(rate, price, qty):
    result = calculate_totals([_line(price, qty)], rate, 10)
    s = Decimal(price) * qty
    d = Decimal(str(rate))
    assert result.discount_amount == s * d / 100
    assert result.tax_amount == (s - result.discount_amount) * 10 / 100
    assert result.total == s - result.discount_amount + result.tax_amount
    assert result.total >= 0


def test_full_discount_leaves_nothing_to_pay():
    result = calculate_totals([_line("25000", 2)], 100, 10)
    assert result.discount_amount == 50000
    assert result.tax_amount == 0
    assert result.total == 0


@pytest.mark.parametrize("rate", [-1, 101, "100.01", "abc", float("nan"), None, True])
def test_rejects_out_of_range_discount(rate):
    with pytest.raises(InvalidDiscount):
        calculate_totals([_line("1000", 1)], rate)


def test_intermediate_values_are_not_rounded():
    """Rounding each step would give 552; rounding once gives 553."""
    result = calculate_totals([_line("1005", 1)], 50, 10)
    assert result.discount_amount == Decimal("502.5")
    assert result.tax_amount == Decimal("50.25")
    assert result.total == Decimal("552.75")
    assert round_money(result.total) == 553


def test_recomputation_is_stable():
    lines = [_line("1005", 3, "a"), _line("333", 7, "b")]
    assert calculate_totals(lines, 17) == calculate_totals(lines, 17)


def test_format_money():
    assert format_money(Decimal("49500")) == "Rp 49,500"
    assert format_money(Decimal("552.75")) == "Rp 553"
    assert format_money(Decimal("0")) == "Rp 0"


def test_format_rate():
    assert format_rate(Decimal("10")) == "10"
    assert format_rate(Decimal("100")) == "100"
    assert format_rate(Decimal("12.50")) == "12.5"
