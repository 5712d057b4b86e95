from decimal import Decimal

from pos.cart import Cart, filter_by_name
from pos.models import MenuItem


def test_add_same_item_twice_merges_lines(nasi_goreng):
    cart = Cart()
    cart.add_item(nasi_goreng)
    cart.add_item(nasi_goreng)
    assert len(cart) == 1
    line = cart.get("nasi_goreng")
    assert line.quantity == 2
    assert line.subtotal == Decimal("50000")


def test_insertion_order_is_preserved(nasi_goreng, es_teh):
    cart = Cart()
    cart.add_item(es_teh)
    cart.add_item(nasi_goreng)
    cart.add_item(es_teh)
    assert [line.item.item_id for line in cart] == ["es_teh", "nasi_goreng"]


def test_change_quantity_updates_subtotal(nasi_goreng):
    cart = Cart()
    cart.add_item(nasi_goreng)
    line = cart.change_quantity("nasi_goreng", 2)
    assert line.quantity == 3
    assert line.subtotal == Decimal("75000")


def test_change_quantity_to_zero_removes_line(nasi_goreng, es_teh):
    cart = Cart()
    cart.add_item(nasi_goreng)
    cart.add_item(es_teh)
    assert cart.change_quantity("nasi_goreng", -1) is None
    assert "nasi_goreng" not in cart
    assert [line.item.item_id for line in cart] == ["es_teh"]


def test_large_negative_delta_never_leaves_negative_line(es_teh):
    cart = Cart()
    cart.add_item(es_teh)
    cart.add_item(es_teh)
    cart.change_quantity("es_teh", -10)
    assert cart.is_empty()
    assert all(line.quantity >= 1 for line in cart)


def test_change_quantity_on_missing_item_is_noop(es_teh):
    cart = Cart()
    cart.add_item(es_teh)
    assert cart.change_quantity("missing", 1) is None
    assert len(cart) == 1


def test_remove_item_and_missing_remove(nasi_goreng):
    cart = Cart()
    cart.add_item(nasi_goreng)
    cart.remove_item("missing")
    assert len(cart) == 1
    cart.remove_item("nasi_goreng")
    assert cart.is_empty()


def test_clear(nasi_goreng, es_teh):
    cart = Cart()
    cart.add_item(nasi_goreng)
    cart.add_item(es_teh)
    cart.clear()
    assert cart.is_empty()
    assert cart.lines == []


def test_filter_by_name_is_case_insensitive():
    catalog = [
        MenuItem(item_id="a", name="Nasi Goreng", price=Decimal("25000")),
        MenuItem(item_id="b", name="Mie Goreng", price=Decimal("23000")),
        MenuItem(item_id="c", name="Es Teh Manis", price=Decimal("5000")),
    ]
    assert [item.item_id for item in filter_by_name(catalog, "GORENG")] == ["a", "b"]
    assert [item.item_id for item in filter_by_name(catalog, "teh")] == ["c"]
    assert filter_by_name(catalog, "") == catalog
    assert filter_by_name(catalog, "rendang") == []
