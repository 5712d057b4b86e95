"""Rich text helpers for the cashier screen."""

from __future__ import annotations

from rich.text import Text

from pos.models import CartLine, MenuItem, PricingResult
from pos.pricing import format_money, format_rate


def category_style(category: str | None) -> str:
    """Return a consistent badge style for category tags."""
    if category == "Makanan":
        return "bold #ffffff on #b23a48"
    if category == "Minuman":
        return "bold #ffffff on #2f6db5"
    return "bold #0b1f0f on #5fbf72"


def format_menu_item(item: MenuItem) -> Text:
    """Render a catalog row: category tag, name, price and description."""
    text = Text()
    if item.category:
        text.append(item.category[:1].upper(), style=category_style(item.category))
        text.append(" ")
    text.append(item.name)
    text.append(f"  {format_money(item.price)}", style="dim")
    if item.description:
        text.append(f" - {item.description}", style="dim italic")
    return text


def format_cart_line(line: CartLine) -> Text:
    text = Text()
    text.append(line.item.name)
    text.append(f"  x{line.quantity}", style="bold")
    text.append(f"  {format_money(line.subtotal)}", style="dim")
    return text


def format_totals(pricing: PricingResult) -> Text:
    """Render subtotal, discount (only when non-zero), tax and total."""
    text = Text()
    text.append(f"Subtotal: {format_money(pricing.subtotal)}")
    if pricing.discount_amount > 0:
        text.append(
            f"\nDiskon ({format_rate(pricing.discount_rate)}%): -{format_money(pricing.discount_amount)}",
            style="#ff7b7b",
        )
    text.append(f"\nPajak ({format_rate(pricing.tax_rate)}%): {format_money(pricing.tax_amount)}")
    text.append(f"\nTOTAL: {format_money(pricing.total)}", style="bold")
    return text
