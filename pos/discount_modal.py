"""Discount rate entry modal with a live totals preview."""

from __future__ import annotations

from typing import Iterable

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

from pos.errors import InvalidDiscount
from pos.models import CartLine
from pos.pricing import calculate_totals, validate_discount_rate
from pos.rendering import format_totals

_MAX_DIGITS = 3


class DiscountModal(ModalScreen[int | None]):
    """Prompt for a whole-percent discount and preview what it does to the cart."""

    CSS = """
    DiscountModal {
        align: center middle;
        background: $background 60%;
    }

    #discount-dialog {
        width: 56;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #discount-value {
        border: heavy $secondary;
        padding: 0 1;
        color: white;
        margin-bottom: 1;
    }

    #discount-preview {
        color: white;
        margin-bottom: 1;
    }

    #discount-error {
        color: #ffb3b3;
    }
    """

    BINDINGS = [
        ("escape", "cancel", "Cancel"),
        ("ctrl+c", "cancel", "Cancel"),
        ("enter", "confirm", "Apply"),
        ("backspace", "delete_digit", "Delete"),
    ]

    def __init__(self, lines: Iterable[CartLine], current: int = 0) -> None:
        super().__init__()
        self.lines = [CartLine(item=line.item, quantity=line.quantity) for line in lines]
        self.value = str(current) if current else ""
        self.error = ""

    def compose(self) -> ComposeResult:
        with Container(id="discount-dialog"):
            yield Static(Text("Diskon (%)", style="bold"))
            yield Static(id="discount-value")
            yield Static(id="discount-preview")
            yield Static(id="discount-error")
            yield Static("Digits, Enter apply, Backspace delete, Esc cancel", classes="help")

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        char = event.character or ""
        if not (event.is_printable and char.isdigit()):
            return
        if len(self.value) < _MAX_DIGITS:
            self.value = (self.value + char).lstrip("0")
        self.error = ""
        self._refresh_content()
        event.stop()

    def action_delete_digit(self) -> None:
        self.value = self.value[:-1]
        self.error = ""
        self._refresh_content()

    def action_cancel(self) -> None:
        self.dismiss(None)

    def action_confirm(self) -> None:
        try:
            rate = validate_discount_rate(self.value or 0)
        except InvalidDiscount as exc:
            self.error = str(exc)
            self._refresh_content()
            return
        self.dismiss(int(rate))

    def preview(self) -> Text:
        """Cart totals at the typed rate, or why the rate is rejected."""
        try:
            pricing = calculate_totals(self.lines, self.value or 0)
        except InvalidDiscount as exc:
            return Text(str(exc), style="#ffb3b3")
        return format_totals(pricing)

    def _refresh_content(self) -> None:
        self.query_one("#discount-value", Static).update(f"{self.value or '0'} %")
        self.query_one("#discount-preview", Static).update(self.preview())
        self.query_one("#discount-error", Static).update(self.error)
