"""Receipt preview modal shown after a successful checkout."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Static

from pos.receipt import ReceiptDocument


class ReceiptModal(ModalScreen[None]):
    """Centered modal with the plain-text rendering of a receipt."""

    BINDINGS = [
        ("escape", "close", "Close"),
        ("q", "close", "Close"),
        ("enter", "close", "Close"),
        ("ctrl+c", "close", "Close"),
    ]

    CSS = """
    ReceiptModal {
        align: center middle;
        background: $background 60%;
    }

    #receipt-dialog {
        width: 50;
        height: auto;
        max-height: 90%;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #receipt-body {
        color: white;
    }

    #receipt-help {
        margin-top: 1;
        color: #dddddd;
    }
    """

    def __init__(self, document: ReceiptDocument, export_note: str = "") -> None:
        super().__init__()
        self.document = document
        self.export_note = export_note

    def compose(self) -> ComposeResult:
        with Container(id="receipt-dialog"):
            yield Static(id="receipt-body")
            yield Static(id="receipt-help")

    def on_mount(self) -> None:
        body = Text("\n".join(self.document.text_lines()), style="white")
        self.query_one("#receipt-body", Static).update(body)
        help_text = "Enter/Esc/q close"
        if self.export_note:
            help_text = f"{self.export_note}\n{help_text}"
        self.query_one("#receipt-help", Static).update(help_text)

    def action_close(self) -> None:
        self.dismiss()
