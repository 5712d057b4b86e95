"""Main Textual app class."""

from __future__ import annotations

from functools import partial

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.css.query import NoMatches
from textual.events import Key
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.widgets import Header, Static

from pos.cart import Cart, filter_by_name
from pos.catalog import load_catalog
from pos.committer import TransactionCommitter
from pos.config import RECEIPT_EXPORT_DIR
from pos.debuglog import log_debug
from pos.discount_modal import DiscountModal
from pos.errors import CatalogUnavailable, CommitFailure, PartialCommitAnomaly, PosError
from pos.models import CartLine, CommittedTransaction, MenuItem, Operator
from pos.persistence import TransactionStore
from pos.pricing import calculate_totals
from pos.printer import check_printer_dependencies, export_receipt_pdf, print_receipt
from pos.receipt import compose_receipt
from pos.receipt_modal import ReceiptModal
from pos.rendering import format_cart_line, format_menu_item, format_totals


class CashierApp(App):
    """A Textual cashier screen: search the menu, build a cart, pay and print."""

    TITLE = "Restaurant POS"
    SUB_TITLE = "Kasir"

    CSS = """
    Screen {
        layout: vertical;
    }

    #main-layout {
        height: 1fr;
    }

    #cart-pane {
        width: 3fr;
        border: round $primary;
        padding: 1;
    }

    #search-pane {
        width: 2fr;
        border: round $secondary;
        padding: 1;
    }

    #search-bar {
        border: heavy $secondary;
        padding: 0 1;
        margin-bottom: 1;
        height: 4;
    }

    #results {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #cart-list {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #cart-totals {
        height: auto;
        border: tall $surface;
        padding: 0 1;
        margin-top: 1;
    }

    .pane-title {
        text-style: bold;
        margin-bottom: 1;
    }
    """

    input_state = reactive("normal")
    search_query = reactive("")
    selected_index = reactive(0)
    cart_selected_index = reactive(None)
    discount_rate = reactive(0)
    processing = reactive(False)

    BINDINGS = [
        ("tab", "cycle_results(1)", "Next result"),
        ("up", "cycle_results(-1)", "Previous result"),
        ("down", "cycle_results(1)", "Next result"),
        ("enter", "add_selected", "Add item"),
        ("backspace", "backspace_query", "Delete query char"),
        Binding("ctrl+s", "pay_and_print", "Pay + Print", priority=True),
        ("ctrl+c", "cancel_active_mode", "Exit search"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(
        self,
        operator: Operator,
        store: TransactionStore | None = None,
        receipt_dir: str = RECEIPT_EXPORT_DIR,
    ) -> None:
        super().__init__()
        self.operator = operator
        self.store = store or TransactionStore()
        self.committer = TransactionCommitter(self.store)
        self.receipt_dir = receipt_dir
        self.cart = Cart()
        self.catalog: list[MenuItem] = []
        self.system_status = ""
        self.printer_ready = False
        log_debug(f"app_init cashier={operator.cashier_id!r}")

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main-layout"):
            with Vertical(id="cart-pane"):
                yield Static("Keranjang", classes="pane-title")
                yield Static("(keranjang kosong)", id="cart-list")
                yield Static(id="cart-totals")
            with Vertical(id="search-pane"):
                yield Static(id="search-bar")
                yield Static(id="results")

    def on_mount(self) -> None:
        self.store.bootstrap_schema()
        self.printer_ready, msg = check_printer_dependencies()
        log_debug(f"on_mount printer_status={msg!r}")
        self._reload_catalog()
        self._refresh_all()

    def on_key(self, event: Key) -> None:
        if isinstance(self.screen, ModalScreen):
            return
        if self.processing:
            # Cart is frozen until the in-flight checkout resolves.
            event.stop()
            return

        if self.input_state == "normal":
            self._handle_normal_key(event)
            return

        if not event.is_printable or not event.character or len(event.character) != 1:
            return
        self.search_query += event.character
        self.selected_index = 0
        self._refresh_search()
        event.stop()

    def _handle_normal_key(self, event: Key) -> None:
        char = event.character or ""
        if char in {"+", "="}:
            self._change_selected_quantity(1)
            event.stop()
            return
        if char == "-":
            self._change_selected_quantity(-1)
            event.stop()
            return
        if char == "%":
            self._open_discount_modal()
            event.stop()
            return

        if not event.is_printable or len(char) != 1 or not char.isalnum():
            return

        key = char.lower()
        if key == "d":
            self._remove_selected_line()
        elif key == "j":
            self._move_cart_selection(1)
        elif key == "k":
            self._move_cart_selection(-1)
        elif key == "r":
            self._reload_catalog()
            self._refresh_search()
        elif key == "s":
            self.input_state = "active"
            self.search_query = ""
            self.selected_index = 0
            self._refresh_search()
        else:
            return
        event.stop()

    def action_cancel_active_mode(self) -> None:
        if isinstance(self.screen, ModalScreen):
            return
        if self.input_state == "normal":
            return

        self.input_state = "normal"
        self.search_query = ""
        self.selected_index = 0
        self._refresh_search()

    def action_cycle_results(self, delta: int) -> None:
        if isinstance(self.screen, ModalScreen):
            return
        if self.input_state != "active":
            return

        results = self._filtered_results()
        if not results:
            self.selected_index = 0
            self._refresh_results(results)
            return
        self.selected_index = (self.selected_index + delta) % len(results)
        self._refresh_results(results)

    def action_add_selected(self) -> None:
        if isinstance(self.screen, ModalScreen) or self.processing:
            return
        if self.input_state != "active":
            return

        results = self._filtered_results()
        if not results:
            return

        item = results[self.selected_index]
        self.cart.add_item(item)
        self.cart_selected_index = [line.item.item_id for line in self.cart].index(item.item_id)
        self._refresh_cart()

    def action_backspace_query(self) -> None:
        if isinstance(self.screen, ModalScreen):
            return
        if self.input_state != "active":
            return

        if not self.search_query:
            return
        self.search_query = self.search_query[:-1]
        self.selected_index = 0
        self._refresh_search()

    def action_pay_and_print(self) -> None:
        log_debug(
            f"checkout_enter state={self.input_state!r} lines={len(self.cart)} "
            f"processing={self.processing} screen={type(self.screen).__name__}"
        )
        if isinstance(self.screen, ModalScreen):
            log_debug("checkout_blocked reason=modal")
            return
        if self.processing:
            log_debug("checkout_blocked reason=in_flight")
            return
        if self.input_state != "normal":
            self.system_status = "Pay only in NORMAL mode (Ctrl+C to exit search)"
            self._refresh_search()
            log_debug("checkout_blocked reason=not_normal")
            return

        self.processing = True
        self.system_status = "Memproses..."
        self._refresh_search()
        # Snapshot so the worker never sees later cart edits.
        lines = [CartLine(item=line.item, quantity=line.quantity) for line in self.cart]
        self.run_worker(partial(self._commit_worker, lines, self.discount_rate), thread=True, group="checkout")

    def _commit_worker(self, lines: list[CartLine], discount_rate: int) -> None:
        try:
            committed = self.committer.commit(lines, discount_rate, self.operator.cashier_id)
        except PosError as exc:
            self.call_from_thread(self._on_commit_failed, exc)
            return
        self.call_from_thread(self._on_commit_succeeded, committed)

    def _on_commit_failed(self, exc: PosError) -> None:
        self.processing = False
        if isinstance(exc, PartialCommitAnomaly):
            message = f"Data integrity issue: {exc}. Report to admin for reconciliation."
            severity = "error"
        elif isinstance(exc, CommitFailure):
            message = "Gagal memproses transaksi"
            severity = "error"
        else:
            message = str(exc)
            severity = "warning"
        self.system_status = message
        self.notify(message, severity=severity)
        self._refresh_search()
        log_debug(f"checkout_failed error={exc!r}")

    def _on_commit_succeeded(self, committed: CommittedTransaction) -> None:
        transaction = committed.transaction
        document = compose_receipt(transaction, committed.lines, self.operator.display_name)
        notes: list[str] = []
        try:
            path = export_receipt_pdf(document, self.receipt_dir)
            notes.append(f"Saved {path}")
        except (RuntimeError, OSError) as exc:
            notes.append(f"PDF export failed: {exc}")
            log_debug(f"receipt_export_failed number={transaction.transaction_number} error={exc!r}")

        if self.printer_ready:
            try:
                print_receipt(document)
                notes.append("Printed")
            except Exception as exc:
                notes.append(f"Print failed: {exc}")
                log_debug(f"receipt_print_failed number={transaction.transaction_number} error={exc!r}")

        self.cart.clear()
        self.discount_rate = 0
        self.cart_selected_index = None
        self.processing = False
        self.system_status = f"Transaksi berhasil: {transaction.transaction_number}"
        self.notify("Transaksi berhasil!")
        self._refresh_all()
        self.push_screen(ReceiptModal(document, export_note=" | ".join(notes)))
        log_debug(f"checkout_done number={transaction.transaction_number}")

    def _reload_catalog(self) -> None:
        try:
            self.catalog = load_catalog(self.store)
        except CatalogUnavailable as exc:
            self.catalog = []
            self.system_status = "Gagal mengambil data menu (R to retry)"
            self.notify(str(exc), severity="error")
            return
        self.system_status = f"Menu loaded: {len(self.catalog)} items"

    def _open_discount_modal(self) -> None:
        self.push_screen(DiscountModal(self.cart.lines, self.discount_rate), self._apply_discount)

    def _apply_discount(self, rate: int | None) -> None:
        if rate is None:
            return
        self.discount_rate = rate
        self._refresh_cart()

    def _filtered_results(self) -> list[MenuItem]:
        return filter_by_name(self.catalog, self.search_query)

    def _refresh_all(self) -> None:
        self._refresh_cart()
        self._refresh_search()

    def _selected_line(self) -> CartLine | None:
        lines = self.cart.lines
        if self.cart_selected_index is None:
            return None
        if not (0 <= self.cart_selected_index < len(lines)):
            return None
        return lines[self.cart_selected_index]

    def _move_cart_selection(self, delta: int) -> None:
        if self.cart.is_empty():
            return

        if self.cart_selected_index is None:
            self.cart_selected_index = 0 if delta > 0 else len(self.cart) - 1
        else:
            self.cart_selected_index = (self.cart_selected_index + delta) % len(self.cart)
        self._refresh_cart()

    def _change_selected_quantity(self, delta: int) -> None:
        line = self._selected_line()
        if line is None:
            return
        self.cart.change_quantity(line.item.item_id, delta)
        self._clamp_cart_selection()
        self._refresh_cart()

    def _remove_selected_line(self) -> None:
        line = self._selected_line()
        if line is None:
            return
        self.cart.remove_item(line.item.item_id)
        self._clamp_cart_selection()
        self._refresh_cart()

    def _clamp_cart_selection(self) -> None:
        if self.cart.is_empty():
            self.cart_selected_index = None
        elif self.cart_selected_index is not None:
            self.cart_selected_index = min(self.cart_selected_index, len(self.cart) - 1)

    def _visible_rows(self, widget: Static) -> int:
        height = widget.size.height
        if height <= 0:
            return 8
        return max(1, height)

    def _window_bounds(self, total: int, rows: int, selected: int | None) -> tuple[int, int]:
        if total <= 0:
            return (0, 0)

        rows = max(1, rows)
        if total <= rows:
            return (0, total)

        if selected is None:
            start = 0
        else:
            half = rows // 2
            start = selected - half
            start = max(0, start)
            start = min(start, total - rows)

        return (start, start + rows)

    def _refresh_cart(self) -> None:
        try:
            cart_widget = self.query_one("#cart-list", Static)
            totals_widget = self.query_one("#cart-totals", Static)
        except NoMatches:
            return

        totals_widget.update(format_totals(calculate_totals(self.cart, self.discount_rate)))

        lines = self.cart.lines
        if not lines:
            self.cart_selected_index = None
            cart_widget.update("(keranjang kosong)")
            return

        visible_rows = self._visible_rows(cart_widget)
        start, end = self._window_bounds(len(lines), visible_rows, self.cart_selected_index)

        text = Text()
        if start > 0:
            text.append("⋮\n", style="dim")

        for idx in range(start, end):
            if idx > start:
                text.append("\n")
            pointer = "➤ " if idx == self.cart_selected_index else "  "
            text.append(pointer)
            text.append(f"{idx + 1}. ")
            text.append_text(format_cart_line(lines[idx]))

        if end < len(lines):
            text.append("\n⋮", style="dim")

        cart_widget.update(text)

    def _refresh_search(self) -> None:
        self._refresh_search_bar()
        if self.input_state == "normal":
            self._refresh_results([])
            return
        self._refresh_results(self._filtered_results())

    def _refresh_search_bar(self) -> None:
        bar = self.query_one("#search-bar", Static)
        if self.input_state == "normal":
            status = self.system_status or "Ready"
            bar.update(
                "S search, J/K select, +/- qty, D delete, % discount, Ctrl+S pay.\n"
                f"Kasir: {self.operator.display_name} | {status}"
            )
            return

        text = Text()
        text.append("Cari", style="bold #ffffff on #2f6db5")
        text.append(f": {self.search_query}")
        bar.update(text)

    def _refresh_results(self, results: list[MenuItem]) -> None:
        results_widget = self.query_one("#results", Static)
        if self.input_state == "normal":
            results_widget.update("")
            return

        if not results:
            results_widget.update("No results")
            return

        if self.selected_index >= len(results):
            self.selected_index = 0

        visible_rows = self._visible_rows(results_widget)
        start, end = self._window_bounds(len(results), visible_rows, self.selected_index)

        lines = Text()
        if start > 0:
            lines.append("⋮\n", style="dim")

        for idx in range(start, end):
            if idx > start:
                lines.append("\n")
            pointer = "➤ " if idx == self.selected_index else "  "
            lines.append(pointer)
            lines.append_text(format_menu_item(results[idx]))

        if end < len(results):
            lines.append("\n⋮", style="dim")

        results_widget.update(lines)
