"""Entry point for the restaurant POS Textual app."""

from __future__ import annotations

from pos.cashier_app import CashierApp
from pos.session import current_operator


def main() -> None:
    """Run the Textual application."""
    CashierApp(operator=current_operator()).run()


if __name__ == "__main__":
    main()
