"""SQLite persistence for the menu catalog and committed transactions."""

from __future__ import annotations

import sqlite3
from contextlib import closing, contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Iterable, Iterator

from pos.config import DB_PATH
from pos.constant import CATEGORY_SEED, MENU_SEED
from pos.models import MenuItem, Transaction, TransactionLine


@dataclass(frozen=True)
class TransactionPayload:
    """Parent record as sent to storage; id and timestamp are assigned there."""

    transaction_number: str
    subtotal: Decimal
    discount_rate: Decimal
    discount_amount: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    payment_method: str
    cashier_id: str | None


@dataclass(frozen=True)
class TransactionLinePayload:
    """Line item as sent to storage."""

    item_id: str
    item_name: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _row_to_transaction(row: sqlite3.Row) -> Transaction:
    return Transaction(
        transaction_id=int(row["id"]),
        transaction_number=row["transaction_number"],
        subtotal=Decimal(row["subtotal"]),
        discount_rate=Decimal(row["discount_rate"]),
        discount_amount=Decimal(row["discount_amount"]),
        tax_rate=Decimal(row["tax_rate"]),
        tax_amount=Decimal(row["tax_amount"]),
        total_amount=Decimal(row["total_amount"]),
        payment_method=row["payment_method"],
        cashier_id=row["cashier_id"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )


def _row_to_line(row: sqlite3.Row) -> TransactionLine:
    return TransactionLine(
        transaction_id=int(row["transaction_id"]),
        item_id=row["menu_id"],
        item_name=row["menu_name"],
        quantity=int(row["quantity"]),
        unit_price=Decimal(row["unit_price"]),
        subtotal=Decimal(row["subtotal"]),
        line_index=int(row["line_index"]),
    )


class WriteUnit:
    """Inserts bound to one open storage transaction."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def create_transaction(self, payload: TransactionPayload) -> Transaction:
        created_at = _utc_now_iso()
        cur = self.conn.execute(
            """
            INSERT INTO transactions (
                transaction_number, subtotal, discount_rate, discount_amount,
                tax_rate, tax_amount, total_amount, payment_method, cashier_id, created_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                payload.transaction_number,
                str(payload.subtotal),
                str(payload.discount_rate),
                str(payload.discount_amount),
                str(payload.tax_rate),
                str(payload.tax_amount),
                str(payload.total_amount),
                payload.payment_method,
                payload.cashier_id,
                created_at,
            ),
        )
        row = self.conn.execute("SELECT * FROM transactions WHERE id = ?", (cur.lastrowid,)).fetchone()
        return _row_to_transaction(row)

    def create_transaction_lines(
        self, transaction_id: int, lines: Iterable[TransactionLinePayload]
    ) -> list[TransactionLine]:
        stored: list[TransactionLine] = []
        for idx, line in enumerate(lines):
            self.conn.execute(
                """
                INSERT INTO transaction_items (
                    transaction_id, line_index, menu_id, menu_name, quantity, unit_price, subtotal
                )
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    transaction_id,
                    idx,
                    line.item_id,
                    line.item_name,
                    line.quantity,
                    str(line.unit_price),
                    str(line.subtotal),
                ),
            )
            stored.append(
                TransactionLine(
                    transaction_id=transaction_id,
                    item_id=line.item_id,
                    item_name=line.item_name,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    subtotal=line.subtotal,
                    line_index=idx,
                )
            )
        return stored


class TransactionStore:
    """Storage backend for the catalog and transaction records."""

    def __init__(self, db_path: str | Path = DB_PATH) -> None:
        self.db_path = Path(db_path)

    def _connect(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def bootstrap_schema(self, seed_menu: bool = True) -> None:
        """Create persistence schema if it does not already exist."""
        with closing(self._connect()) as conn:
            with conn:
                conn.executescript(
                    """
                    CREATE TABLE IF NOT EXISTS categories (
                        id TEXT PRIMARY KEY,
                        name TEXT NOT NULL
                    );

                    CREATE TABLE IF NOT EXISTS menus (
                        id TEXT PRIMARY KEY,
                        name TEXT NOT NULL,
                        price TEXT NOT NULL,
                        description TEXT,
                        is_available INTEGER NOT NULL DEFAULT 1,
                        category_id TEXT,
                        FOREIGN KEY(category_id) REFERENCES categories(id)
                    );

                    CREATE TABLE IF NOT EXISTS transactions (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        transaction_number TEXT NOT NULL UNIQUE,
                        subtotal TEXT NOT NULL,
                        discount_rate TEXT NOT NULL,
                        discount_amount TEXT NOT NULL,
                        tax_rate TEXT NOT NULL,
                        tax_amount TEXT NOT NULL,
                        total_amount TEXT NOT NULL,
                        payment_method TEXT NOT NULL,
                        cashier_id TEXT,
                        created_at TEXT NOT NULL
                    );

                    CREATE TABLE IF NOT EXISTS transaction_items (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        transaction_id INTEGER NOT NULL,
                        line_index INTEGER NOT NULL,
                        menu_id TEXT NOT NULL,
                        menu_name TEXT NOT NULL,
                        quantity INTEGER NOT NULL CHECK (quantity > 0),
                        unit_price TEXT NOT NULL,
                        subtotal TEXT NOT NULL,
                        FOREIGN KEY(transaction_id) REFERENCES transactions(id) ON DELETE CASCADE
                    );

                    CREATE INDEX IF NOT EXISTS idx_transaction_items_transaction_line
                        ON transaction_items(transaction_id, line_index);
                    """
                )
                if seed_menu:
                    self._seed_menu(conn)

    def _seed_menu(self, conn: sqlite3.Connection) -> None:
        (count,) = conn.execute("SELECT COUNT(*) FROM menus").fetchone()
        if count:
            return
        conn.executemany(
            "INSERT OR IGNORE INTO categories (id, name) VALUES (?, ?)",
            list(CATEGORY_SEED.items()),
        )
        conn.executemany(
            """
            INSERT INTO menus (id, name, price, description, is_available, category_id)
            VALUES (?, ?, ?, ?, 1, ?)
            """,
            [
                (entry["id"], entry["name"], str(entry["price"]), entry["description"], entry["category"])
                for entry in MENU_SEED
            ],
        )

    def fetch_available_menu(self) -> list[MenuItem]:
        """Return available menu items with their category name, ordered by name."""
        with closing(self._connect()) as conn:
            rows = conn.execute(
                """
                SELECT m.id, m.name, m.price, m.description, m.is_available, c.name AS category_name
                FROM menus m
                LEFT JOIN categories c ON c.id = m.category_id
                WHERE m.is_available = 1
                ORDER BY m.name
                """
            ).fetchall()
        return [
            MenuItem(
                item_id=row["id"],
                name=row["name"],
                price=Decimal(row["price"]),
                is_available=bool(row["is_available"]),
                category=row["category_name"],
                description=row["description"],
            )
            for row in rows
        ]

    @contextmanager
    def atomic(self) -> Iterator[WriteUnit]:
        """
        Yield a write unit whose inserts commit together.

        Any exception raised inside the block rolls back every insert made
        through the unit, so readers never observe a partial write.
        """
        with closing(self._connect()) as conn:
            with conn:
                yield WriteUnit(conn)

    def find_transaction(self, transaction_number: str) -> Transaction | None:
        with closing(self._connect()) as conn:
            row = conn.execute(
                "SELECT * FROM transactions WHERE transaction_number = ?",
                (transaction_number,),
            ).fetchone()
        return _row_to_transaction(row) if row is not None else None

    def list_transaction_lines(self, transaction_id: int) -> list[TransactionLine]:
        with closing(self._connect()) as conn:
            rows = conn.execute(
                "SELECT * FROM transaction_items WHERE transaction_id = ? ORDER BY line_index",
                (transaction_id,),
            ).fetchall()
        return [_row_to_line(row) for row in rows]

    def list_recent_transactions(self, limit: int = 20) -> list[Transaction]:
        with closing(self._connect()) as conn:
            rows = conn.execute(
                "SELECT * FROM transactions ORDER BY id DESC LIMIT ?",
                (limit,),
            ).fetchall()
        return [_row_to_transaction(row) for row in rows]

    def find_orphaned_transactions(self) -> list[Transaction]:
        """Transactions that have no line items and need reconciliation."""
        with closing(self._connect()) as conn:
            rows = conn.execute(
                """
                SELECT t.* FROM transactions t
                WHERE NOT EXISTS (
                    SELECT 1 FROM transaction_items i WHERE i.transaction_id = t.id
                )
                ORDER BY t.id
                """
            ).fetchall()
        return [_row_to_transaction(row) for row in rows]
