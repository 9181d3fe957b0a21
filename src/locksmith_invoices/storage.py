"""
Inventory storage backends.

Stores are constructed explicitly and handed to the reconciliation code; there is
no module-level client. SKUs are matched per owner, case-insensitively, after trimming.
"""
from __future__ import annotations

import sqlite3
import threading
import uuid
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, Optional

from .errors import DuplicateSkuError
from .models import InventoryRecord


def sku_key(sku: str) -> str:
    """Normalized SKU used for matching."""
    return (sku or "").strip().lower()


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InventoryStoreBase(ABC):
    """
    Interface the reconciliation step needs from an inventory store.

    increment_quantity must be atomic per record so that two concurrent imports
    of the same SKU cannot lose an update.
    """

    @abstractmethod
    def get(self, user_id: str, sku: str) -> Optional[InventoryRecord]:
        """Return the owner's record for this SKU, or None."""

    @abstractmethod
    def increment_quantity(self, user_id: str, sku: str, delta: int) -> Optional[int]:
        """
        Add delta to the stored quantity.

        Returns:
            The new quantity, or None if the owner has no record for this SKU.
        """

    @abstractmethod
    def create(self, record: InventoryRecord) -> InventoryRecord:
        """
        Insert a new record and return it with id and timestamps set.

        Raises:
            DuplicateSkuError: the owner already has a record for this SKU.
        """

    @abstractmethod
    def list_items(self, user_id: str) -> list[InventoryRecord]:
        """All records for an owner, oldest first."""


class InMemoryInventoryStore(InventoryStoreBase):
    """Dict-backed store for tests and one-off runs. Thread-safe via a single lock."""

    def __init__(self):
        self._items: dict[tuple[str, str], InventoryRecord] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str, sku: str) -> Optional[InventoryRecord]:
        with self._lock:
            record = self._items.get((user_id, sku_key(sku)))
            return record.model_copy() if record else None

    def increment_quantity(self, user_id: str, sku: str, delta: int) -> Optional[int]:
        with self._lock:
            record = self._items.get((user_id, sku_key(sku)))
            if record is None:
                return None
            record.quantity += delta
            record.updated_at = _now()
            return record.quantity

    def create(self, record: InventoryRecord) -> InventoryRecord:
        key = (record.user_id, sku_key(record.sku))
        with self._lock:
            if key in self._items:
                raise DuplicateSkuError(record.user_id, record.sku)
            now = _now()
            stored = record.model_copy(
                update={"id": record.id or str(uuid.uuid4()), "created_at": now, "updated_at": now}
            )
            self._items[key] = stored
            return stored.model_copy()

    def list_items(self, user_id: str) -> list[InventoryRecord]:
        with self._lock:
            return [r.model_copy() for (uid, _), r in self._items.items() if uid == user_id]


class SQLiteInventoryStore(InventoryStoreBase):
    """
    SQLite-backed inventory with persistent storage.

    Increments run as a single UPDATE inside an immediate (write-locked)
    transaction, so concurrent writers serialize on the database lock.
    """

    _COLUMNS = (
        "id, user_id, sku, item_name, cost, quantity, supplier, category, "
        "key_type, make, model, low_stock_threshold, created_at, updated_at"
    )

    def __init__(self, db_path: str = "inventory.db", timeout: float = 30.0):
        """
        Initialize store with database path.

        Args:
            db_path: Path to SQLite database file (default: inventory.db)
            timeout: Seconds to wait on a locked database
        """
        self.db_path = db_path
        self.timeout = timeout
        self._init_database()

    def _init_database(self):
        """Create inventory table if it doesn't exist"""
        with self._transaction() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS inventory_items (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    sku TEXT NOT NULL,
                    sku_key TEXT NOT NULL,
                    item_name TEXT NOT NULL,
                    cost REAL NOT NULL DEFAULT 0,
                    quantity INTEGER NOT NULL DEFAULT 0,
                    supplier TEXT,
                    category TEXT,
                    key_type TEXT NOT NULL DEFAULT 'Other',
                    make TEXT NOT NULL DEFAULT 'n/a',
                    model TEXT NOT NULL DEFAULT 'n/a',
                    low_stock_threshold INTEGER NOT NULL DEFAULT 3,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE UNIQUE INDEX IF NOT EXISTS idx_inventory_user_sku
                ON inventory_items(user_id, sku_key)
            """)

    def _get_connection(self) -> sqlite3.Connection:
        """Get autocommit connection with row factory; transactions are explicit"""
        conn = sqlite3.connect(self.db_path, timeout=self.timeout, isolation_level=None)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        conn = self._get_connection()
        try:
            conn.execute("BEGIN IMMEDIATE")
            yield conn
            conn.execute("COMMIT")
        except Exception:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise
        finally:
            conn.close()

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> InventoryRecord:
        return InventoryRecord(**{k: row[k] for k in row.keys()})

    def get(self, user_id: str, sku: str) -> Optional[InventoryRecord]:
        conn = self._get_connection()
        try:
            row = conn.execute(
                f"SELECT {self._COLUMNS} FROM inventory_items WHERE user_id = ? AND sku_key = ?",
                (user_id, sku_key(sku)),
            ).fetchone()
        finally:
            conn.close()
        return self._row_to_record(row) if row else None

    def increment_quantity(self, user_id: str, sku: str, delta: int) -> Optional[int]:
        with self._transaction() as conn:
            cursor = conn.execute(
                """
                UPDATE inventory_items
                SET quantity = quantity + ?, updated_at = ?
                WHERE user_id = ? AND sku_key = ?
                """,
                (delta, _now().isoformat(), user_id, sku_key(sku)),
            )
            if cursor.rowcount == 0:
                return None
            row = conn.execute(
                "SELECT quantity FROM inventory_items WHERE user_id = ? AND sku_key = ?",
                (user_id, sku_key(sku)),
            ).fetchone()
            return row["quantity"]

    def create(self, record: InventoryRecord) -> InventoryRecord:
        now = _now()
        stored = record.model_copy(
            update={"id": record.id or str(uuid.uuid4()), "created_at": now, "updated_at": now}
        )
        try:
            with self._transaction() as conn:
                conn.execute(
                    """
                    INSERT INTO inventory_items (
                        id, user_id, sku, sku_key, item_name, cost, quantity, supplier,
                        category, key_type, make, model, low_stock_threshold,
                        created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        stored.id,
                        stored.user_id,
                        stored.sku,
                        sku_key(stored.sku),
                        stored.item_name,
                        stored.cost,
                        stored.quantity,
                        stored.supplier,
                        stored.category,
                        stored.key_type,
                        stored.make,
                        stored.model,
                        stored.low_stock_threshold,
                        now.isoformat(),
                        now.isoformat(),
                    ),
                )
        except sqlite3.IntegrityError as e:
            raise DuplicateSkuError(record.user_id, record.sku) from e
        return stored

    def list_items(self, user_id: str) -> list[InventoryRecord]:
        conn = self._get_connection()
        try:
            rows = conn.execute(
                f"SELECT {self._COLUMNS} FROM inventory_items WHERE user_id = ? ORDER BY created_at, rowid",
                (user_id,),
            ).fetchall()
        finally:
            conn.close()
        return [self._row_to_record(r) for r in rows]
