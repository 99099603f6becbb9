"""Supplement and shavings inventory storage (SQLite)."""
from __future__ import annotations

import json
import sqlite3
import time
from dataclasses import asdict
from datetime import date, timedelta
from typing import Dict, List, Optional

from logic.errors import RecordNotFound
from models.inventory import (
    ShavingsDelivery,
    ShavingsInventory,
    Supplement,
    SupplementSubscription,
)
from models.task import parse_date
from tools.sqlite_store import SQLiteStore, new_id


class SupplementStore:
    """Persistence interface for supplements."""

    def create_supplement(self, supplement: Supplement) -> Supplement:
        raise NotImplementedError

    def get_supplement(self, user_id: str, supplement_id: str) -> Optional[Supplement]:
        raise NotImplementedError

    def list_supplements_for_user(self, user_id: str, horse_id: str | None = None) -> List[Supplement]:
        raise NotImplementedError

    def update_supplement(
        self, user_id: str, supplement_id: str, updated_fields: Dict[str, object]
    ) -> Optional[Supplement]:
        raise NotImplementedError

    def delete_supplement(self, user_id: str, supplement_id: str) -> bool:
        raise NotImplementedError

    def record_delivery(self, user_id: str, supplement_id: str, quantity: float, today: date) -> Supplement:
        raise NotImplementedError


class ShavingsStore:
    """Persistence interface for the per-user shavings inventory and its deliveries."""

    def get_inventory(self, user_id: str) -> Optional[ShavingsInventory]:
        raise NotImplementedError

    def upsert_inventory(self, user_id: str, fields: Dict[str, object]) -> ShavingsInventory:
        raise NotImplementedError

    def record_delivery(
        self,
        user_id: str,
        bags_received: float,
        delivered_at: date,
        supplier: str | None = None,
        notes: str | None = None,
    ) -> ShavingsInventory:
        raise NotImplementedError

    def mark_order_placed(
        self, user_id: str, today: date, expected_delivery_date: date | None = None
    ) -> ShavingsInventory:
        raise NotImplementedError

    def get_delivery_history(self, user_id: str, limit: int = 10) -> List[ShavingsDelivery]:
        raise NotImplementedError


class SQLiteSupplementStore(SQLiteStore, SupplementStore):
    schema = """
        CREATE TABLE IF NOT EXISTS supplements (
            supplement_id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            name TEXT NOT NULL,
            horse_id TEXT,
            horse_name TEXT,
            brand TEXT,
            dosage TEXT,
            frequency TEXT,
            current_stock REAL,
            stock_unit TEXT,
            low_stock_threshold REAL,
            notes TEXT,
            subscription TEXT,
            created_at REAL,
            updated_at REAL
        );
        CREATE INDEX IF NOT EXISTS idx_supplements_user ON supplements (user_id, horse_name, name);
    """

    @staticmethod
    def _write(conn: sqlite3.Connection, supplement: Supplement) -> None:
        conn.execute(
            """
            INSERT OR REPLACE INTO supplements (
                supplement_id, user_id, name, horse_id, horse_name, brand, dosage, frequency,
                current_stock, stock_unit, low_stock_threshold, notes, subscription, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                supplement.supplement_id,
                supplement.user_id,
                supplement.name,
                supplement.horse_id,
                supplement.horse_name,
                supplement.brand,
                supplement.dosage,
                supplement.frequency.value,
                supplement.current_stock,
                supplement.stock_unit.value,
                supplement.low_stock_threshold,
                supplement.notes,
                json.dumps(asdict(supplement.subscription)) if supplement.subscription else None,
                supplement.created_at,
                supplement.updated_at,
            ),
        )

    @staticmethod
    def _row_to_supplement(row: sqlite3.Row) -> Supplement:
        subscription = json.loads(row["subscription"]) if row["subscription"] else None
        return Supplement(
            supplement_id=row["supplement_id"],
            user_id=row["user_id"],
            name=row["name"],
            horse_id=row["horse_id"],
            horse_name=row["horse_name"] or "",
            brand=row["brand"],
            dosage=row["dosage"],
            frequency=row["frequency"],
            current_stock=row["current_stock"] or 0.0,
            stock_unit=row["stock_unit"],
            low_stock_threshold=row["low_stock_threshold"] or 0.0,
            notes=row["notes"],
            subscription=SupplementSubscription(**subscription) if subscription else None,
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    @staticmethod
    def _fetch(conn: sqlite3.Connection, supplement_id: str) -> Optional[sqlite3.Row]:
        return conn.execute("SELECT * FROM supplements WHERE supplement_id = ?", (supplement_id,)).fetchone()

    def create_supplement(self, supplement: Supplement) -> Supplement:
        with self._session() as conn:
            self._write(conn, supplement)
        return supplement

    def get_supplement(self, user_id: str, supplement_id: str) -> Optional[Supplement]:
        with self._session() as conn:
            row = self._fetch(conn, supplement_id)
        if not self._check_owner("supplement", supplement_id, row, user_id):
            return None
        return self._row_to_supplement(row)

    def list_supplements_for_user(self, user_id: str, horse_id: str | None = None) -> List[Supplement]:
        query = "SELECT * FROM supplements WHERE user_id = ?"
        params: list = [user_id]
        if horse_id:
            query += " AND horse_id = ?"
            params.append(horse_id)
        query += " ORDER BY horse_name COLLATE NOCASE, name COLLATE NOCASE"
        with self._session() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_supplement(row) for row in rows]

    def update_supplement(
        self, user_id: str, supplement_id: str, updated_fields: Dict[str, object]
    ) -> Optional[Supplement]:
        current = self.get_supplement(user_id, supplement_id)
        if not current:
            return None

        for key, value in updated_fields.items():
            if key in {"user_id", "supplement_id", "created_at"}:
                continue
            if hasattr(current, key):
                setattr(current, key, value)
        current.updated_at = time.time()

        validated = Supplement(**asdict(current))
        return self.create_supplement(validated)

    def delete_supplement(self, user_id: str, supplement_id: str) -> bool:
        with self._session() as conn:
            row = self._fetch(conn, supplement_id)
            if not self._check_owner("supplement", supplement_id, row, user_id):
                return False
            cursor = conn.execute("DELETE FROM supplements WHERE supplement_id = ?", (supplement_id,))
            return cursor.rowcount > 0

    def record_delivery(self, user_id: str, supplement_id: str, quantity: float, today: date) -> Supplement:
        """Add delivered stock; subscriptions roll their next delivery date forward."""

        if quantity <= 0:
            raise ValueError("quantity must be positive")
        with self._immediate() as conn:
            row = self._fetch(conn, supplement_id)
            if not self._check_owner("supplement", supplement_id, row, user_id):
                raise RecordNotFound("supplement", supplement_id)
            supplement = self._row_to_supplement(row)
            supplement.current_stock += quantity
            supplement.updated_at = time.time()
            if supplement.subscription:
                next_date = today + timedelta(days=supplement.subscription.delivery_frequency_days)
                supplement.subscription.last_delivery_date = today.isoformat()
                supplement.subscription.next_delivery_date = next_date.isoformat()
            self._write(conn, supplement)
        return supplement


class SQLiteShavingsStore(SQLiteStore, ShavingsStore):
    schema = """
        CREATE TABLE IF NOT EXISTS shavings_inventory (
            user_id TEXT PRIMARY KEY,
            current_bags REAL,
            reorder_threshold REAL,
            supplier TEXT,
            pending_order_date TEXT,
            expected_delivery_date TEXT,
            last_updated REAL
        );
        CREATE TABLE IF NOT EXISTS shavings_deliveries (
            delivery_id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            bags_received REAL,
            delivered_at TEXT,
            supplier TEXT,
            notes TEXT,
            created_at REAL
        );
        CREATE INDEX IF NOT EXISTS idx_shavings_deliveries_user ON shavings_deliveries (user_id, created_at);
    """

    _MUTABLE_FIELDS = {
        "current_bags",
        "reorder_threshold",
        "supplier",
        "pending_order_date",
        "expected_delivery_date",
    }

    @staticmethod
    def _row_to_inventory(row: sqlite3.Row) -> ShavingsInventory:
        return ShavingsInventory(
            user_id=row["user_id"],
            current_bags=row["current_bags"] or 0.0,
            reorder_threshold=row["reorder_threshold"] if row["reorder_threshold"] is not None else 10.0,
            supplier=row["supplier"],
            pending_order_date=parse_date(row["pending_order_date"]),
            expected_delivery_date=parse_date(row["expected_delivery_date"]),
            last_updated=row["last_updated"],
        )

    @staticmethod
    def _write(conn: sqlite3.Connection, inventory: ShavingsInventory) -> None:
        conn.execute(
            """
            INSERT OR REPLACE INTO shavings_inventory (
                user_id, current_bags, reorder_threshold, supplier,
                pending_order_date, expected_delivery_date, last_updated
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                inventory.user_id,
                inventory.current_bags,
                inventory.reorder_threshold,
                inventory.supplier,
                inventory.pending_order_date.isoformat() if inventory.pending_order_date else None,
                inventory.expected_delivery_date.isoformat() if inventory.expected_delivery_date else None,
                inventory.last_updated,
            ),
        )

    def _load(self, conn: sqlite3.Connection, user_id: str) -> Optional[ShavingsInventory]:
        row = conn.execute("SELECT * FROM shavings_inventory WHERE user_id = ?", (user_id,)).fetchone()
        return self._row_to_inventory(row) if row else None

    def _merge(self, conn: sqlite3.Connection, user_id: str, fields: Dict[str, object]) -> ShavingsInventory:
        unknown = set(fields) - self._MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown shavings inventory fields: {sorted(unknown)}")
        inventory = self._load(conn, user_id) or ShavingsInventory(user_id=user_id)
        for key, value in fields.items():
            if key in {"pending_order_date", "expected_delivery_date"}:
                value = parse_date(value)
            elif key in {"current_bags", "reorder_threshold"}:
                value = float(value)
            setattr(inventory, key, value)
        inventory.last_updated = time.time()
        self._write(conn, inventory)
        return inventory

    def get_inventory(self, user_id: str) -> Optional[ShavingsInventory]:
        with self._session() as conn:
            return self._load(conn, user_id)

    def upsert_inventory(self, user_id: str, fields: Dict[str, object]) -> ShavingsInventory:
        with self._immediate() as conn:
            return self._merge(conn, user_id, fields)

    def record_delivery(
        self,
        user_id: str,
        bags_received: float,
        delivered_at: date,
        supplier: str | None = None,
        notes: str | None = None,
    ) -> ShavingsInventory:
        """Add delivered bags, clear any pending order and log the delivery."""

        if bags_received <= 0:
            raise ValueError("bags_received must be positive")
        with self._immediate() as conn:
            current = self._load(conn, user_id)
            current_bags = current.current_bags if current else 0.0
            inventory = self._merge(
                conn,
                user_id,
                {
                    "current_bags": current_bags + bags_received,
                    "pending_order_date": None,
                    "expected_delivery_date": None,
                },
            )
            delivery = ShavingsDelivery(
                delivery_id=new_id(),
                bags_received=bags_received,
                delivered_at=delivered_at,
                supplier=supplier if supplier is not None else (current.supplier if current else None),
                notes=notes,
            )
            conn.execute(
                """
                INSERT INTO shavings_deliveries (
                    delivery_id, user_id, bags_received, delivered_at, supplier, notes, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    delivery.delivery_id,
                    user_id,
                    delivery.bags_received,
                    delivery.delivered_at.isoformat(),
                    delivery.supplier,
                    delivery.notes,
                    delivery.created_at,
                ),
            )
        return inventory

    def mark_order_placed(
        self, user_id: str, today: date, expected_delivery_date: date | None = None
    ) -> ShavingsInventory:
        with self._immediate() as conn:
            return self._merge(
                conn,
                user_id,
                {"pending_order_date": today, "expected_delivery_date": expected_delivery_date},
            )

    def get_delivery_history(self, user_id: str, limit: int = 10) -> List[ShavingsDelivery]:
        with self._session() as conn:
            rows = conn.execute(
                """
                SELECT * FROM shavings_deliveries WHERE user_id = ?
                ORDER BY created_at DESC, rowid DESC LIMIT ?
                """,
                (user_id, limit),
            ).fetchall()
        return [
            ShavingsDelivery(
                delivery_id=row["delivery_id"],
                bags_received=row["bags_received"],
                delivered_at=parse_date(row["delivered_at"]),
                supplier=row["supplier"],
                notes=row["notes"],
                created_at=row["created_at"],
            )
            for row in rows
        ]


__all__ = [
    "SQLiteShavingsStore",
    "SQLiteSupplementStore",
    "ShavingsStore",
    "SupplementStore",
]
