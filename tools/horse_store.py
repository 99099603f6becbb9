"""Horse storage abstractions and SQLite implementation."""
from __future__ import annotations

import json
import sqlite3
import time
from dataclasses import asdict
from typing import Dict, List, Optional

from models.horse import Horse
from tools.sqlite_store import SQLiteStore


class HorseStore:
    """Persistence interface for horses."""

    def create_horse(self, horse: Horse) -> Horse:
        raise NotImplementedError

    def get_horse(self, user_id: str, horse_id: str) -> Optional[Horse]:
        raise NotImplementedError

    def list_horses_for_user(self, user_id: str) -> List[Horse]:
        raise NotImplementedError

    def update_horse(self, user_id: str, horse_id: str, updated_fields: Dict[str, object]) -> Optional[Horse]:
        raise NotImplementedError

    def delete_horse(self, user_id: str, horse_id: str) -> bool:
        raise NotImplementedError


class SQLiteHorseStore(SQLiteStore, HorseStore):
    """Local SQLite-backed store for horses."""

    schema = """
        CREATE TABLE IF NOT EXISTS horses (
            horse_id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            name TEXT NOT NULL,
            age REAL,
            weight REAL,
            hair_length TEXT,
            breed TEXT,
            color TEXT,
            stall TEXT,
            notes TEXT,
            blanket_preferences TEXT,
            created_at REAL,
            updated_at REAL
        );
        CREATE INDEX IF NOT EXISTS idx_horses_user ON horses (user_id, name);
    """

    def create_horse(self, horse: Horse) -> Horse:
        with self._session() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO horses (
                    horse_id, user_id, name, age, weight, hair_length, breed, color, stall,
                    notes, blanket_preferences, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    horse.horse_id,
                    horse.user_id,
                    horse.name,
                    horse.age,
                    horse.weight,
                    horse.hair_length.value,
                    horse.breed,
                    horse.color,
                    horse.stall,
                    horse.notes,
                    json.dumps(horse.blanket_preferences),
                    horse.created_at,
                    horse.updated_at,
                ),
            )
        return horse

    def _row_to_horse(self, row: sqlite3.Row) -> Horse:
        return Horse(
            horse_id=row["horse_id"],
            user_id=row["user_id"],
            name=row["name"],
            age=row["age"],
            weight=row["weight"],
            hair_length=row["hair_length"],
            breed=row["breed"],
            color=row["color"],
            stall=row["stall"],
            notes=row["notes"],
            blanket_preferences=self._deserialise(row["blanket_preferences"], default={}),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def get_horse(self, user_id: str, horse_id: str) -> Optional[Horse]:
        with self._session() as conn:
            row = conn.execute("SELECT * FROM horses WHERE horse_id = ?", (horse_id,)).fetchone()
        if not self._check_owner("horse", horse_id, row, user_id):
            return None
        return self._row_to_horse(row)

    def list_horses_for_user(self, user_id: str) -> List[Horse]:
        with self._session() as conn:
            rows = conn.execute(
                "SELECT * FROM horses WHERE user_id = ? ORDER BY name COLLATE NOCASE, horse_id",
                (user_id,),
            ).fetchall()
        return [self._row_to_horse(row) for row in rows]

    def update_horse(self, user_id: str, horse_id: str, updated_fields: Dict[str, object]) -> Optional[Horse]:
        current = self.get_horse(user_id, horse_id)
        if not current:
            return None

        for key, value in updated_fields.items():
            if key in {"user_id", "horse_id", "created_at"}:
                continue
            if hasattr(current, key):
                setattr(current, key, value)
        current.updated_at = time.time()

        validated = Horse(**asdict(current))
        return self.create_horse(validated)

    def delete_horse(self, user_id: str, horse_id: str) -> bool:
        with self._session() as conn:
            row = conn.execute("SELECT user_id FROM horses WHERE horse_id = ?", (horse_id,)).fetchone()
            if not self._check_owner("horse", horse_id, row, user_id):
                return False
            cursor = conn.execute("DELETE FROM horses WHERE horse_id = ?", (horse_id,))
            return cursor.rowcount > 0


__all__ = ["HorseStore", "SQLiteHorseStore"]
