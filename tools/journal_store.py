"""Journal entry storage; entries are kept as validated JSON documents."""
from __future__ import annotations

import sqlite3
import time
from typing import Dict, List, Optional

from logic.errors import RecordNotFound
from models.journal import JournalEntry, PhotoAnalysis
from models.taxonomy import JournalCategory, parse_enum
from tools.sqlite_store import SQLiteStore


class JournalStore:
    """Persistence interface for journal entries."""

    def create_entry(self, entry: JournalEntry) -> JournalEntry:
        raise NotImplementedError

    def get_entry(self, user_id: str, entry_id: str) -> Optional[JournalEntry]:
        raise NotImplementedError

    def list_entries_for_user(self, user_id: str, category: str | None = None) -> List[JournalEntry]:
        raise NotImplementedError

    def update_entry(self, user_id: str, entry_id: str, updated_fields: Dict[str, object]) -> Optional[JournalEntry]:
        raise NotImplementedError

    def delete_entry(self, user_id: str, entry_id: str) -> bool:
        raise NotImplementedError

    def set_photo_status(
        self,
        user_id: str,
        entry_id: str,
        photo_id: str,
        status: str,
        analysis: PhotoAnalysis | None = None,
        error: str | None = None,
    ) -> JournalEntry:
        raise NotImplementedError


class SQLiteJournalStore(SQLiteStore, JournalStore):
    schema = """
        CREATE TABLE IF NOT EXISTS journal_entries (
            entry_id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            category TEXT,
            entry_date REAL,
            payload TEXT NOT NULL
        );
        CREATE INDEX IF NOT EXISTS idx_journal_user ON journal_entries (user_id, entry_date);
    """

    @staticmethod
    def _write(conn: sqlite3.Connection, entry: JournalEntry) -> None:
        conn.execute(
            """
            INSERT OR REPLACE INTO journal_entries (entry_id, user_id, category, entry_date, payload)
            VALUES (?, ?, ?, ?, ?)
            """,
            (entry.entry_id, entry.user_id, entry.category.value, entry.entry_date, entry.model_dump_json()),
        )

    @staticmethod
    def _fetch(conn: sqlite3.Connection, entry_id: str) -> Optional[sqlite3.Row]:
        return conn.execute("SELECT * FROM journal_entries WHERE entry_id = ?", (entry_id,)).fetchone()

    def create_entry(self, entry: JournalEntry) -> JournalEntry:
        with self._session() as conn:
            self._write(conn, entry)
        return entry

    def get_entry(self, user_id: str, entry_id: str) -> Optional[JournalEntry]:
        with self._session() as conn:
            row = self._fetch(conn, entry_id)
        if not self._check_owner("journal entry", entry_id, row, user_id):
            return None
        return JournalEntry.model_validate_json(row["payload"])

    def list_entries_for_user(self, user_id: str, category: str | None = None) -> List[JournalEntry]:
        query = "SELECT payload FROM journal_entries WHERE user_id = ?"
        params: list = [user_id]
        if category:
            query += " AND category = ?"
            params.append(parse_enum(JournalCategory, category).value)
        query += " ORDER BY entry_date DESC"
        with self._session() as conn:
            rows = conn.execute(query, params).fetchall()
        return [JournalEntry.model_validate_json(row["payload"]) for row in rows]

    def update_entry(self, user_id: str, entry_id: str, updated_fields: Dict[str, object]) -> Optional[JournalEntry]:
        current = self.get_entry(user_id, entry_id)
        if not current:
            return None
        payload = current.model_dump()
        for key, value in updated_fields.items():
            if key in {"user_id", "entry_id", "created_at"} or key not in payload:
                continue
            payload[key] = value
        payload["updated_at"] = time.time()
        return self.create_entry(JournalEntry.model_validate(payload))

    def delete_entry(self, user_id: str, entry_id: str) -> bool:
        with self._session() as conn:
            row = self._fetch(conn, entry_id)
            if not self._check_owner("journal entry", entry_id, row, user_id):
                return False
            cursor = conn.execute("DELETE FROM journal_entries WHERE entry_id = ?", (entry_id,))
            return cursor.rowcount > 0

    def set_photo_status(
        self,
        user_id: str,
        entry_id: str,
        photo_id: str,
        status: str,
        analysis: PhotoAnalysis | None = None,
        error: str | None = None,
    ) -> JournalEntry:
        with self._immediate() as conn:
            row = self._fetch(conn, entry_id)
            if not self._check_owner("journal entry", entry_id, row, user_id):
                raise RecordNotFound("journal entry", entry_id)
            entry = JournalEntry.model_validate_json(row["payload"])
            photo = entry.find_photo(photo_id)
            if photo is None:
                raise RecordNotFound("journal photo", photo_id)
            photo.analysis_status = status
            photo.analysis_error = error
            if analysis is not None:
                photo.analysis = analysis
            entry.updated_at = time.time()
            self._write(conn, entry)
        return entry


__all__ = ["JournalStore", "SQLiteJournalStore"]
