"""Shared SQLite plumbing for the persistence gateway stores."""
from __future__ import annotations

import contextlib
import json
import sqlite3
from pathlib import Path
from typing import Iterator, Optional
from uuid import uuid4

from logic.errors import NotAuthorized


def new_id() -> str:
    return uuid4().hex


class SQLiteStore:
    """Base class: one database file, short-lived connections, owner checks."""

    schema: str = ""

    def __init__(self, database_path: str | Path = "data/barn.db") -> None:
        self.database_path = Path(database_path)
        if self.database_path.parent and not self.database_path.parent.exists():
            self.database_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_tables()

    def _connect(self, isolation_level: Optional[str] = "") -> sqlite3.Connection:
        conn = sqlite3.connect(self.database_path, timeout=30, isolation_level=isolation_level)
        conn.row_factory = sqlite3.Row
        return conn

    @contextlib.contextmanager
    def _session(self) -> Iterator[sqlite3.Connection]:
        """Commit on success, roll back on error, always close."""

        conn = self._connect()
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    @contextlib.contextmanager
    def _immediate(self) -> Iterator[sqlite3.Connection]:
        """Hold the database write lock for a whole read-modify-write."""

        conn = self._connect(isolation_level=None)
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")
        finally:
            conn.close()

    def _ensure_tables(self) -> None:
        if not self.schema:
            return
        with self._session() as conn:
            conn.executescript(self.schema)

    @staticmethod
    def _serialise(values: object) -> str:
        return json.dumps(values if values is not None else [])

    @staticmethod
    def _deserialise(raw: Optional[str], default: object = None) -> object:
        if not raw:
            return [] if default is None else default
        return json.loads(raw)

    @staticmethod
    def _check_owner(kind: str, record_id: str, row: Optional[sqlite3.Row], user_id: str) -> bool:
        """True when ``row`` exists and belongs to ``user_id``; False when missing."""

        if row is None:
            return False
        if row["user_id"] != user_id:
            raise NotAuthorized(kind, record_id)
        return True


__all__ = ["SQLiteStore", "new_id"]
