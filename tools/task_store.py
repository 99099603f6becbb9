"""Task storage abstractions and SQLite implementation."""
from __future__ import annotations

import json
import sqlite3
from dataclasses import asdict
from typing import Callable, Dict, List, Optional

from logic.errors import RecordNotFound
from models.task import CompletionRecord, Task
from tools.sqlite_store import SQLiteStore

STREAK_FIELDS = {
    "completed",
    "completed_at",
    "current_streak",
    "best_streak",
    "last_completed_date",
    "completion_history",
}


class TaskStore:
    """Persistence interface for recurring tasks."""

    def create_task(self, task: Task) -> Task:
        raise NotImplementedError

    def get_task(self, user_id: str, task_id: str) -> Optional[Task]:
        raise NotImplementedError

    def list_tasks_for_user(self, user_id: str) -> List[Task]:
        raise NotImplementedError

    def update_task(self, user_id: str, task_id: str, updated_fields: Dict[str, object]) -> Optional[Task]:
        raise NotImplementedError

    def delete_task(self, user_id: str, task_id: str) -> bool:
        raise NotImplementedError

    def get_task_history(self, user_id: str, task_id: str) -> List[CompletionRecord]:
        raise NotImplementedError

    def apply_streak_update(self, user_id: str, task_id: str, update: Callable[[Task], Task]) -> Task:
        raise NotImplementedError


class SQLiteTaskStore(SQLiteStore, TaskStore):
    """SQLite-backed task store.

    Streak updates run inside ``BEGIN IMMEDIATE`` so two completions racing on
    the same task are applied one after the other instead of overwriting each
    other.
    """

    schema = """
        CREATE TABLE IF NOT EXISTS tasks (
            task_id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            title TEXT NOT NULL,
            description TEXT,
            category TEXT,
            frequency TEXT,
            priority TEXT,
            created_at REAL,
            completed INTEGER DEFAULT 0,
            completed_at REAL,
            current_streak INTEGER DEFAULT 0,
            best_streak INTEGER DEFAULT 0,
            last_completed_date TEXT,
            completion_history TEXT
        );
        CREATE INDEX IF NOT EXISTS idx_tasks_user ON tasks (user_id, created_at);
    """

    @staticmethod
    def _write(conn: sqlite3.Connection, task: Task) -> None:
        conn.execute(
            """
            INSERT OR REPLACE INTO tasks (
                task_id, user_id, title, description, category, frequency, priority, created_at,
                completed, completed_at, current_streak, best_streak, last_completed_date, completion_history
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                task.task_id,
                task.user_id,
                task.title,
                task.description,
                task.category.value,
                task.frequency.value,
                task.priority.value,
                task.created_at,
                int(task.completed),
                task.completed_at,
                task.current_streak,
                task.best_streak,
                task.last_completed_date.isoformat() if task.last_completed_date else None,
                json.dumps([record.to_dict() for record in task.completion_history]),
            ),
        )

    def _row_to_task(self, row: sqlite3.Row) -> Task:
        return Task(
            task_id=row["task_id"],
            user_id=row["user_id"],
            title=row["title"],
            description=row["description"],
            category=row["category"],
            frequency=row["frequency"],
            priority=row["priority"],
            created_at=row["created_at"],
            completed=bool(row["completed"]),
            completed_at=row["completed_at"],
            current_streak=row["current_streak"] or 0,
            best_streak=row["best_streak"] or 0,
            last_completed_date=row["last_completed_date"],
            completion_history=tuple(self._deserialise(row["completion_history"])),
        )

    @staticmethod
    def _fetch(conn: sqlite3.Connection, task_id: str) -> Optional[sqlite3.Row]:
        return conn.execute("SELECT * FROM tasks WHERE task_id = ?", (task_id,)).fetchone()

    def create_task(self, task: Task) -> Task:
        with self._session() as conn:
            self._write(conn, task)
        return task

    def get_task(self, user_id: str, task_id: str) -> Optional[Task]:
        with self._session() as conn:
            row = self._fetch(conn, task_id)
        if not self._check_owner("task", task_id, row, user_id):
            return None
        return self._row_to_task(row)

    def list_tasks_for_user(self, user_id: str) -> List[Task]:
        with self._session() as conn:
            rows = conn.execute(
                "SELECT * FROM tasks WHERE user_id = ? ORDER BY created_at DESC, task_id",
                (user_id,),
            ).fetchall()
        return [self._row_to_task(row) for row in rows]

    def update_task(self, user_id: str, task_id: str, updated_fields: Dict[str, object]) -> Optional[Task]:
        derived = STREAK_FIELDS.intersection(updated_fields)
        if derived:
            raise ValueError(f"Streak fields are maintained by the streak tracker: {sorted(derived)}")

        current = self.get_task(user_id, task_id)
        if not current:
            return None

        for key, value in updated_fields.items():
            if key in {"user_id", "task_id"}:
                continue
            if hasattr(current, key):
                setattr(current, key, value)

        validated = Task(**asdict(current))
        return self.create_task(validated)

    def delete_task(self, user_id: str, task_id: str) -> bool:
        with self._session() as conn:
            row = self._fetch(conn, task_id)
            if not self._check_owner("task", task_id, row, user_id):
                return False
            cursor = conn.execute("DELETE FROM tasks WHERE task_id = ?", (task_id,))
            return cursor.rowcount > 0

    def get_task_history(self, user_id: str, task_id: str) -> List[CompletionRecord]:
        task = self.get_task(user_id, task_id)
        if not task:
            raise RecordNotFound("task", task_id)
        return list(task.completion_history)

    def apply_streak_update(self, user_id: str, task_id: str, update: Callable[[Task], Task]) -> Task:
        with self._immediate() as conn:
            row = self._fetch(conn, task_id)
            if not self._check_owner("task", task_id, row, user_id):
                raise RecordNotFound("task", task_id)
            updated = update(self._row_to_task(row))
            self._write(conn, updated)
        return updated


__all__ = ["STREAK_FIELDS", "SQLiteTaskStore", "TaskStore"]
