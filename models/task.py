"""Recurring barn-care task and its completion streak state."""

from __future__ import annotations

import time
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Dict, Optional, Tuple

from models.taxonomy import TaskCategory, TaskFrequency, TaskPriority, parse_enum


def parse_date(value: object) -> Optional[date]:
    """Accept ``date`` objects or ISO ``YYYY-MM-DD`` strings (timestamps are truncated)."""

    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


@dataclass(frozen=True)
class CompletionRecord:
    """One logged completion.

    The ``previous_*`` fields snapshot the streak state just before this
    completion so that it can be reverted exactly. Records written before the
    snapshot existed leave them empty.
    """

    date: date
    timestamp: float
    previous_streak: Optional[int] = None
    previous_best_streak: Optional[int] = None
    previous_last_completed_date: Optional[date] = None
    previous_completed: Optional[bool] = None

    @property
    def has_snapshot(self) -> bool:
        return self.previous_streak is not None and self.previous_best_streak is not None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"date": self.date.isoformat(), "timestamp": self.timestamp}
        if self.has_snapshot:
            payload.update(
                previous_streak=self.previous_streak,
                previous_best_streak=self.previous_best_streak,
                previous_last_completed_date=(
                    self.previous_last_completed_date.isoformat()
                    if self.previous_last_completed_date
                    else None
                ),
                previous_completed=self.previous_completed,
            )
        return payload

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "CompletionRecord":
        return cls(
            date=parse_date(payload["date"]),
            timestamp=float(payload.get("timestamp") or 0.0),
            previous_streak=payload.get("previous_streak"),
            previous_best_streak=payload.get("previous_best_streak"),
            previous_last_completed_date=parse_date(payload.get("previous_last_completed_date")),
            previous_completed=payload.get("previous_completed"),
        )


@dataclass(frozen=True)
class TaskStreakState:
    """The derived completion fields of a task, maintained by the streak tracker."""

    completed: bool = False
    completed_at: Optional[float] = None
    current_streak: int = 0
    best_streak: int = 0
    last_completed_date: Optional[date] = None
    completion_history: Tuple[CompletionRecord, ...] = ()


@dataclass
class Task:
    """A recurring barn duty such as mucking stalls or evening feed."""

    task_id: str
    user_id: str
    title: str
    category: TaskCategory = TaskCategory.OTHER
    frequency: TaskFrequency = TaskFrequency.DAILY
    priority: TaskPriority = TaskPriority.HIGH
    description: Optional[str] = None
    created_at: float = field(default_factory=time.time)
    completed: bool = False
    completed_at: Optional[float] = None
    current_streak: int = 0
    best_streak: int = 0
    last_completed_date: Optional[date] = None
    completion_history: Tuple[CompletionRecord, ...] = ()

    def __post_init__(self) -> None:
        if not str(self.title).strip():
            raise ValueError("Task title is required")
        self.title = str(self.title).strip()
        self.category = parse_enum(TaskCategory, self.category)
        self.frequency = parse_enum(TaskFrequency, self.frequency)
        self.priority = parse_enum(TaskPriority, self.priority)
        self.last_completed_date = parse_date(self.last_completed_date)
        self.completion_history = tuple(
            record if isinstance(record, CompletionRecord) else CompletionRecord.from_dict(record)
            for record in self.completion_history or ()
        )

    def streak_state(self) -> TaskStreakState:
        return TaskStreakState(
            completed=self.completed,
            completed_at=self.completed_at,
            current_streak=self.current_streak,
            best_streak=self.best_streak,
            last_completed_date=self.last_completed_date,
            completion_history=self.completion_history,
        )

    def with_streak_state(self, state: TaskStreakState) -> "Task":
        return replace(
            self,
            completed=state.completed,
            completed_at=state.completed_at,
            current_streak=state.current_streak,
            best_streak=state.best_streak,
            last_completed_date=state.last_completed_date,
            completion_history=tuple(state.completion_history),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "task_id": self.task_id,
            "user_id": self.user_id,
            "title": self.title,
            "description": self.description,
            "category": self.category.value,
            "frequency": self.frequency.value,
            "priority": self.priority.value,
            "created_at": self.created_at,
            "completed": self.completed,
            "completed_at": self.completed_at,
            "current_streak": self.current_streak,
            "best_streak": self.best_streak,
            "last_completed_date": self.last_completed_date.isoformat() if self.last_completed_date else None,
            "completion_history": [record.to_dict() for record in self.completion_history],
        }


__all__ = ["CompletionRecord", "Task", "TaskStreakState", "parse_date"]
