"""Task tracker service: creates tasks and records completions through the streak tracker."""

from __future__ import annotations

import logging
import time
from datetime import date
from typing import Callable, Dict, List

from barn_app.config import BarnConfig
from barn_app.logging_config import get_logger, log_event, operation_context
from logic.errors import RecordNotFound
from logic.streaks import longest_run, record_task_completion, revert_task_completion
from models.task import CompletionRecord, Task, parse_date
from tools.sqlite_store import new_id
from tools.task_store import TaskStore


LOGGER = get_logger(__name__)


class TaskTrackerAgent:
    """Serializes completion events per task through the store's transactional update."""

    def __init__(
        self,
        config: BarnConfig,
        task_store: TaskStore,
        today: Callable[[], date] = date.today,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config
        self.task_store = task_store
        self._today = today
        self._clock = clock

    def create_task(self, user_id: str, fields: Dict[str, object]) -> Task:
        task = Task(
            task_id=new_id(),
            user_id=user_id,
            title=str(fields.get("title") or ""),
            description=fields.get("description"),
            category=fields.get("category") or "other",
            frequency=fields.get("frequency") or "daily",
            priority=fields.get("priority") or "high",
            created_at=self._clock(),
        )
        return self.task_store.create_task(task)

    def list_tasks(self, user_id: str) -> List[Task]:
        return self.task_store.list_tasks_for_user(user_id)

    def toggle_completion(
        self,
        user_id: str,
        task_id: str,
        completed: bool,
        on_date: date | str | None = None,
    ) -> Task:
        """Mark a task done for ``on_date`` (default today) or uncheck its latest completion."""

        with operation_context("agent:task_tracker.toggle_completion", task_id=task_id) as correlation_id:
            if completed:
                day = parse_date(on_date) or self._today()
                now = self._clock()
                updated = self.task_store.apply_streak_update(
                    user_id, task_id, lambda task: record_task_completion(task, day, now=now)
                )
            else:
                restore = self.config.restore_streak_on_revert
                updated = self.task_store.apply_streak_update(
                    user_id, task_id, lambda task: revert_task_completion(task, restore_streak=restore)
                )

            log_event(
                LOGGER,
                level=logging.INFO,
                event="agent_call_completed",
                agent="task_tracker",
                method="toggle_completion",
                correlation_id=correlation_id,
                task_id=task_id,
                completed=completed,
                current_streak=updated.current_streak,
                best_streak=updated.best_streak,
            )
            return updated

    def task_history(self, user_id: str, task_id: str) -> List[CompletionRecord]:
        return self.task_store.get_task_history(user_id, task_id)

    def streak_report(self, user_id: str) -> List[Dict[str, object]]:
        """Per-task counters plus the longest run recoverable from history."""

        report = []
        for task in self.task_store.list_tasks_for_user(user_id):
            report.append(
                {
                    "task_id": task.task_id,
                    "title": task.title,
                    "current_streak": task.current_streak,
                    "best_streak": task.best_streak,
                    "last_completed_date": (
                        task.last_completed_date.isoformat() if task.last_completed_date else None
                    ),
                    "completions": len(task.completion_history),
                    "longest_recorded_run": longest_run(record.date for record in task.completion_history),
                }
            )
        return report

    def get_task(self, user_id: str, task_id: str) -> Task:
        task = self.task_store.get_task(user_id, task_id)
        if task is None:
            raise RecordNotFound("task", task_id)
        return task


__all__ = ["TaskTrackerAgent"]
