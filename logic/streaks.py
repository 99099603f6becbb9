"""Completion streak tracker for recurring tasks.

A streak counts consecutive calendar days ending at the most recent completion.
``last_completed_date`` alone drives the arithmetic; the completion history is
an audit trail and is never re-sorted or used to override the counters.
"""

from __future__ import annotations

import logging
import time
from dataclasses import replace
from datetime import date, timedelta
from typing import Iterable, List, Optional

from barn_app.logging_config import get_logger, log_event
from models.task import CompletionRecord, Task, TaskStreakState, parse_date

LOGGER = get_logger(__name__)
ONE_DAY = timedelta(days=1)


def _history_problems(history: Iterable[CompletionRecord]) -> List[str]:
    problems: List[str] = []
    seen: set[date] = set()
    previous: Optional[date] = None
    for record in history:
        if previous is not None and record.date < previous:
            problems.append(f"out_of_order:{record.date.isoformat()}")
        if record.date in seen:
            problems.append(f"duplicate:{record.date.isoformat()}")
        seen.add(record.date)
        previous = record.date
    return problems


def _warn_if_malformed(history: Iterable[CompletionRecord]) -> None:
    problems = _history_problems(history)
    if problems:
        log_event(
            LOGGER,
            logging.WARNING,
            "streak_history_malformed",
            problems=problems[:10],
            problem_count=len(problems),
        )


def next_streak(current_streak: int, last_completed_date: Optional[date], completion_date: date) -> int:
    """Three-way rule: yesterday (or never) grows, same day holds, anything else restarts."""

    if last_completed_date is None or last_completed_date == completion_date - ONE_DAY:
        return current_streak + 1
    if last_completed_date == completion_date:
        return current_streak
    return 1


def record_completion(
    state: TaskStreakState, completion_date: date | str, now: Optional[float] = None
) -> TaskStreakState:
    """Return ``state`` updated for a completion on ``completion_date``."""

    day = parse_date(completion_date)
    if day is None:
        raise ValueError("completion_date is required")
    timestamp = time.time() if now is None else now

    _warn_if_malformed(state.completion_history)

    new_streak = next_streak(state.current_streak, state.last_completed_date, day)
    record = CompletionRecord(
        date=day,
        timestamp=timestamp,
        previous_streak=state.current_streak,
        previous_best_streak=state.best_streak,
        previous_last_completed_date=state.last_completed_date,
        previous_completed=state.completed,
    )
    return replace(
        state,
        completed=True,
        completed_at=timestamp,
        current_streak=new_streak,
        best_streak=max(new_streak, state.best_streak),
        last_completed_date=day,
        completion_history=(*state.completion_history, record),
    )


def revert_completion(state: TaskStreakState, restore_streak: bool = True) -> TaskStreakState:
    """Uncheck the latest completion.

    With ``restore_streak`` the completion records for ``last_completed_date``
    (one per same-day re-mark) are removed and the counters snapshotted by the
    first of them are restored. Without it only the completed flag and
    timestamp are cleared, leaving counters and history as they were.
    """

    cleared = replace(state, completed=False, completed_at=None)
    if not restore_streak or not state.completed or state.last_completed_date is None:
        return cleared

    history = list(state.completion_history)
    index = next(
        (i for i in range(len(history) - 1, -1, -1) if history[i].date == state.last_completed_date),
        None,
    )
    if index is None:
        log_event(
            LOGGER,
            logging.WARNING,
            "streak_revert_without_record",
            last_completed_date=state.last_completed_date.isoformat(),
        )
        return cleared

    # same-day re-marks append extra records; undo the whole day from its first snapshot
    start = index
    while start > 0 and history[start - 1].date == state.last_completed_date:
        start -= 1
    record = history[start]
    del history[start : index + 1]
    if not record.has_snapshot:
        log_event(
            LOGGER,
            logging.WARNING,
            "streak_revert_without_snapshot",
            last_completed_date=state.last_completed_date.isoformat(),
        )
        return replace(cleared, completion_history=tuple(history))

    restored_streak = int(record.previous_streak)
    return replace(
        cleared,
        current_streak=restored_streak,
        best_streak=max(int(record.previous_best_streak), restored_streak),
        last_completed_date=record.previous_last_completed_date,
        completion_history=tuple(history),
    )


def record_task_completion(task: Task, completion_date: date | str, now: Optional[float] = None) -> Task:
    return task.with_streak_state(record_completion(task.streak_state(), completion_date, now=now))


def revert_task_completion(task: Task, restore_streak: bool = True) -> Task:
    return task.with_streak_state(revert_completion(task.streak_state(), restore_streak=restore_streak))


def longest_run(dates: Iterable[date]) -> int:
    """Longest run of consecutive calendar days in ``dates`` (order and duplicates ignored)."""

    ordered = sorted(set(dates))
    best = 0
    run = 0
    previous: Optional[date] = None
    for day in ordered:
        run = run + 1 if previous is not None and day - previous == ONE_DAY else 1
        best = max(best, run)
        previous = day
    return best


__all__ = [
    "longest_run",
    "next_streak",
    "record_completion",
    "record_task_completion",
    "revert_completion",
    "revert_task_completion",
]
