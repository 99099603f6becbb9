"""Completion streak tracker behaviour."""

import logging
from datetime import date, timedelta

import pytest

from logic.streaks import (
    longest_run,
    next_streak,
    record_completion,
    record_task_completion,
    revert_completion,
    revert_task_completion,
)
from models.task import CompletionRecord, Task, TaskStreakState

START = date(2024, 1, 1)


def _complete_days(days: int, start: date = START) -> TaskStreakState:
    state = TaskStreakState()
    for offset in range(days):
        state = record_completion(state, start + timedelta(days=offset), now=1000.0 + offset)
    return state


def test_consecutive_days_build_a_streak() -> None:
    state = _complete_days(5)

    assert state.current_streak == 5
    assert state.best_streak == 5
    assert state.last_completed_date == date(2024, 1, 5)
    assert [record.date for record in state.completion_history] == [
        START + timedelta(days=offset) for offset in range(5)
    ]


def test_first_completion_starts_at_one() -> None:
    state = record_completion(TaskStreakState(), "2024-03-10", now=42.0)

    assert state.completed is True
    assert state.completed_at == 42.0
    assert state.current_streak == 1
    assert state.best_streak == 1
    assert state.completion_history[0].date == date(2024, 3, 10)


def test_gap_resets_streak_but_keeps_best() -> None:
    state = TaskStreakState(current_streak=3, best_streak=3, last_completed_date=date(2024, 1, 5))

    state = record_completion(state, date(2024, 1, 7), now=1.0)

    assert state.current_streak == 1
    assert state.best_streak == 3


def test_same_day_completion_is_idempotent_for_counters() -> None:
    state = _complete_days(2)

    again = record_completion(state, date(2024, 1, 2), now=5000.0)

    assert again.current_streak == state.current_streak
    assert again.best_streak == state.best_streak
    assert again.last_completed_date == state.last_completed_date
    assert len(again.completion_history) == len(state.completion_history) + 1


def test_completion_before_last_date_restarts_streak() -> None:
    state = TaskStreakState(current_streak=4, best_streak=6, last_completed_date=date(2024, 1, 10))

    state = record_completion(state, date(2024, 1, 8), now=1.0)

    assert state.current_streak == 1
    assert state.best_streak == 6
    assert state.last_completed_date == date(2024, 1, 8)


@pytest.mark.parametrize(
    "current, last, completion, expected",
    [
        (0, None, date(2024, 1, 1), 1),
        (2, date(2024, 1, 1), date(2024, 1, 2), 3),
        (2, date(2024, 1, 2), date(2024, 1, 2), 2),
        (2, date(2023, 12, 30), date(2024, 1, 2), 1),
        (2, date(2024, 2, 28), date(2024, 3, 1), 1),
        (2, date(2024, 2, 29), date(2024, 3, 1), 3),
        (5, date(2023, 12, 31), date(2024, 1, 1), 6),
    ],
)
def test_next_streak_rule(current: int, last: date | None, completion: date, expected: int) -> None:
    assert next_streak(current, last, completion) == expected


def test_best_streak_never_decreases() -> None:
    state = TaskStreakState()
    best_seen = 0
    pattern = [0, 1, 2, 4, 5, 6, 7, 10, 10, 11, 20]
    for offset in pattern:
        state = record_completion(state, START + timedelta(days=offset), now=float(offset))
        assert state.best_streak >= best_seen
        assert state.best_streak >= state.current_streak
        best_seen = state.best_streak

    assert best_seen == 4


def test_record_completion_does_not_mutate_input() -> None:
    state = _complete_days(1)

    record_completion(state, START + timedelta(days=1), now=1.0)

    assert state.current_streak == 1
    assert len(state.completion_history) == 1


def test_revert_restores_previous_counters() -> None:
    before = _complete_days(3)
    after = record_completion(before, date(2024, 1, 4), now=99.0)

    reverted = revert_completion(after)

    assert reverted.completed is False
    assert reverted.completed_at is None
    assert reverted.current_streak == before.current_streak
    assert reverted.best_streak == before.best_streak
    assert reverted.last_completed_date == before.last_completed_date
    assert reverted.completion_history == before.completion_history


def test_revert_then_recomplete_does_not_inflate_streak() -> None:
    state = _complete_days(3)

    state = revert_completion(state)
    state = record_completion(state, date(2024, 1, 3), now=1.0)

    assert state.current_streak == 3
    assert state.best_streak == 3


def test_revert_of_first_completion_returns_to_empty_state() -> None:
    state = record_completion(TaskStreakState(), START, now=1.0)

    reverted = revert_completion(state)

    assert reverted == TaskStreakState()


def test_revert_without_restoring_only_clears_flag() -> None:
    state = _complete_days(3)

    reverted = revert_completion(state, restore_streak=False)

    assert reverted.completed is False
    assert reverted.completed_at is None
    assert reverted.current_streak == 3
    assert reverted.best_streak == 3
    assert reverted.last_completed_date == date(2024, 1, 3)
    assert reverted.completion_history == state.completion_history


def test_revert_of_uncompleted_task_changes_nothing_else() -> None:
    state = TaskStreakState(current_streak=2, best_streak=5, last_completed_date=START)

    assert revert_completion(state) == state


def test_revert_of_legacy_record_without_snapshot_drops_record(caplog: pytest.LogCaptureFixture) -> None:
    legacy = CompletionRecord(date=START, timestamp=1.0)
    state = TaskStreakState(
        completed=True,
        completed_at=1.0,
        current_streak=4,
        best_streak=4,
        last_completed_date=START,
        completion_history=(legacy,),
    )

    with caplog.at_level(logging.WARNING):
        reverted = revert_completion(state)

    assert reverted.completed is False
    assert reverted.completion_history == ()
    assert reverted.current_streak == 4
    assert any(record.getMessage() == "streak_revert_without_snapshot" for record in caplog.records)


def test_malformed_history_is_logged_and_not_repaired(caplog: pytest.LogCaptureFixture) -> None:
    history = (
        CompletionRecord(date=date(2024, 1, 5), timestamp=2.0),
        CompletionRecord(date=date(2024, 1, 3), timestamp=1.0),
        CompletionRecord(date=date(2024, 1, 3), timestamp=3.0),
    )
    state = TaskStreakState(
        current_streak=1, best_streak=2, last_completed_date=date(2024, 1, 5), completion_history=history
    )

    with caplog.at_level(logging.WARNING):
        updated = record_completion(state, date(2024, 1, 6), now=4.0)

    assert updated.current_streak == 2
    assert updated.completion_history[:3] == history
    assert any(record.getMessage() == "streak_history_malformed" for record in caplog.records)


def test_task_helpers_round_trip_through_task() -> None:
    task = Task(task_id="t1", user_id="u1", title="Evening feed")

    task = record_task_completion(task, date(2024, 5, 1), now=10.0)
    task = record_task_completion(task, date(2024, 5, 2), now=11.0)
    assert (task.current_streak, task.best_streak, task.completed) == (2, 2, True)

    task = revert_task_completion(task)
    assert (task.current_streak, task.best_streak, task.completed) == (1, 1, False)
    assert task.last_completed_date == date(2024, 5, 1)


def test_longest_run_ignores_order_and_duplicates() -> None:
    dates = [date(2024, 1, 3), date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 2), date(2024, 1, 9)]

    assert longest_run(dates) == 3
    assert longest_run([]) == 0


def test_revert_after_same_day_remark_restores_previous_day() -> None:
    state = _complete_days(2)
    state = record_completion(state, date(2024, 1, 2), now=5000.0)

    reverted = revert_completion(state)

    assert reverted.completed is False
    assert reverted.current_streak == 1
    assert reverted.best_streak == 1
    assert reverted.last_completed_date == date(2024, 1, 1)
    assert [record.date for record in reverted.completion_history] == [date(2024, 1, 1)]
    assert revert_completion(reverted) == reverted


def test_revert_after_remark_of_first_completion_returns_to_empty_state() -> None:
    state = record_completion(TaskStreakState(), START, now=1.0)
    state = record_completion(state, START, now=2.0)

    assert revert_completion(state) == TaskStreakState()


def test_consecutive_day_extends_existing_streak_of_five() -> None:
    state = TaskStreakState(current_streak=5, best_streak=5, last_completed_date=date(2024, 1, 10))

    state = record_completion(state, date(2024, 1, 11), now=1.0)

    assert state.current_streak == 6
    assert state.best_streak == 6


def test_completion_after_long_gap_restarts_at_one() -> None:
    state = TaskStreakState(current_streak=5, best_streak=5, last_completed_date=date(2024, 1, 10))
    state = record_completion(state, date(2024, 1, 11), now=1.0)

    state = record_completion(state, date(2024, 1, 20), now=2.0)

    assert state.current_streak == 1
    assert state.best_streak == 6
