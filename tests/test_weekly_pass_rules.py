"""Tests for the weekly pass eligibility rules."""

from datetime import datetime

import pytest

from dayflow.core.domain.rejections import RejectReason
from dayflow.core.domain.streaks import StreakRecord
from dayflow.core.domain.weekly_pass import (
    WeeklyPass,
    check_undo,
    check_use,
    mark_undone,
    mark_used,
    take_snapshot,
)
from dayflow.core.errors import InvariantViolation

MONDAY = datetime(2025, 3, 10, 10, 0)
TUESDAY = datetime(2025, 3, 11, 10, 0)
SATURDAY = datetime(2025, 3, 15, 10, 0)
NEXT_MONDAY = datetime(2025, 3, 17, 10, 0)


def _used_on(moment: datetime) -> WeeklyPass:
    snapshot = take_snapshot(
        moment.date().isoformat(), StreakRecord(), StreakRecord(), {}
    )
    return mark_used(moment, snapshot)


def test_fresh_pass_can_be_used_on_weekday() -> None:
    assert check_use(WeeklyPass(), MONDAY) is None


def test_weekend_is_refused() -> None:
    assert check_use(WeeklyPass(), SATURDAY) is RejectReason.WEEKEND_NOT_ALLOWED
    # Weekend wins over prior usage
    assert check_use(_used_on(MONDAY), SATURDAY) is RejectReason.WEEKEND_NOT_ALLOWED


def test_second_use_in_same_week_is_refused() -> None:
    assert check_use(_used_on(MONDAY), TUESDAY) is RejectReason.ALREADY_USED_THIS_WEEK


def test_pass_renews_next_week() -> None:
    assert check_use(_used_on(MONDAY), NEXT_MONDAY) is None


def test_mark_used() -> None:
    state = _used_on(MONDAY)

    assert state.used
    assert state.week_key == "2025-W11"
    assert state.last_used_day == "2025-03-10"
    assert state.snapshot.day == "2025-03-10"


def test_undo_rules() -> None:
    state = _used_on(MONDAY)

    assert check_undo(state, MONDAY) is None
    assert check_undo(WeeklyPass(), MONDAY) is RejectReason.NOT_USED
    assert check_undo(state, TUESDAY) is RejectReason.NOT_TODAY
    assert check_undo(state, NEXT_MONDAY) is RejectReason.DIFFERENT_WEEK


def test_undo_without_snapshot_is_corruption() -> None:
    state = WeeklyPass(week_key="2025-W11", used=True, last_used_day="2025-03-10")

    with pytest.raises(InvariantViolation):
        check_undo(state, MONDAY)


def test_snapshot_day_must_match_last_used_day() -> None:
    state = _used_on(MONDAY)
    state.snapshot.day = "2025-03-09"

    with pytest.raises(InvariantViolation):
        check_undo(state, MONDAY)


def test_snapshot_is_a_deep_copy() -> None:
    habits = {"reading": StreakRecord(current=2, longest=2, last_date="2025-03-09")}
    snapshot = take_snapshot("2025-03-10", StreakRecord(), StreakRecord(), habits)

    habits["reading"].current = 99

    assert snapshot.prev_habits["reading"].current == 2


def test_mark_undone_keeps_week() -> None:
    state = mark_undone(_used_on(MONDAY))

    assert state == WeeklyPass(week_key="2025-W11", used=False)
