"""
Weekly pass rules - a once-per-ISO-week, weekday-only streak protection.

States:
- Unused(week_key)
- Used(week_key, day, snapshot) -> Unused via same-day undo,
  or silently expires when the ISO week rolls over.

The snapshot holds the exact streak records from before the pass was used.
Undo restores them verbatim: the day-transition rule has no inverse.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from dayflow.core.domain.clock import day_key, is_weekday, iso_week_key
from dayflow.core.domain.rejections import RejectReason
from dayflow.core.domain.streaks import StreakRecord
from dayflow.core.errors import InvariantViolation


class Snapshot(BaseModel):
    """Streak records captured at the moment the pass was used."""

    model_config = ConfigDict(extra="ignore")

    day: str
    prev_daily: StreakRecord
    prev_tasks: StreakRecord
    prev_habits: dict[str, StreakRecord] = Field(default_factory=dict)


class WeeklyPass(BaseModel):
    model_config = ConfigDict(extra="ignore")

    week_key: str | None = None
    used: bool = False
    last_used_day: str | None = None
    snapshot: Snapshot | None = None


def check_use(state: WeeklyPass, now: datetime) -> RejectReason | None:
    """None if the pass can be used at `now`, otherwise the reason it can't."""
    if not is_weekday(now):
        return RejectReason.WEEKEND_NOT_ALLOWED
    if state.used and state.week_key == iso_week_key(now):
        return RejectReason.ALREADY_USED_THIS_WEEK
    return None


def check_undo(state: WeeklyPass, now: datetime) -> RejectReason | None:
    """
    None if the pass used today can be undone, otherwise the reason.

    AICODE-NOTE: last_used_day is the single source of truth for "today".
    The snapshot must exist and belong to that same day; anything else
    is corrupted state, not a user-facing rejection.
    """
    if not state.used:
        return RejectReason.NOT_USED
    if state.week_key != iso_week_key(now):
        return RejectReason.DIFFERENT_WEEK
    if state.last_used_day != day_key(now):
        return RejectReason.NOT_TODAY
    ensure_snapshot(state)
    return None


def ensure_snapshot(state: WeeklyPass) -> None:
    """A used pass always carries a snapshot of its own day."""
    if not state.used:
        return
    if state.snapshot is None:
        raise InvariantViolation("Weekly pass is marked used but has no snapshot")
    if state.snapshot.day != state.last_used_day:
        raise InvariantViolation(
            f"Weekly pass snapshot day {state.snapshot.day} "
            f"does not match last used day {state.last_used_day}"
        )


def take_snapshot(
    day: str,
    daily: StreakRecord,
    tasks: StreakRecord,
    habits: dict[str, StreakRecord],
) -> Snapshot:
    return Snapshot(
        day=day,
        prev_daily=daily.model_copy(deep=True),
        prev_tasks=tasks.model_copy(deep=True),
        prev_habits={k: v.model_copy(deep=True) for k, v in habits.items()},
    )


def mark_used(now: datetime, snapshot: Snapshot) -> WeeklyPass:
    return WeeklyPass(
        week_key=iso_week_key(now),
        used=True,
        last_used_day=day_key(now),
        snapshot=snapshot,
    )


def mark_undone(state: WeeklyPass) -> WeeklyPass:
    return WeeklyPass(week_key=state.week_key, used=False)
