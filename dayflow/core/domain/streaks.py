"""
Streak rules - the day-transition rule shared by daily, task and habit streaks.

AICODE-NOTE: Pure functions WITHOUT database access and WITHOUT side-effects.
The aggregate applies these and decides which events to emit.
"""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict


class StreakRecord(BaseModel):
    """One streak counter: (current, longest, last_date)."""

    model_config = ConfigDict(extra="ignore")

    current: int = 0
    longest: int = 0
    last_date: str | None = None


class Transition(str, Enum):
    UNCHANGED = "unchanged"  # already counted today
    STARTED = "started"  # first completion, nothing to break
    EXTENDED = "extended"  # yesterday -> today
    RESET = "reset"  # gap after a live streak


@dataclass(frozen=True)
class StreakChange:
    record: StreakRecord
    transition: Transition
    previous: int


def apply_day(record: StreakRecord, today: str, yesterday: str) -> StreakChange:
    """
    Apply one completion on `today` to a streak record.

    Logic:
    - last_date == today -> current unchanged
    - last_date == yesterday -> current += 1
    - otherwise -> current = 1 (reset if a streak was running)

    `longest` never drops below `current`. The input record is not modified.
    """
    previous = record.current

    if record.last_date == today:
        return StreakChange(
            record=record.model_copy(deep=True),
            transition=Transition.UNCHANGED,
            previous=previous,
        )

    if record.last_date == yesterday:
        current = previous + 1
        transition = Transition.EXTENDED
    else:
        current = 1
        if record.last_date is not None and previous > 0:
            transition = Transition.RESET
        else:
            transition = Transition.STARTED

    updated = StreakRecord(
        current=current,
        longest=max(record.longest, current),
        last_date=today,
    )
    return StreakChange(record=updated, transition=transition, previous=previous)


def best_current(habits: dict[str, StreakRecord]) -> int:
    """Longest running habit streak."""
    return max((h.current for h in habits.values()), default=0)


def is_consistent(record: StreakRecord) -> bool:
    """Invariant: longest >= current >= 0."""
    return record.longest >= record.current >= 0
