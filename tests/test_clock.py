"""Tests for the day-cutoff clock."""

from datetime import datetime, timedelta

import pytest

from dayflow.core.domain.clock import (
    day_key,
    is_weekday,
    iso_week_key,
    logical_date,
    previous_day_key,
)


@pytest.mark.parametrize(
    "moment, expected",
    [
        (datetime(2025, 3, 10, 0, 0), "2025-03-09"),
        (datetime(2025, 3, 10, 1, 59, 59), "2025-03-09"),
        (datetime(2025, 3, 10, 2, 0), "2025-03-10"),
        (datetime(2025, 3, 10, 23, 59, 59), "2025-03-10"),
        (datetime(2025, 1, 1, 1, 0), "2024-12-31"),
    ],
)
def test_day_key_uses_two_hour_cutoff(moment: datetime, expected: str) -> None:
    """Before 02:00 the logical day is still yesterday."""
    assert day_key(moment) == expected


def test_day_key_is_deterministic_for_every_minute_of_a_day() -> None:
    start = datetime(2025, 6, 15, 0, 0)
    for minute in range(24 * 60):
        moment = start + timedelta(minutes=minute)
        expected = "2025-06-14" if moment.hour < 2 else "2025-06-15"
        assert day_key(moment) == expected
        assert day_key(moment) == day_key(moment)


def test_previous_day_key() -> None:
    assert previous_day_key(datetime(2025, 3, 10, 10, 0)) == "2025-03-09"
    # 01:00 on the 10th is logically the 9th, so yesterday is the 8th
    assert previous_day_key(datetime(2025, 3, 10, 1, 0)) == "2025-03-08"
    assert previous_day_key(datetime(2025, 3, 1, 12, 0)) == "2025-02-28"


@pytest.mark.parametrize(
    "moment, expected",
    [
        (datetime(2025, 3, 10, 10, 0), "2025-W11"),
        (datetime(2024, 12, 30, 12, 0), "2025-W01"),  # ISO year differs
        (datetime(2021, 1, 3, 12, 0), "2020-W53"),
        (datetime(2026, 1, 1, 12, 0), "2026-W01"),
        # Monday 01:00 is still Sunday, i.e. the previous week
        (datetime(2025, 3, 10, 1, 0), "2025-W10"),
    ],
)
def test_iso_week_key(moment: datetime, expected: str) -> None:
    assert iso_week_key(moment) == expected


def test_is_weekday() -> None:
    assert is_weekday(datetime(2025, 3, 10, 10, 0))  # Monday
    assert is_weekday(datetime(2025, 3, 14, 23, 0))  # Friday
    assert not is_weekday(datetime(2025, 3, 15, 10, 0))  # Saturday
    assert not is_weekday(datetime(2025, 3, 16, 10, 0))  # Sunday
    # Saturday 01:30 is logically Friday
    assert is_weekday(datetime(2025, 3, 15, 1, 30))
    # Monday 01:30 is logically Sunday
    assert not is_weekday(datetime(2025, 3, 17, 1, 30))


def test_logical_date_matches_day_key() -> None:
    moment = datetime(2025, 3, 10, 1, 0)
    assert logical_date(moment).isoformat() == day_key(moment)
