"""
Day-cutoff clock - pure functions turning wall-clock time into day/week keys.

A logical day runs 02:00-02:00 local time, so activity logged at 01:30
still counts for the previous calendar day.
"""

from datetime import date, datetime, timedelta

DAY_CUTOFF = timedelta(hours=2)


def logical_date(moment: datetime) -> date:
    """Calendar date of the logical day containing `moment`."""
    return (moment - DAY_CUTOFF).date()


def day_key(moment: datetime) -> str:
    """Day key in YYYY-MM-DD format."""
    return logical_date(moment).isoformat()


def previous_day_key(moment: datetime) -> str:
    """Day key for exactly 24 hours before `moment`."""
    return day_key(moment - timedelta(days=1))


def iso_week_key(moment: datetime) -> str:
    """
    ISO-8601 week key (YYYY-Www) of the logical day.

    Week 1 is the week with the year's first Thursday, weeks start on Monday.
    The year is the ISO year, so 2024-12-30 belongs to 2025-W01.
    """
    iso_year, iso_week, _ = logical_date(moment).isocalendar()
    return f"{iso_year}-W{iso_week:02d}"


def is_weekday(moment: datetime) -> bool:
    """Monday-Friday of the logical day."""
    return logical_date(moment).weekday() < 5
