"""
Achievement catalog - static definitions and unlock predicates.

The catalog only decides WHAT unlocked. Applying the XP reward is the
aggregate's job, done once in the same state transition as the unlock.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass


@dataclass(frozen=True)
class AchievementContext:
    """
    Facts available when achievements are evaluated.

    Fields left as None are unknown for this evaluation and their
    predicates do not fire. Tracking calls fill in counters and streaks,
    the day summary fills in today's totals.
    """

    level: int = 1
    total_tasks_completed: int = 0
    pomodoro_sessions: int = 0
    task_streak: int = 0
    best_habit_streak: int = 0

    hour: int | None = None  # wall-clock hour of a task completion
    tasks_completed_today: int | None = None
    tasks_total_today: int | None = None
    habits_completed_today: int | None = None
    habits_total_today: int | None = None
    weekly_completion_rate: float | None = None  # 0.0 - 1.0


@dataclass(frozen=True)
class Achievement:
    id: str
    name: str
    description: str
    icon: str
    xp: int
    predicate: Callable[[AchievementContext], bool]
    # (value, target) for the progress bar of locked achievements
    progress: Callable[[AchievementContext], tuple[int, int]] | None = None


def _all_done(done: int | None, total: int | None) -> bool:
    return done is not None and total is not None and total > 0 and done >= total


def _capped(value: int, target: int) -> tuple[int, int]:
    return min(value, target), target


CATALOG: tuple[Achievement, ...] = (
    Achievement(
        "first_task", "First Step", "Complete your first task", "🎯", 50,
        lambda c: (c.tasks_completed_today or 0) > 0,
        lambda c: _capped(c.total_tasks_completed, 1),
    ),
    Achievement(
        "task_streak_3", "Consistency", "Complete tasks 3 days in a row", "🔥", 100,
        lambda c: c.task_streak >= 3,
        lambda c: _capped(c.task_streak, 3),
    ),
    Achievement(
        "task_streak_7", "Weekly Hero", "Complete tasks 7 days in a row", "⭐", 250,
        lambda c: c.task_streak >= 7,
        lambda c: _capped(c.task_streak, 7),
    ),
    Achievement(
        "habit_master", "Habit Master", "Complete all habits in one day", "👑", 150,
        lambda c: _all_done(c.habits_completed_today, c.habits_total_today),
    ),
    Achievement(
        "early_bird", "Early Bird", "Complete a task before 07:00", "🌅", 75,
        lambda c: c.hour is not None and c.hour < 7,
    ),
    Achievement(
        "night_owl", "Night Owl", "Complete a task after 22:00", "🦉", 75,
        lambda c: c.hour is not None and c.hour >= 22,
    ),
    Achievement(
        "perfectionist", "Perfectionist", "Complete 100% of tasks in one day", "💎", 200,
        lambda c: _all_done(c.tasks_completed_today, c.tasks_total_today),
    ),
    Achievement(
        "habit_streak_7", "Habit Champion", "Keep one habit 7 days in a row", "🏆", 300,
        lambda c: c.best_habit_streak >= 7,
        lambda c: _capped(c.best_habit_streak, 7),
    ),
    Achievement(
        "productive_week", "Productive Week", "Weekly average above 80%", "📈", 400,
        lambda c: c.weekly_completion_rate is not None and c.weekly_completion_rate >= 0.8,
    ),
    Achievement(
        "level_5", "Experienced", "Reach level 5", "🌟", 0,
        lambda c: c.level >= 5,
        lambda c: _capped(c.level, 5),
    ),
    Achievement(
        "level_10", "Expert", "Reach level 10", "💫", 0,
        lambda c: c.level >= 10,
        lambda c: _capped(c.level, 10),
    ),
    Achievement(
        "pomodoro_master", "Pomodoro Master", "Complete 25 pomodoros", "🍅", 300,
        lambda c: c.pomodoro_sessions >= 25,
        lambda c: _capped(c.pomodoro_sessions, 25),
    ),
)

BY_ID: dict[str, Achievement] = {a.id: a for a in CATALOG}


def get(achievement_id: str) -> Achievement:
    return BY_ID[achievement_id]


def evaluate(context: AchievementContext, unlocked: Iterable[str]) -> list[str]:
    """Ids of achievements whose predicate holds and that are not unlocked yet."""
    owned = set(unlocked)
    return [a.id for a in CATALOG if a.id not in owned and a.predicate(context)]


def progress_for(achievement: Achievement, context: AchievementContext) -> tuple[int, int]:
    """Progress pair for a locked achievement; one-off achievements show (0, 1)."""
    if achievement.progress is None:
        return 0, 1
    return achievement.progress(context)
