"""
UserProgression - the persisted gamification aggregate of one user.

Stored at users/{user_id} -> gamification/stats. Level and rank are a
cache: they are re-derived from xp on every load and every mutation.
"""

from pydantic import BaseModel, ConfigDict, Field

from dayflow.core.domain.achievements import AchievementContext
from dayflow.core.domain.progression import RANKS, level_of, rank_of
from dayflow.core.domain.streaks import StreakRecord, best_current, is_consistent
from dayflow.core.domain.weekly_pass import WeeklyPass, ensure_snapshot
from dayflow.core.errors import InvariantViolation


class Streaks(BaseModel):
    model_config = ConfigDict(extra="ignore")

    daily: StreakRecord = Field(default_factory=StreakRecord)
    tasks: StreakRecord = Field(default_factory=StreakRecord)
    habits: dict[str, StreakRecord] = Field(default_factory=dict)


class UserProgression(BaseModel):
    model_config = ConfigDict(extra="ignore")

    xp: int = 0
    level: int = 1
    rank: str = RANKS[0].name
    achievements: list[str] = Field(default_factory=list)
    streaks: Streaks = Field(default_factory=Streaks)
    weekly_pass: WeeklyPass = Field(default_factory=WeeklyPass)
    total_tasks_completed: int = 0
    total_habits_completed: int = 0
    pomodoro_sessions: int = 0

    def rederive(self) -> None:
        """Recompute level and rank from xp."""
        self.level = level_of(self.xp)
        self.rank = rank_of(self.level).name

    def achievement_context(self, **facts) -> AchievementContext:
        """Context built from the aggregate, plus per-call facts (hour, day totals)."""
        return AchievementContext(
            level=self.level,
            total_tasks_completed=self.total_tasks_completed,
            pomodoro_sessions=self.pomodoro_sessions,
            task_streak=self.streaks.tasks.current,
            best_habit_streak=best_current(self.streaks.habits),
            **facts,
        )

    def check_invariants(self) -> None:
        """Raise InvariantViolation if the state is corrupted."""
        if self.xp < 0:
            raise InvariantViolation(f"Negative xp: {self.xp}")
        if self.level != level_of(self.xp):
            raise InvariantViolation(
                f"Level {self.level} does not match xp {self.xp}"
            )
        if self.rank != rank_of(self.level).name:
            raise InvariantViolation(
                f"Rank {self.rank} does not match level {self.level}"
            )
        for counter in ("total_tasks_completed", "total_habits_completed", "pomodoro_sessions"):
            if getattr(self, counter) < 0:
                raise InvariantViolation(f"Negative counter {counter}")

        records = {"daily": self.streaks.daily, "tasks": self.streaks.tasks}
        records.update({f"habit:{k}": v for k, v in self.streaks.habits.items()})
        for name, record in records.items():
            if not is_consistent(record):
                raise InvariantViolation(
                    f"Streak {name} inconsistent: current={record.current} "
                    f"longest={record.longest}"
                )

        ensure_snapshot(self.weekly_pass)
