"""
Pydantic schemas for the UI API.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# ============ Requests ============


class CompletionRequest(BaseModel):
    """Checkbox state sent by the task/habit lists."""

    completed: bool = True


class XPRequest(BaseModel):
    amount: int = Field(gt=0)


class DaySummaryRequest(BaseModel):
    tasks_completed: int = Field(default=0, ge=0)
    tasks_total: int = Field(default=0, ge=0)
    habits_completed: int = Field(default=0, ge=0)
    habits_total: int = Field(default=0, ge=0)
    weekly_completion_rate: float | None = Field(default=None, ge=0.0, le=1.0)


# ============ Responses ============


class ActionResponse(BaseModel):
    """Derived values after a mutation, plus events for toasts."""

    ok: bool
    xp: int
    level: int
    rank: str
    rank_icon: str
    xp_to_next_level: int
    new_achievements: list[str] = []
    events: list[dict[str, Any]] = []


class StreakResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    current: int
    longest: int
    last_date: str | None = None


class StreaksResponse(BaseModel):
    daily: StreakResponse
    tasks: StreakResponse
    habits: dict[str, StreakResponse]


class WeeklyPassResponse(BaseModel):
    week_key: str | None = None
    used: bool
    last_used_day: str | None = None
    can_use: bool
    use_reason: str | None = None
    can_undo: bool
    undo_reason: str | None = None


class ProgressionResponse(BaseModel):
    """Full progression view for the header and statistics screens."""

    xp: int
    level: int
    rank: str
    rank_icon: str
    xp_to_next_level: int
    achievements: list[str]
    streaks: StreaksResponse
    weekly_pass: WeeklyPassResponse
    total_tasks_completed: int
    total_habits_completed: int
    pomodoro_sessions: int


class AchievementResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str
    icon: str
    xp: int
    unlocked: bool
    value: int
    target: int
