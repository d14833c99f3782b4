"""
Progression API router.

Endpoints:
- GET /api/users/{user_id}/progression - Full progression view
- GET /api/users/{user_id}/achievements - Catalog with unlocked flags and progress
- POST /api/users/{user_id}/tasks/complete - Track a task checkbox
- POST /api/users/{user_id}/habits/{habit_id}/complete - Track a habit checkbox
- POST /api/users/{user_id}/pomodoro - Track a finished Pomodoro session
- POST /api/users/{user_id}/day-summary - Check day-level achievements
- POST /api/users/{user_id}/xp/award - Award XP
- POST /api/users/{user_id}/xp/spend - Spend XP
"""

import logging

from fastapi import APIRouter, Depends

from dayflow.core.domain.progression import rank_of, xp_to_next_level
from dayflow.core.use_cases.gamification import DaySummary, GamificationService
from dayflow.interfaces.api.deps import get_user_service, to_response
from dayflow.interfaces.api.schemas import (
    AchievementResponse,
    ActionResponse,
    CompletionRequest,
    DaySummaryRequest,
    ProgressionResponse,
    StreakResponse,
    StreaksResponse,
    WeeklyPassResponse,
    XPRequest,
)

router = APIRouter(prefix="/api/users/{user_id}", tags=["progression"])
logger = logging.getLogger(__name__)


@router.get("/progression", response_model=ProgressionResponse)
async def get_progression(
    service: GamificationService = Depends(get_user_service),
) -> ProgressionResponse:
    """
    Get the user's progression.

    Level and rank are derived from XP. A user without stored data
    gets the zero-valued defaults.
    """
    state = service.progression
    can_use = service.can_use_weekly_pass()
    can_undo = service.can_undo_weekly_pass()
    rank = rank_of(state.level)

    return ProgressionResponse(
        xp=state.xp,
        level=state.level,
        rank=rank.name,
        rank_icon=rank.icon,
        xp_to_next_level=xp_to_next_level(state.xp),
        achievements=state.achievements,
        streaks=StreaksResponse(
            daily=StreakResponse.model_validate(state.streaks.daily),
            tasks=StreakResponse.model_validate(state.streaks.tasks),
            habits={
                k: StreakResponse.model_validate(v)
                for k, v in state.streaks.habits.items()
            },
        ),
        weekly_pass=WeeklyPassResponse(
            week_key=state.weekly_pass.week_key,
            used=state.weekly_pass.used,
            last_used_day=state.weekly_pass.last_used_day,
            can_use=can_use.ok,
            use_reason=can_use.reason.value if can_use.reason else None,
            can_undo=can_undo.ok,
            undo_reason=can_undo.reason.value if can_undo.reason else None,
        ),
        total_tasks_completed=state.total_tasks_completed,
        total_habits_completed=state.total_habits_completed,
        pomodoro_sessions=state.pomodoro_sessions,
    )


@router.get("/achievements", response_model=list[AchievementResponse])
async def get_achievements(
    service: GamificationService = Depends(get_user_service),
) -> list[AchievementResponse]:
    return [
        AchievementResponse.model_validate(item)
        for item in service.achievement_progress()
    ]


@router.post("/tasks/complete", response_model=ActionResponse)
async def complete_task(
    request: CompletionRequest,
    service: GamificationService = Depends(get_user_service),
) -> ActionResponse:
    """Awards XP and updates the task and daily streaks."""
    result = await service.track_task_completion(request.completed)
    return to_response(result)


@router.post("/habits/{habit_id}/complete", response_model=ActionResponse)
async def complete_habit(
    habit_id: str,
    request: CompletionRequest,
    service: GamificationService = Depends(get_user_service),
) -> ActionResponse:
    """Awards XP and updates the habit's own streak and the daily streak."""
    result = await service.track_habit_completion(habit_id, request.completed)
    return to_response(result)


@router.post("/pomodoro", response_model=ActionResponse)
async def complete_pomodoro(
    service: GamificationService = Depends(get_user_service),
) -> ActionResponse:
    result = await service.track_pomodoro_session()
    return to_response(result)


@router.post("/day-summary", response_model=ActionResponse)
async def day_summary(
    request: DaySummaryRequest,
    service: GamificationService = Depends(get_user_service),
) -> ActionResponse:
    """Unlocks first task / perfect day / habit master / productive week."""
    result = await service.check_day_achievements(DaySummary(**request.model_dump()))
    return to_response(result)


@router.post("/xp/award", response_model=ActionResponse)
async def award_xp(
    request: XPRequest,
    service: GamificationService = Depends(get_user_service),
) -> ActionResponse:
    result = await service.award_xp(request.amount)
    return to_response(result)


@router.post("/xp/spend", response_model=ActionResponse)
async def spend_xp(
    request: XPRequest,
    service: GamificationService = Depends(get_user_service),
) -> ActionResponse:
    """Returns 409 insufficient_xp when the balance is too low."""
    result = await service.spend_xp(request.amount)
    return to_response(result)
