"""
Weekly pass API router.

Endpoints:
- GET /api/users/{user_id}/weekly-pass/eligibility - Can the pass be used / undone now
- POST /api/users/{user_id}/weekly-pass/use - Use the pass for today
- POST /api/users/{user_id}/weekly-pass/undo - Undo today's pass
"""

import logging

from fastapi import APIRouter, Depends

from dayflow.core.use_cases.gamification import GamificationService
from dayflow.interfaces.api.deps import get_user_service, to_response
from dayflow.interfaces.api.messages import reason_message
from dayflow.interfaces.api.schemas import ActionResponse

router = APIRouter(prefix="/api/users/{user_id}/weekly-pass", tags=["weekly-pass"])
logger = logging.getLogger(__name__)


@router.get("/eligibility")
async def get_eligibility(
    service: GamificationService = Depends(get_user_service),
) -> dict:
    can_use = service.can_use_weekly_pass()
    can_undo = service.can_undo_weekly_pass()
    return {
        "can_use": can_use.ok,
        "use_reason": can_use.reason.value if can_use.reason else None,
        "use_message": reason_message(can_use.reason),
        "can_undo": can_undo.ok,
        "undo_reason": can_undo.reason.value if can_undo.reason else None,
        "undo_message": reason_message(can_undo.reason),
    }


@router.post("/use", response_model=ActionResponse)
async def use_pass(
    user_id: str,
    service: GamificationService = Depends(get_user_service),
) -> ActionResponse:
    """
    Use the weekly pass.

    Streaks advance as if today was completed. No XP is awarded.
    """
    result = await service.use_weekly_pass()
    if result.ok:
        logger.info(f"Weekly pass used via API by user {user_id}")
    return to_response(result)


@router.post("/undo", response_model=ActionResponse)
async def undo_pass(
    user_id: str,
    service: GamificationService = Depends(get_user_service),
) -> ActionResponse:
    """Same-day undo: streaks go back to their exact values from before the pass."""
    result = await service.undo_weekly_pass()
    if result.ok:
        logger.info(f"Weekly pass undone via API by user {user_id}")
    return to_response(result)
