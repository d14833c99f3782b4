"""
Shared dependencies and response helpers for the routers.
"""

from fastapi import HTTPException, status

from dayflow.core.domain.progression import rank_of, xp_to_next_level
from dayflow.core.use_cases.gamification import ActionResult, GamificationService
from dayflow.interfaces.api.messages import reason_message
from dayflow.interfaces.api.schemas import ActionResponse
from dayflow.services import sessions


async def get_user_service(user_id: str) -> GamificationService:
    """Session for the user in the path (auth is handled in front of the API)."""
    return await sessions.get_service(user_id)


def to_response(result: ActionResult) -> ActionResponse:
    """
    Convert a service result.

    Rejections become 409 with {reason, message} so the UI can show a toast.
    """
    if not result.ok:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "reason": result.reason.value,
                "message": reason_message(result.reason),
            },
        )

    return ActionResponse(
        ok=True,
        xp=result.xp,
        level=result.level,
        rank=result.rank,
        rank_icon=rank_of(result.level).icon,
        xp_to_next_level=xp_to_next_level(result.xp),
        new_achievements=result.new_achievements,
        events=[event.to_dict() for event in result.events],
    )
