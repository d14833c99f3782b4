"""
Session API router.

Endpoints:
- DELETE /api/users/{user_id}/session - End the user's session (sign-out)
"""

import logging

from fastapi import APIRouter

from dayflow.services import sessions

router = APIRouter(prefix="/api/users/{user_id}", tags=["session"])
logger = logging.getLogger(__name__)


@router.delete("/session")
async def end_session(user_id: str) -> dict:
    """
    Drop the in-memory progression of the user.

    The next request reads it back from the store.
    """
    ended = await sessions.end_session(user_id)
    return {"user_id": user_id, "ended": ended}
