"""
Session registry - one in-memory GamificationService per user per process.

The aggregate is read once at session start and then owned by its
service; handing out a second instance for the same user would let two
copies of the state race each other. A session lives until the client
ends it (DELETE /api/users/{user_id}/session) or the process stops; the
next access after that reads the stored progression again.
"""

import asyncio
import logging

from dayflow.core.use_cases.gamification import GamificationService

logger = logging.getLogger(__name__)

_services: dict[str, GamificationService] = {}
_lock = asyncio.Lock()


async def get_service(user_id: str) -> GamificationService:
    """Return the user's service, loading the progression on first access."""
    service = _services.get(user_id)
    if service is not None:
        return service

    async with _lock:
        service = _services.get(user_id)
        if service is None:
            service = await GamificationService.load(user_id)
            _services[user_id] = service
            logger.info(f"Session started for user {user_id}")
    return service


async def end_session(user_id: str) -> bool:
    """Drop the user's in-memory service. Returns False if there was none."""
    async with _lock:
        ended = _services.pop(user_id, None) is not None
    if ended:
        logger.info(f"Session ended for user {user_id}")
    return ended


def active_sessions() -> int:
    return len(_services)


def reset() -> None:
    """Forget every session (shutdown and tests)."""
    global _lock
    _services.clear()
    _lock = asyncio.Lock()
