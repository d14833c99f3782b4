"""
Progression Repository - load/save the gamification/stats document.

AICODE-NOTE: Only data access, NO business logic.
Re-deriving level/rank is the domain's job (UserProgression.rederive).
"""

from typing import Any

from dayflow.core.domain.state import UserProgression
from dayflow.storage import document_repo

PATH = "gamification/stats"


def dump(progression: UserProgression) -> dict[str, Any]:
    return progression.model_dump(mode="json")


async def load(user_id: str) -> UserProgression | None:
    """Stored progression, or None if the user never had one."""
    data = await document_repo.read(user_id, PATH)
    if data is None:
        return None
    return UserProgression.model_validate(data)


async def save(user_id: str, fields: dict[str, Any]) -> None:
    """Merge-write the given top-level fields."""
    await document_repo.write(user_id, PATH, fields, merge=True)


async def list_all() -> list[tuple[str, UserProgression]]:
    return [
        (user_id, UserProgression.model_validate(data))
        for user_id, data in await document_repo.list_by_path(PATH)
    ]
