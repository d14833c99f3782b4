"""
Day Repository - annotations on the days/{dayKey} documents.

Day documents belong to the task/habit screens; the core only
sets and clears the weekly pass flag on them.
"""

from typing import Any

from dayflow.storage import document_repo

PASS_FLAG = "passUsed"


def day_path(day: str) -> str:
    return f"days/{day}"


async def get_day(user_id: str, day: str) -> dict[str, Any] | None:
    return await document_repo.read(user_id, day_path(day))


async def set_pass_used(user_id: str, day: str, used: bool) -> None:
    await document_repo.write(user_id, day_path(day), {PASS_FLAG: used}, merge=True)


async def is_pass_used(user_id: str, day: str) -> bool:
    data = await get_day(user_id, day)
    return bool(data and data.get(PASS_FLAG))
