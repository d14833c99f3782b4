"""
Re-derive the cached level and rank of every stored progression from its XP.
Run: python -m scripts.ops.recalc_progress
"""

import asyncio

from tortoise import Tortoise

from dayflow.database.config import TORTOISE_ORM
from dayflow.storage import progression_repo


async def recalculate_all_progressions() -> int:
    """Rewrite level/rank where the cache drifted. Returns the number of fixed users."""
    progressions = await progression_repo.list_all()
    print(f"Found {len(progressions)} progressions to check")

    fixed = 0
    for user_id, progression in progressions:
        old_level, old_rank = progression.level, progression.rank
        progression.rederive()

        if (old_level, old_rank) == (progression.level, progression.rank):
            continue

        await progression_repo.save(
            user_id, {"level": progression.level, "rank": progression.rank}
        )
        fixed += 1
        print(
            f"  User {user_id}: level {old_level} -> {progression.level}, "
            f"rank {old_rank} -> {progression.rank} ({progression.xp} XP)"
        )

    return fixed


async def main() -> None:
    await Tortoise.init(config=TORTOISE_ORM)
    try:
        fixed = await recalculate_all_progressions()
    finally:
        await Tortoise.close_connections()
    print(f"\nDone! {fixed} progressions updated")


if __name__ == "__main__":
    asyncio.run(main())
