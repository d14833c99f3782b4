"""
Progression rules - pure functions mapping XP to level and level to rank.

AICODE-NOTE: Pure functions WITHOUT database access and WITHOUT side-effects.
Level and rank are always derived from XP, never stored as truth.
"""

import math
from dataclasses import dataclass

# XP per tracked action
TASK_XP = 10
HABIT_XP = 15
POMODORO_XP = 25

# Level-up events at multiples of this are flagged as milestones
MILESTONE_EVERY = 5


@dataclass(frozen=True)
class Rank:
    min_level: int
    name: str
    icon: str


# Ordered ascending by min_level
RANKS: tuple[Rank, ...] = (
    Rank(1, "Seed", "🌱"),
    Rank(5, "Sprout", "🌿"),
    Rank(10, "Sapling", "🪴"),
    Rank(15, "Young Tree", "🌳"),
    Rank(20, "Tree", "🌲"),
    Rank(30, "Grove", "🏞️"),
    Rank(50, "Forest", "🌄"),
)


def level_of(xp: int) -> int:
    """
    Level for a total XP amount.

    Formula: level = floor(sqrt(xp / 100)) + 1
    - 0-99 XP = Level 1
    - 100-399 XP = Level 2
    - 400-899 XP = Level 3

    Negative XP is clamped to 0.
    """
    return math.isqrt(max(xp, 0) // 100) + 1


def xp_for_level(level: int) -> int:
    """Total XP needed to reach `level` (levels below 1 are clamped)."""
    level = max(level, 1)
    return 100 * (level - 1) ** 2


def xp_to_next_level(xp: int) -> int:
    """XP still missing for the next level."""
    return xp_for_level(level_of(xp) + 1) - max(xp, 0)


def rank_of(level: int) -> Rank:
    """Highest rank whose min_level <= level. Levels below 1 get the first rank."""
    current = RANKS[0]
    for rank in RANKS:
        if rank.min_level <= level:
            current = rank
        else:
            break
    return current


def is_milestone(level: int) -> bool:
    return level % MILESTONE_EVERY == 0
