"""
Domain events emitted by the gamification aggregate for UI notifications.

Delivery is best-effort and in-process: listeners registered at emission
time get the event, nothing is queued or replayed.
"""

import logging
from collections.abc import Callable
from dataclasses import asdict, dataclass
from typing import Any, ClassVar

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DomainEvent:
    name: ClassVar[str] = "event"

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, **asdict(self)}


@dataclass(frozen=True)
class AchievementsUnlocked(DomainEvent):
    name: ClassVar[str] = "achievements_unlocked"

    ids: tuple[str, ...]


@dataclass(frozen=True)
class StreakUpdated(DomainEvent):
    name: ClassVar[str] = "streak_updated"

    type: str  # daily | tasks | habit
    current: int
    longest: int
    habit_id: str | None = None


@dataclass(frozen=True)
class StreakReset(DomainEvent):
    name: ClassVar[str] = "streak_reset"

    type: str
    previous: int
    habit_id: str | None = None


@dataclass(frozen=True)
class LevelUp(DomainEvent):
    name: ClassVar[str] = "level_up"

    from_level: int
    to_level: int
    xp: int
    milestone: bool = False


@dataclass(frozen=True)
class RankUp(DomainEvent):
    name: ClassVar[str] = "rank_up"

    from_rank: str
    to_rank: str
    level: int


@dataclass(frozen=True)
class PassUsed(DomainEvent):
    name: ClassVar[str] = "pass_used"

    day: str
    week_key: str


@dataclass(frozen=True)
class PassUndone(DomainEvent):
    name: ClassVar[str] = "pass_undone"

    day: str
    week_key: str


Listener = Callable[[DomainEvent], None]


class EventBus:
    """
    Explicit observer registry owned by the aggregate.

    Usage:
        bus = EventBus()
        unsubscribe = bus.subscribe(lambda event: toasts.push(event.to_dict()))
    """

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, event: DomainEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                # One broken listener must not starve the others
                logger.exception(f"Listener failed on {event.name}: {e}")
