"""
Gamification Service - the aggregate owning one user's progression.

AICODE-NOTE: The service combines repositories + domain rules.
Every mutator works on a copy of the state, persists the changed fields
and only then swaps the in-memory state and emits events. A failed write
leaves memory untouched and raises PersistenceError.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from tortoise.exceptions import BaseORMException

from dayflow.core.domain import achievements, weekly_pass
from dayflow.core.domain.clock import day_key, previous_day_key
from dayflow.core.domain.progression import (
    HABIT_XP,
    POMODORO_XP,
    TASK_XP,
    is_milestone,
    rank_of,
)
from dayflow.core.domain.rejections import RejectReason
from dayflow.core.domain.state import UserProgression
from dayflow.core.domain.streaks import StreakRecord, Transition, apply_day
from dayflow.core.errors import DayflowError, PersistenceError
from dayflow.core.events import (
    AchievementsUnlocked,
    DomainEvent,
    EventBus,
    LevelUp,
    PassUndone,
    PassUsed,
    RankUp,
    StreakReset,
    StreakUpdated,
)
from dayflow.storage import day_repo, progression_repo

logger = logging.getLogger(__name__)


@dataclass
class ActionResult:
    """Result of a tracking call or an eligibility check."""

    ok: bool = True
    reason: RejectReason | None = None
    xp: int = 0
    level: int = 1
    rank: str = ""
    new_achievements: list[str] = field(default_factory=list)
    events: list[DomainEvent] = field(default_factory=list)


@dataclass
class DaySummary:
    """Today's totals as reported by the task/habit screens."""

    tasks_completed: int = 0
    tasks_total: int = 0
    habits_completed: int = 0
    habits_total: int = 0
    weekly_completion_rate: float | None = None


@dataclass
class AchievementProgress:
    id: str
    name: str
    description: str
    icon: str
    xp: int
    unlocked: bool
    value: int
    target: int


@dataclass
class _Draft:
    """Working copy of the state for a single mutation."""

    state: UserProgression
    events: list[DomainEvent] = field(default_factory=list)
    unlocked: list[str] = field(default_factory=list)


class GamificationService:
    """
    Gamification aggregate for a single user session.

    Usage:
        service = await GamificationService.load(user_id)
        service.bus.subscribe(on_event)
        result = await service.track_task_completion(True)
    """

    def __init__(
        self,
        user_id: str,
        progression: UserProgression | None = None,
        bus: EventBus | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.user_id = user_id
        self.bus = bus or EventBus()
        self._clock = clock
        self._lock = asyncio.Lock()
        self._state = progression or UserProgression()
        self._state.rederive()
        self._state.check_invariants()

    @classmethod
    async def load(
        cls,
        user_id: str,
        bus: EventBus | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> "GamificationService":
        """Read the stored progression once; a new user starts from zero."""
        try:
            progression = await progression_repo.load(user_id)
        except BaseORMException as e:
            logger.exception(f"Failed to load progression for user {user_id}: {e}")
            raise PersistenceError(
                user_id,
                progression_repo.PATH,
                f"Could not load {progression_repo.PATH} for user {user_id}, please retry",
            ) from e
        if progression is None:
            logger.info(f"No progression for user {user_id}, starting fresh")
        return cls(user_id, progression, bus=bus, clock=clock)

    @property
    def progression(self) -> UserProgression:
        """Read-only copy of the current state."""
        return self._state.model_copy(deep=True)

    # ------------------------------------------------------------------
    # Tracking
    # ------------------------------------------------------------------

    async def track_task_completion(
        self, completed: bool = True, now: datetime | None = None
    ) -> ActionResult:
        """
        Track a task checkbox.

        On completion: counter + XP, time-of-day achievements,
        then the task and daily streaks. Unchecking changes nothing.
        """
        if not completed:
            return self._result(self._state)

        now = now or self._clock()
        async with self._lock:
            draft = self._draft()
            state = draft.state
            state.total_tasks_completed += 1
            self._add_xp(draft, TASK_XP)

            today, yesterday = day_key(now), previous_day_key(now)
            state.streaks.tasks = self._advance(draft, "tasks", state.streaks.tasks, today, yesterday)
            state.streaks.daily = self._advance(draft, "daily", state.streaks.daily, today, yesterday)

            self._settle(draft, hour=now.hour)
            result = await self._commit(draft)

        logger.info(
            f"Task completed by user {self.user_id}: +{TASK_XP} XP, "
            f"task streak {self._state.streaks.tasks.current}"
        )
        return result

    async def track_habit_completion(
        self, habit_id: str, completed: bool = True, now: datetime | None = None
    ) -> ActionResult:
        """Track a habit checkbox: counter + XP, the habit's own streak and daily."""
        if not habit_id:
            raise ValueError("habit_id is required")
        if not completed:
            return self._result(self._state)

        now = now or self._clock()
        async with self._lock:
            draft = self._draft()
            state = draft.state
            state.total_habits_completed += 1
            self._add_xp(draft, HABIT_XP)

            today, yesterday = day_key(now), previous_day_key(now)
            # Records are created lazily on the first completion
            record = state.streaks.habits.get(habit_id, StreakRecord())
            state.streaks.habits[habit_id] = self._advance(
                draft, "habit", record, today, yesterday, habit_id=habit_id
            )
            state.streaks.daily = self._advance(draft, "daily", state.streaks.daily, today, yesterday)

            self._settle(draft)
            result = await self._commit(draft)

        logger.info(
            f"Habit {habit_id} completed by user {self.user_id}: +{HABIT_XP} XP, "
            f"streak {self._state.streaks.habits[habit_id].current}"
        )
        return result

    async def track_pomodoro_session(self, now: datetime | None = None) -> ActionResult:
        """Track a finished Pomodoro: counter, session achievement, XP, daily streak."""
        now = now or self._clock()
        async with self._lock:
            draft = self._draft()
            state = draft.state
            state.pomodoro_sessions += 1
            self._add_xp(draft, POMODORO_XP)

            state.streaks.daily = self._advance(
                draft, "daily", state.streaks.daily, day_key(now), previous_day_key(now)
            )

            self._settle(draft)
            result = await self._commit(draft)

        logger.info(
            f"Pomodoro #{self._state.pomodoro_sessions} by user {self.user_id}: "
            f"+{POMODORO_XP} XP"
        )
        return result

    async def check_day_achievements(self, summary: DaySummary) -> ActionResult:
        """Evaluate achievements that depend on today's totals (first task, perfect day...)."""
        counts = (
            summary.tasks_completed,
            summary.tasks_total,
            summary.habits_completed,
            summary.habits_total,
        )
        if any(c < 0 for c in counts):
            raise ValueError("Day totals must not be negative")

        async with self._lock:
            draft = self._draft()
            self._settle(
                draft,
                tasks_completed_today=summary.tasks_completed,
                tasks_total_today=summary.tasks_total,
                habits_completed_today=summary.habits_completed,
                habits_total_today=summary.habits_total,
                weekly_completion_rate=summary.weekly_completion_rate,
            )
            return await self._commit(draft)

    # ------------------------------------------------------------------
    # XP
    # ------------------------------------------------------------------

    async def award_xp(self, amount: int) -> ActionResult:
        """Add XP; level-gated achievements and level/rank events follow."""
        if amount <= 0:
            raise ValueError(f"XP amount must be positive, got {amount}")

        async with self._lock:
            draft = self._draft()
            self._add_xp(draft, amount)
            self._settle(draft)
            result = await self._commit(draft)

        logger.info(f"Awarded {amount} XP to user {self.user_id}: total {result.xp}")
        return result

    async def spend_xp(self, amount: int) -> ActionResult:
        """
        Spend XP. Refused with insufficient_xp when the balance is too low.

        Level is derived from xp, so it can go down here.
        """
        if amount <= 0:
            raise ValueError(f"XP amount must be positive, got {amount}")

        async with self._lock:
            if amount > self._state.xp:
                return self._reject(RejectReason.INSUFFICIENT_XP)

            draft = self._draft()
            draft.state.xp -= amount
            draft.state.rederive()
            result = await self._commit(draft)

        logger.info(f"User {self.user_id} spent {amount} XP: total {result.xp}")
        return result

    # ------------------------------------------------------------------
    # Weekly pass
    # ------------------------------------------------------------------

    def can_use_weekly_pass(self, now: datetime | None = None) -> ActionResult:
        reason = weekly_pass.check_use(self._state.weekly_pass, now or self._clock())
        if reason:
            return self._reject(reason)
        return self._result(self._state)

    def can_undo_weekly_pass(self, now: datetime | None = None) -> ActionResult:
        reason = weekly_pass.check_undo(self._state.weekly_pass, now or self._clock())
        if reason:
            return self._reject(reason)
        return self._result(self._state)

    async def use_weekly_pass(self, now: datetime | None = None) -> ActionResult:
        """
        Mark today as satisfied without real completions.

        Streaks advance as if everything was done today. No XP and no
        achievements: the pass can be undone, an unlock can't.
        """
        now = now or self._clock()
        async with self._lock:
            reason = weekly_pass.check_use(self._state.weekly_pass, now)
            if reason:
                logger.info(f"Weekly pass refused for user {self.user_id}: {reason.value}")
                return self._reject(reason)

            draft = self._draft()
            state = draft.state
            today, yesterday = day_key(now), previous_day_key(now)

            snapshot = weekly_pass.take_snapshot(
                today, state.streaks.daily, state.streaks.tasks, state.streaks.habits
            )
            state.streaks.daily = self._advance(draft, "daily", state.streaks.daily, today, yesterday)
            state.streaks.tasks = self._advance(draft, "tasks", state.streaks.tasks, today, yesterday)
            for habit_id, record in list(state.streaks.habits.items()):
                state.streaks.habits[habit_id] = self._advance(
                    draft, "habit", record, today, yesterday, habit_id=habit_id
                )
            state.weekly_pass = weekly_pass.mark_used(now, snapshot)
            draft.events.append(PassUsed(day=today, week_key=state.weekly_pass.week_key))

            state.rederive()
            state.check_invariants()
            await self._write_pass_flag(today, True)
            try:
                result = await self._commit(draft)
            except DayflowError:
                await self._revert_pass_flag(today, False)
                raise

        logger.info(f"Weekly pass used by user {self.user_id} on {today}")
        return result

    async def undo_weekly_pass(self, now: datetime | None = None) -> ActionResult:
        """Restore the streaks captured when the pass was used today."""
        now = now or self._clock()
        async with self._lock:
            reason = weekly_pass.check_undo(self._state.weekly_pass, now)
            if reason:
                logger.info(f"Weekly pass undo refused for user {self.user_id}: {reason.value}")
                return self._reject(reason)

            draft = self._draft()
            state = draft.state
            current = state.weekly_pass
            snapshot = current.snapshot

            state.streaks.daily = snapshot.prev_daily.model_copy(deep=True)
            state.streaks.tasks = snapshot.prev_tasks.model_copy(deep=True)
            state.streaks.habits = {
                k: v.model_copy(deep=True) for k, v in snapshot.prev_habits.items()
            }
            state.weekly_pass = weekly_pass.mark_undone(current)
            draft.events.append(PassUndone(day=snapshot.day, week_key=current.week_key))

            state.rederive()
            state.check_invariants()
            await self._write_pass_flag(snapshot.day, False)
            try:
                result = await self._commit(draft)
            except DayflowError:
                await self._revert_pass_flag(snapshot.day, True)
                raise

        logger.info(f"Weekly pass undone by user {self.user_id} on {snapshot.day}")
        return result

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def achievement_progress(self) -> list[AchievementProgress]:
        """Every catalog entry with unlocked flag and progress towards it."""
        owned = set(self._state.achievements)
        context = self._state.achievement_context()
        items = []
        for a in achievements.CATALOG:
            unlocked = a.id in owned
            value, target = achievements.progress_for(a, context)
            if unlocked:
                value = target
            items.append(
                AchievementProgress(
                    id=a.id,
                    name=a.name,
                    description=a.description,
                    icon=a.icon,
                    xp=a.xp,
                    unlocked=unlocked,
                    value=value,
                    target=target,
                )
            )
        return items

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _draft(self) -> _Draft:
        return _Draft(state=self._state.model_copy(deep=True))

    def _add_xp(self, draft: _Draft, amount: int) -> None:
        draft.state.xp += amount
        draft.state.rederive()

    def _advance(
        self,
        draft: _Draft,
        kind: str,
        record: StreakRecord,
        today: str,
        yesterday: str,
        habit_id: str | None = None,
    ) -> StreakRecord:
        change = apply_day(record, today, yesterday)
        if change.transition is Transition.RESET:
            draft.events.append(StreakReset(type=kind, previous=change.previous, habit_id=habit_id))
        if change.transition is not Transition.UNCHANGED:
            draft.events.append(
                StreakUpdated(
                    type=kind,
                    current=change.record.current,
                    longest=change.record.longest,
                    habit_id=habit_id,
                )
            )
        return change.record

    def _settle(self, draft: _Draft, **facts: Any) -> None:
        """
        Unlock every achievement that now holds and add its XP in the same draft.

        Repeats because achievement XP can itself reach a level achievement.
        """
        state = draft.state
        new_ids: list[str] = []
        while True:
            ids = achievements.evaluate(state.achievement_context(**facts), state.achievements)
            if not ids:
                break
            state.achievements.extend(ids)
            new_ids.extend(ids)
            bonus = sum(achievements.get(i).xp for i in ids)
            if bonus:
                self._add_xp(draft, bonus)

        if new_ids:
            draft.unlocked.extend(new_ids)
            draft.events.append(AchievementsUnlocked(ids=tuple(new_ids)))

    async def _commit(self, draft: _Draft) -> ActionResult:
        before = self._state
        after = draft.state
        after.rederive()

        if after.level > before.level:
            draft.events.append(
                LevelUp(
                    from_level=before.level,
                    to_level=after.level,
                    xp=after.xp,
                    milestone=any(
                        is_milestone(lvl) for lvl in range(before.level + 1, after.level + 1)
                    ),
                )
            )
            old_rank, new_rank = rank_of(before.level), rank_of(after.level)
            if new_rank.min_level > old_rank.min_level:
                draft.events.append(
                    RankUp(from_rank=old_rank.name, to_rank=new_rank.name, level=after.level)
                )

        after.check_invariants()

        old_doc = progression_repo.dump(before)
        new_doc = progression_repo.dump(after)
        changed = {k: v for k, v in new_doc.items() if old_doc.get(k) != v}
        if changed:
            try:
                await progression_repo.save(self.user_id, changed)
            except BaseORMException as e:
                logger.exception(f"Failed to save progression for user {self.user_id}: {e}")
                raise PersistenceError(self.user_id, progression_repo.PATH) from e

        self._state = after
        for event in draft.events:
            self.bus.emit(event)

        result = self._result(after)
        result.new_achievements = list(draft.unlocked)
        result.events = list(draft.events)
        return result

    async def _write_pass_flag(self, day: str, used: bool) -> None:
        try:
            await day_repo.set_pass_used(self.user_id, day, used)
        except BaseORMException as e:
            logger.exception(f"Failed to flag day {day} for user {self.user_id}: {e}")
            raise PersistenceError(self.user_id, day_repo.day_path(day)) from e

    async def _revert_pass_flag(self, day: str, used: bool) -> None:
        try:
            await day_repo.set_pass_used(self.user_id, day, used)
        except BaseORMException as e:
            logger.error(
                f"Could not revert pass flag on {day} for user {self.user_id}: {e}"
            )

    def _result(self, state: UserProgression) -> ActionResult:
        return ActionResult(ok=True, xp=state.xp, level=state.level, rank=state.rank)

    def _reject(self, reason: RejectReason) -> ActionResult:
        result = self._result(self._state)
        result.ok = False
        result.reason = reason
        return result
