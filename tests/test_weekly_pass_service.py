"""Tests for using and undoing the weekly pass through the aggregate."""

from datetime import datetime, timedelta

import pytest
from tortoise.exceptions import OperationalError

from dayflow.core.domain.rejections import RejectReason
from dayflow.core.domain.state import UserProgression
from dayflow.core.errors import InvariantViolation, PersistenceError
from dayflow.core.events import PassUndone, PassUsed
from dayflow.core.use_cases.gamification import GamificationService
from dayflow.storage import day_repo, progression_repo

SUNDAY = datetime(2025, 3, 9, 18, 0)
MONDAY = datetime(2025, 3, 10, 10, 0)
TUESDAY = datetime(2025, 3, 11, 10, 0)
SATURDAY = datetime(2025, 3, 15, 10, 0)
NEXT_MONDAY = datetime(2025, 3, 17, 10, 0)


async def _with_history(service: GamificationService) -> None:
    """Task and two habits done on Sunday, a stale habit from last week."""
    await service.track_habit_completion("stretching", now=SUNDAY - timedelta(days=5))
    await service.track_task_completion(True, now=SUNDAY)
    await service.track_habit_completion("reading", now=SUNDAY)
    await service.track_habit_completion("workout", now=SUNDAY)


@pytest.mark.asyncio
async def test_use_extends_every_streak_without_xp(service: GamificationService) -> None:
    await _with_history(service)
    xp_before = service.progression.xp

    result = await service.use_weekly_pass(now=MONDAY)

    state = service.progression
    assert result.ok
    assert state.xp == xp_before
    assert result.new_achievements == []
    assert state.streaks.daily.current == 2
    assert state.streaks.tasks.current == 2
    assert state.streaks.habits["reading"].current == 2
    assert state.streaks.habits["workout"].current == 2
    # Gap since last week: restarts at 1 like a real completion would
    assert state.streaks.habits["stretching"].current == 1
    assert state.weekly_pass.used
    assert state.weekly_pass.week_key == "2025-W11"
    assert state.weekly_pass.last_used_day == "2025-03-10"
    assert await day_repo.is_pass_used("user-1", "2025-03-10")
    assert PassUsed(day="2025-03-10", week_key="2025-W11") in result.events


@pytest.mark.asyncio
async def test_use_then_undo_restores_exact_streaks(service: GamificationService) -> None:
    await _with_history(service)
    before = service.progression

    await service.use_weekly_pass(now=MONDAY)
    result = await service.undo_weekly_pass(now=MONDAY + timedelta(hours=3))

    after = service.progression
    assert result.ok
    assert after.streaks == before.streaks
    assert after.xp == before.xp
    assert after.weekly_pass.used is False
    assert after.weekly_pass.snapshot is None
    assert after.weekly_pass.last_used_day is None
    assert after.weekly_pass.week_key == "2025-W11"
    assert not await day_repo.is_pass_used("user-1", "2025-03-10")
    assert PassUndone(day="2025-03-10", week_key="2025-W11") in result.events

    stored = await progression_repo.load("user-1")
    assert stored.streaks == before.streaks


@pytest.mark.asyncio
async def test_undo_then_use_again_same_day(service: GamificationService) -> None:
    await service.use_weekly_pass(now=MONDAY)
    await service.undo_weekly_pass(now=MONDAY)

    result = await service.use_weekly_pass(now=MONDAY)

    assert result.ok


@pytest.mark.asyncio
async def test_second_use_in_same_week_is_refused(service: GamificationService) -> None:
    await service.use_weekly_pass(now=MONDAY)

    result = await service.use_weekly_pass(now=TUESDAY)

    assert not result.ok
    assert result.reason is RejectReason.ALREADY_USED_THIS_WEEK
    assert service.progression.weekly_pass.last_used_day == "2025-03-10"


@pytest.mark.asyncio
async def test_weekend_is_refused(service: GamificationService) -> None:
    result = await service.use_weekly_pass(now=SATURDAY)

    assert result.reason is RejectReason.WEEKEND_NOT_ALLOWED
    assert not service.progression.weekly_pass.used
    assert service.can_use_weekly_pass(now=SATURDAY).reason is RejectReason.WEEKEND_NOT_ALLOWED


@pytest.mark.asyncio
async def test_pass_is_available_again_next_week(service: GamificationService) -> None:
    await service.use_weekly_pass(now=MONDAY)

    assert service.can_use_weekly_pass(now=NEXT_MONDAY).ok
    result = await service.use_weekly_pass(now=NEXT_MONDAY)

    state = service.progression
    assert result.ok
    assert state.weekly_pass.week_key == "2025-W12"
    assert state.weekly_pass.snapshot.day == "2025-03-17"


@pytest.mark.asyncio
async def test_undo_rejections(service: GamificationService) -> None:
    assert (await service.undo_weekly_pass(now=MONDAY)).reason is RejectReason.NOT_USED

    await service.use_weekly_pass(now=MONDAY)

    assert (await service.undo_weekly_pass(now=TUESDAY)).reason is RejectReason.NOT_TODAY
    assert (
        await service.undo_weekly_pass(now=NEXT_MONDAY)
    ).reason is RejectReason.DIFFERENT_WEEK
    assert service.progression.weekly_pass.used


@pytest.mark.asyncio
async def test_can_undo_checks(service: GamificationService) -> None:
    assert service.can_undo_weekly_pass(now=MONDAY).reason is RejectReason.NOT_USED

    await service.use_weekly_pass(now=MONDAY)

    assert service.can_undo_weekly_pass(now=MONDAY).ok
    assert not service.can_use_weekly_pass(now=MONDAY).ok


@pytest.mark.asyncio
async def test_real_completion_after_pass_keeps_streak(service: GamificationService) -> None:
    """A task done after the pass on the same day does not double-count."""
    await _with_history(service)
    await service.use_weekly_pass(now=MONDAY)

    await service.track_task_completion(True, now=MONDAY + timedelta(hours=2))

    assert service.progression.streaks.tasks.current == 2


@pytest.mark.asyncio
async def test_failed_save_reverts_day_flag(
    service: GamificationService, monkeypatch: pytest.MonkeyPatch
) -> None:
    async def failing_save(user_id: str, fields: dict) -> None:
        raise OperationalError("disk I/O error")

    monkeypatch.setattr(progression_repo, "save", failing_save)

    with pytest.raises(PersistenceError):
        await service.use_weekly_pass(now=MONDAY)

    assert not service.progression.weekly_pass.used
    assert not await day_repo.is_pass_used("user-1", "2025-03-10")


@pytest.mark.asyncio
async def test_invalid_draft_never_sets_day_flag(
    service: GamificationService, monkeypatch: pytest.MonkeyPatch
) -> None:
    def broken(self: UserProgression) -> None:
        raise InvariantViolation("broken")

    monkeypatch.setattr(UserProgression, "check_invariants", broken)

    with pytest.raises(InvariantViolation):
        await service.use_weekly_pass(now=MONDAY)

    assert not service.progression.weekly_pass.used
    assert await day_repo.get_day("user-1", "2025-03-10") is None


@pytest.mark.asyncio
async def test_invariant_failure_on_commit_reverts_day_flag(
    service: GamificationService, monkeypatch: pytest.MonkeyPatch
) -> None:
    original = UserProgression.check_invariants
    calls = {"count": 0}

    def fails_on_commit(self: UserProgression) -> None:
        calls["count"] += 1
        if calls["count"] == 2:
            raise InvariantViolation("broken")
        original(self)

    monkeypatch.setattr(UserProgression, "check_invariants", fails_on_commit)

    with pytest.raises(InvariantViolation):
        await service.use_weekly_pass(now=MONDAY)

    assert calls["count"] == 2
    assert not service.progression.weekly_pass.used
    assert not await day_repo.is_pass_used("user-1", "2025-03-10")
