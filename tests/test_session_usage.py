"""Tests for session tracking and the continuous-usage guard."""

from datetime import datetime, timedelta

import pytest

from age_guard.config.constants import ViolationCode
from age_guard.core.exceptions import SessionNotFoundError
from age_guard.services.policy import resolve_restrictions
from age_guard.services.session_store import SessionStore
from age_guard.services.usage_guard import ContinuousUsageGuard


@pytest.fixture
def store(session_repo, clock) -> SessionStore:
    return SessionStore(session_repo, clock=clock)


@pytest.fixture
def usage_guard(restriction_repo, store, clock) -> ContinuousUsageGuard:
    restriction_repo.bundles["child-1"] = resolve_restrictions(13)
    return ContinuousUsageGuard(restriction_repo, store, clock=clock)


class TestSessionStore:
    @pytest.mark.asyncio
    async def test_start_creates_active_session(self, store, clock) -> None:
        session = await store.start("child-1")

        assert session.is_active is True
        assert session.start_time == clock()
        assert await store.current_active("child-1") == session

    @pytest.mark.asyncio
    async def test_second_start_returns_existing_session(self, store, session_repo, clock) -> None:
        first = await store.start("child-1")
        clock.advance(timedelta(minutes=30))

        second = await store.start("child-1")

        assert second.id == first.id
        assert second.start_time == first.start_time
        assert len(session_repo.sessions) == 1

    @pytest.mark.asyncio
    async def test_open_reports_resumed_session(self, store, clock) -> None:
        first, resumed_first = await store.open("child-1")
        clock.advance(timedelta(hours=3))

        second, resumed_second = await store.open("child-1")

        assert (resumed_first, resumed_second) == (False, True)
        assert second.id == first.id

    @pytest.mark.asyncio
    async def test_end_closes_session(self, store, clock) -> None:
        session = await store.start("child-1")
        clock.advance(timedelta(minutes=10))

        ended = await store.end(session.id, user_id="child-1")

        assert ended.is_active is False
        assert ended.end_time == clock()
        assert await store.current_active("child-1") is None

    @pytest.mark.asyncio
    async def test_end_twice_raises(self, store) -> None:
        session = await store.start("child-1")
        await store.end(session.id)

        with pytest.raises(SessionNotFoundError):
            await store.end(session.id)

    @pytest.mark.asyncio
    async def test_end_unknown_session_raises(self, store) -> None:
        with pytest.raises(SessionNotFoundError):
            await store.end(999)

    @pytest.mark.asyncio
    async def test_cannot_end_another_users_session(self, store) -> None:
        session = await store.start("child-1")

        with pytest.raises(SessionNotFoundError):
            await store.end(session.id, user_id="child-2")
        assert await store.current_active("child-1") is not None

    @pytest.mark.asyncio
    async def test_close_stale_only_touches_old_sessions(self, store, clock) -> None:
        clock.set(datetime(2024, 6, 11, 20, 0))
        old = await store.start("child-1")
        clock.set(datetime(2024, 6, 12, 11, 0))
        fresh = await store.start("child-2")
        clock.set(datetime(2024, 6, 12, 12, 0))

        closed = await store.close_stale(timedelta(hours=12))

        assert closed == 1
        assert old.is_active is False
        assert fresh.is_active is True


class TestContinuousUsageGuard:
    @pytest.mark.asyncio
    async def test_no_session_is_allowed(self, usage_guard) -> None:
        result = await usage_guard.check("child-1")

        assert result.allowed is True
        assert result.continuous_minutes is None

    @pytest.mark.asyncio
    async def test_below_limit_is_allowed(self, usage_guard, store, clock) -> None:
        await store.start("child-1")
        clock.advance(timedelta(minutes=59, seconds=59))

        result = await usage_guard.check("child-1")

        assert result.allowed is True
        assert result.continuous_minutes == 59

    @pytest.mark.asyncio
    async def test_limit_reached_suggests_break(self, usage_guard, store, clock) -> None:
        await store.start("child-1")
        clock.advance(timedelta(minutes=60))

        result = await usage_guard.check("child-1")

        assert result.allowed is False
        assert result.code == ViolationCode.CONTINUOUS_USAGE_LIMIT
        assert result.suggested_break == 15
        assert result.continuous_minutes == 60
        assert result.to_dict()["suggestedBreak"] == 15

    @pytest.mark.asyncio
    async def test_new_session_after_break_resets_clock(self, usage_guard, store, clock) -> None:
        session = await store.start("child-1")
        clock.advance(timedelta(minutes=70))
        await store.end(session.id)
        clock.advance(timedelta(minutes=15))
        await store.start("child-1")

        result = await usage_guard.check("child-1")

        assert result.allowed is True
        assert result.continuous_minutes == 0

    @pytest.mark.asyncio
    async def test_unrestricted_user_is_never_limited(self, usage_guard, store, clock) -> None:
        await store.start("adult-1")
        clock.advance(timedelta(hours=5))

        assert (await usage_guard.check("adult-1")).allowed is True

    @pytest.mark.asyncio
    async def test_break_length_is_configurable(self, restriction_repo, store, clock) -> None:
        restriction_repo.bundles["child-1"] = resolve_restrictions(13)
        guard = ContinuousUsageGuard(restriction_repo, store, clock=clock, suggested_break_minutes=30)
        await store.start("child-1")
        clock.advance(timedelta(minutes=90))

        result = await guard.check("child-1")

        assert result.suggested_break == 30
        assert "30" in result.reason
