"""Tests for the quota ledger and the spending guard."""

from datetime import datetime, timedelta

import pytest

from age_guard.config.constants import ViolationCode
from age_guard.core.exceptions import ValidationError
from age_guard.services.policy import resolve_restrictions
from age_guard.services.quota import QuotaLedger
from age_guard.services.spending_guard import SpendingGuard


@pytest.fixture
def guard(restriction_repo, spending_repo, clock) -> SpendingGuard:
    return SpendingGuard(restriction_repo, spending_repo, clock=clock)


@pytest.fixture
def minor(restriction_repo) -> str:
    # daily 1000 / monthly 5000
    restriction_repo.bundles["child-1"] = resolve_restrictions(12)
    return "child-1"


class TestQuotaLedger:
    @pytest.mark.asyncio
    async def test_totals_split_day_and_month(self, spending_repo, clock) -> None:
        await spending_repo.create("child-1", 300, "today", clock())
        await spending_repo.create("child-1", 200, "earlier this month", clock() - timedelta(days=3))
        await spending_repo.create("child-1", 999, "last month", datetime(2024, 5, 31, 23, 59))
        await spending_repo.create("someone-else", 50, "other user", clock())

        usage = await QuotaLedger(spending_repo, clock).totals("child-1")

        assert usage.daily == 300
        assert usage.monthly == 500
        assert usage.last_updated == clock()

    @pytest.mark.asyncio
    async def test_day_boundary_is_half_open(self, spending_repo, clock) -> None:
        await spending_repo.create("child-1", 100, "yesterday 23:59", datetime(2024, 6, 11, 23, 59, 59))
        await spending_repo.create("child-1", 100, "midnight", datetime(2024, 6, 12, 0, 0))

        usage = await QuotaLedger(spending_repo, clock).totals("child-1")

        assert usage.daily == 100
        assert usage.monthly == 200


class TestSpendingGuardCheck:
    @pytest.mark.asyncio
    async def test_unrestricted_user_has_no_usage(self, guard) -> None:
        result = await guard.check("adult-1", 1_000_000)

        assert result.allowed is True
        assert result.current_usage is None
        assert result.to_dict() == {"allowed": True}

    @pytest.mark.asyncio
    async def test_daily_cap_is_inclusive(self, guard, spending_repo, clock, minor) -> None:
        await spending_repo.create(minor, 700, "earlier", clock())

        at_cap = await guard.check(minor, 300)
        over_cap = await guard.check(minor, 301)

        assert at_cap.allowed is True
        assert over_cap.allowed is False
        assert over_cap.code == ViolationCode.DAILY_LIMIT_EXCEEDED
        assert over_cap.current_usage.daily == 700

    @pytest.mark.asyncio
    async def test_monthly_cap(self, guard, spending_repo, clock, minor) -> None:
        for days_ago in range(1, 6):
            await spending_repo.create(minor, 900, "daily spend", clock() - timedelta(days=days_ago))

        result = await guard.check(minor, 600)

        assert result.allowed is False
        assert result.code == ViolationCode.MONTHLY_LIMIT_EXCEEDED
        assert result.current_usage.daily == 0
        assert result.current_usage.monthly == 4500

    @pytest.mark.asyncio
    async def test_daily_reported_before_monthly(self, guard, spending_repo, clock, minor) -> None:
        await spending_repo.create(minor, 1000, "today", clock())
        await spending_repo.create(minor, 4000, "earlier", clock() - timedelta(days=1))

        result = await guard.check(minor, 100)

        assert result.code == ViolationCode.DAILY_LIMIT_EXCEEDED

    @pytest.mark.asyncio
    async def test_check_is_a_pure_read(self, guard, spending_repo, clock, minor) -> None:
        await spending_repo.create(minor, 400, "earlier", clock())

        first = await guard.check(minor, 200)
        second = await guard.check(minor, 200)

        assert first.allowed == second.allowed
        assert first.current_usage == second.current_usage
        assert len(spending_repo.records) == 1


class TestSpendingGuardRecord:
    @pytest.mark.asyncio
    async def test_records_when_allowed(self, guard, spending_repo, minor) -> None:
        result = await guard.record(minor, 600, "gacha")

        assert result.recorded is True
        assert result.record.amount == 600
        assert spending_repo.locked == [minor]
        assert spending_repo.transactions == 1

    @pytest.mark.asyncio
    async def test_denied_spend_is_not_written(self, guard, spending_repo, minor) -> None:
        await guard.record(minor, 600, "first")

        result = await guard.record(minor, 500, "second")

        assert result.recorded is False
        assert result.check.code == ViolationCode.DAILY_LIMIT_EXCEEDED
        assert result.check.current_usage.daily == 600
        assert len(spending_repo.records) == 1

    @pytest.mark.asyncio
    async def test_unrestricted_user_is_recorded(self, guard, spending_repo) -> None:
        result = await guard.record("adult-1", 50_000, "subscription")

        assert result.recorded is True
        assert result.check.current_usage is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [0, -100])
    async def test_rejects_non_positive_amount(self, guard, minor, amount: int) -> None:
        with pytest.raises(ValidationError):
            await guard.record(minor, amount, "invalid")
