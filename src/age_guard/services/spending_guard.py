"""消费额度检查"""

import logging
from datetime import datetime
from typing import Callable

from age_guard.config.constants import ViolationCode
from age_guard.core.exceptions import ValidationError
from age_guard.core.timezone import now
from age_guard.models.restriction import RestrictionBundle
from age_guard.models.results import SpendingCheckResult, SpendingRecordResult
from age_guard.models.spending import SpendingUsage
from age_guard.repositories.restriction_repository import RestrictionRepository
from age_guard.repositories.spending_repository import SpendingRepository
from age_guard.services.quota import QuotaLedger
from age_guard.utils.formatter import format_daily_limit_reason, format_monthly_limit_reason

logger = logging.getLogger(__name__)


def evaluate_spending(
    bundle: RestrictionBundle,
    usage: SpendingUsage,
    requested_amount: int,
) -> SpendingCheckResult:
    """
    判断在当前累计上追加 requested_amount 是否超限

    上限本身是允许的，超出上限才拒绝；先检查日额度，再检查月额度。
    """
    if usage.daily + requested_amount > bundle.daily_spending_limit:
        return SpendingCheckResult(
            allowed=False,
            reason=format_daily_limit_reason(bundle.daily_spending_limit),
            code=ViolationCode.DAILY_LIMIT_EXCEEDED,
            current_usage=usage,
        )

    if usage.monthly + requested_amount > bundle.monthly_spending_limit:
        return SpendingCheckResult(
            allowed=False,
            reason=format_monthly_limit_reason(bundle.monthly_spending_limit),
            code=ViolationCode.MONTHLY_LIMIT_EXCEEDED,
            current_usage=usage,
        )

    return SpendingCheckResult(allowed=True, current_usage=usage)


class SpendingGuard:
    """消费额度守卫"""

    def __init__(
        self,
        restriction_repo: RestrictionRepository | None = None,
        spending_repo: SpendingRepository | None = None,
        ledger: QuotaLedger | None = None,
        clock: Callable[[], datetime] = now,
    ):
        self.restriction_repo = restriction_repo or RestrictionRepository()
        self.spending_repo = spending_repo or SpendingRepository()
        self.ledger = ledger or QuotaLedger(self.spending_repo, clock)
        self.clock = clock

    async def check(self, user_id: str, requested_amount: int) -> SpendingCheckResult:
        """
        检查消费额度（只读）

        Args:
            user_id: 用户 ID
            requested_amount: 本次请求金额

        Returns:
            检查结果；无限制的用户返回 allowed=True 且不含用量
        """
        bundle = await self.restriction_repo.get(user_id)
        if bundle is None:
            return SpendingCheckResult(allowed=True)

        usage = await self.ledger.totals(user_id)
        result = evaluate_spending(bundle, usage, requested_amount)

        if not result.allowed:
            logger.info(
                f"消费被拒绝: 用户 {user_id} 金额={requested_amount} "
                f"原因={result.code.value} 当日={usage.daily} 当月={usage.monthly}"
            )
        return result

    async def record(
        self,
        user_id: str,
        amount: int,
        description: str = "",
    ) -> SpendingRecordResult:
        """
        检查额度并在允许时写入消费记录

        检查与写入在同一事务内执行，并按用户加锁，
        并发请求不会同时通过检查而突破上限。

        Args:
            user_id: 用户 ID
            amount: 消费金额（正整数）
            description: 消费说明

        Returns:
            检查结果与写入的记录（被拒绝时 record 为 None）
        """
        if amount <= 0:
            raise ValidationError(f"金额必须为正数: {amount}")

        async with self.spending_repo.transaction():
            await self.spending_repo.lock_user(user_id)

            bundle = await self.restriction_repo.get(user_id)
            if bundle is None:
                check = SpendingCheckResult(allowed=True)
            else:
                usage = await self.ledger.totals(user_id)
                check = evaluate_spending(bundle, usage, amount)
                if not check.allowed:
                    logger.info(f"消费记录被拒绝: 用户 {user_id} 金额={amount} 原因={check.code.value}")
                    return SpendingRecordResult(check=check)

            record = await self.spending_repo.create(
                user_id=user_id,
                amount=amount,
                description=description,
                transaction_date=self.clock(),
            )

        logger.info(f"消费已记录: 用户 {user_id} 金额={amount} (ID={record.id})")
        return SpendingRecordResult(check=check, record=record)
