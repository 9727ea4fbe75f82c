"""综合限制检查"""

import logging

from age_guard.models.results import AggregateCheckResult
from age_guard.services.spending_guard import SpendingGuard
from age_guard.services.time_window import TimeWindowGuard
from age_guard.services.usage_guard import ContinuousUsageGuard

logger = logging.getLogger(__name__)


class AggregateRestrictionChecker:
    """
    综合检查

    依次执行时段、连续使用、（指定金额时）消费额度检查，
    收集全部违规项而不是在第一个失败处返回。
    """

    def __init__(
        self,
        time_guard: TimeWindowGuard | None = None,
        usage_guard: ContinuousUsageGuard | None = None,
        spending_guard: SpendingGuard | None = None,
    ):
        self.time_guard = time_guard or TimeWindowGuard()
        self.usage_guard = usage_guard or ContinuousUsageGuard()
        self.spending_guard = spending_guard or SpendingGuard()

    async def check(self, user_id: str, requested_amount: int | None = None) -> AggregateCheckResult:
        """
        执行全部检查

        Args:
            user_id: 用户 ID
            requested_amount: 本次请求金额（不指定则跳过消费检查）
        """
        result = AggregateCheckResult()

        time_check = await self.time_guard.check(user_id)
        if not time_check.allowed:
            result.add(time_check.code, time_check.reason)

        usage_check = await self.usage_guard.check(user_id)
        if not usage_check.allowed:
            result.add(usage_check.code, usage_check.reason)

        if requested_amount is not None:
            spending_check = await self.spending_guard.check(user_id, requested_amount)
            if not spending_check.allowed:
                result.add(spending_check.code, spending_check.reason)
            result.current_usage = spending_check.current_usage

        if not result.allowed:
            logger.info(f"综合检查未通过: 用户 {user_id} 违规={[code.value for code in result.codes]}")
        return result
