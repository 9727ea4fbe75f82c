"""消费额度统计"""

import logging
from datetime import datetime
from typing import Callable

from age_guard.core.timezone import day_bounds, month_bounds, now
from age_guard.models.spending import QuotaWindow, SpendingUsage
from age_guard.repositories.spending_repository import SpendingRepository

logger = logging.getLogger(__name__)


def quota_window(at: datetime) -> QuotaWindow:
    """
    计算 at 所在的自然日与自然月区间（参考时区）

    月末取下个月 1 日零点，不依赖固定的 31 天。
    """
    day_start, day_end = day_bounds(at)
    month_start, month_end = month_bounds(at)
    return QuotaWindow(
        day_start=day_start,
        day_end=day_end,
        month_start=month_start,
        month_end=month_end,
    )


class QuotaLedger:
    """从消费记录实时汇总当日 / 当月消费（不缓存）"""

    def __init__(
        self,
        spending_repo: SpendingRepository | None = None,
        clock: Callable[[], datetime] = now,
    ):
        self.spending_repo = spending_repo or SpendingRepository()
        self.clock = clock

    async def totals(self, user_id: str, at: datetime | None = None) -> SpendingUsage:
        """
        获取用户当前的消费累计

        Args:
            user_id: 用户 ID
            at: 参考时间（默认当前时间）

        Returns:
            当日 / 当月累计
        """
        if at is None:
            at = self.clock()

        daily, monthly = await self.spending_repo.sum_usage(user_id, quota_window(at))
        logger.debug(f"消费累计: 用户 {user_id} 当日={daily} 当月={monthly}")
        return SpendingUsage(daily=daily, monthly=monthly, last_updated=at)
