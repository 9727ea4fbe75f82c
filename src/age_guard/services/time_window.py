"""使用时段检查"""

import logging
from datetime import datetime
from typing import Callable

from age_guard.config.constants import WEEKEND_DAYS, ViolationCode
from age_guard.core.timezone import now
from age_guard.models.restriction import RestrictionBundle, TimeWindow
from age_guard.models.results import TimeCheckResult
from age_guard.repositories.restriction_repository import RestrictionRepository
from age_guard.utils.formatter import format_time_window_reason

logger = logging.getLogger(__name__)


def is_weekend(at: datetime) -> bool:
    """周六、周日为周末"""
    return at.weekday() in WEEKEND_DAYS


def select_window(bundle: RestrictionBundle, at: datetime) -> TimeWindow:
    """按平日 / 周末选择时段"""
    restrictions = bundle.time_restrictions
    return restrictions.weekends if is_weekend(at) else restrictions.weekdays


class TimeWindowGuard:
    """时段守卫"""

    def __init__(
        self,
        restriction_repo: RestrictionRepository | None = None,
        clock: Callable[[], datetime] = now,
    ):
        self.restriction_repo = restriction_repo or RestrictionRepository()
        self.clock = clock

    async def check(self, user_id: str, at: datetime | None = None) -> TimeCheckResult:
        """
        检查当前时间是否在允许时段内

        时段首尾均允许（22:00 允许，22:01 拒绝）。

        Args:
            user_id: 用户 ID
            at: 参考时间（默认当前时间）
        """
        bundle = await self.restriction_repo.get(user_id)
        if bundle is None:
            return TimeCheckResult(allowed=True)

        if at is None:
            at = self.clock()

        window = select_window(bundle, at)
        current = at.hour * 100 + at.minute

        if not window.contains(current):
            logger.info(f"时段外访问: 用户 {user_id} 当前={at:%H:%M} 允许={window.start}-{window.end}")
            return TimeCheckResult(
                allowed=False,
                reason=format_time_window_reason(window),
                code=ViolationCode.OUTSIDE_ALLOWED_HOURS,
                allowed_hours=window,
            )

        return TimeCheckResult(allowed=True)
