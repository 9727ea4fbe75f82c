"""连续使用时长检查"""

import logging
from datetime import datetime
from typing import Callable

from age_guard.config.constants import ViolationCode
from age_guard.config.settings import get_settings
from age_guard.core.timezone import now
from age_guard.models.results import UsageCheckResult
from age_guard.repositories.restriction_repository import RestrictionRepository
from age_guard.services.session_store import SessionStore
from age_guard.utils.formatter import format_continuous_usage_reason

logger = logging.getLogger(__name__)


class ContinuousUsageGuard:
    """
    连续使用守卫

    只负责判断，不结束或轮换会话；休息后重新开始会话由调用方负责。
    """

    def __init__(
        self,
        restriction_repo: RestrictionRepository | None = None,
        session_store: SessionStore | None = None,
        clock: Callable[[], datetime] = now,
        suggested_break_minutes: int | None = None,
    ):
        self.restriction_repo = restriction_repo or RestrictionRepository()
        self.session_store = session_store or SessionStore(clock=clock)
        self.clock = clock
        if suggested_break_minutes is None:
            suggested_break_minutes = get_settings().suggested_break_minutes
        self.suggested_break_minutes = suggested_break_minutes

    async def check(self, user_id: str) -> UsageCheckResult:
        """检查当前会话的连续使用时长"""
        bundle = await self.restriction_repo.get(user_id)
        if bundle is None:
            return UsageCheckResult(allowed=True)

        session = await self.session_store.current_active(user_id)
        if session is None:
            return UsageCheckResult(allowed=True)

        elapsed = session.elapsed_minutes(self.clock())
        limit = bundle.required_breaks.continuous_minutes

        if elapsed >= limit:
            logger.info(f"连续使用超限: 用户 {user_id} 已使用 {elapsed} 分钟 (上限 {limit})")
            return UsageCheckResult(
                allowed=False,
                reason=format_continuous_usage_reason(limit, self.suggested_break_minutes),
                code=ViolationCode.CONTINUOUS_USAGE_LIMIT,
                suggested_break=self.suggested_break_minutes,
                continuous_minutes=elapsed,
            )

        return UsageCheckResult(allowed=True, continuous_minutes=elapsed)
