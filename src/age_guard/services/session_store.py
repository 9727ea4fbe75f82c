"""使用会话管理"""

import logging
from datetime import datetime, timedelta
from typing import Callable

from age_guard.core.exceptions import SessionNotFoundError
from age_guard.core.timezone import now
from age_guard.models.session import Session
from age_guard.repositories.session_repository import SessionRepository

logger = logging.getLogger(__name__)


class SessionStore:
    """
    会话存储

    每个用户最多一个活跃会话（由数据库部分唯一索引保证）。
    已有活跃会话时再次 start 返回原会话，连续使用时间不会被重置。
    """

    def __init__(
        self,
        session_repo: SessionRepository | None = None,
        clock: Callable[[], datetime] = now,
    ):
        self.session_repo = session_repo or SessionRepository()
        self.clock = clock

    async def start(self, user_id: str) -> Session:
        """开始会话（已有活跃会话时直接返回）"""
        session, _ = await self.open(user_id)
        return session

    async def open(self, user_id: str) -> tuple[Session, bool]:
        """
        开始会话，并告知是否沿用了已有的活跃会话

        客户端未调用 end 就退出时，原会话会一直计时，直到被结束或被遗留会话清理任务关闭。
        这里不会因为会话"看起来很旧"而替换它：没有心跳就无法区分被遗弃的会话和持续使用中的会话，
        替换会让客户端通过再次 start 清零连续使用时长。

        Returns:
            (session, resumed): resumed=True 表示沿用了已有会话
        """
        created, session = await self.session_repo.try_create_or_get_active(
            user_id, start_time=self.clock()
        )
        if created:
            logger.info(f"会话已开始: 用户 {user_id} (ID={session.id})")
        else:
            logger.info(f"沿用活跃会话: 用户 {user_id} (ID={session.id}) 开始于 {session.start_time:%Y-%m-%d %H:%M}")
        return session, not created

    async def end(self, session_id: int, user_id: str | None = None) -> Session:
        """
        结束会话

        Args:
            session_id: 会话 ID
            user_id: 指定时只允许结束该用户自己的会话

        Raises:
            SessionNotFoundError: 会话不存在、已结束或不属于该用户
        """
        session = await self.session_repo.end(session_id, user_id=user_id, end_time=self.clock())
        if session is None:
            logger.warning(f"结束会话失败: ID={session_id} 用户 {user_id} (不存在或已结束)")
            raise SessionNotFoundError(f"会话不存在或已结束: {session_id}")

        logger.info(f"会话已结束: 用户 {session.user_id} (ID={session_id})")
        return session

    async def current_active(self, user_id: str) -> Session | None:
        """获取用户当前的活跃会话"""
        return await self.session_repo.get_active_by_user(user_id)

    async def close_stale(self, max_age: timedelta) -> int:
        """关闭开始时间早于 max_age 之前、却仍处于活跃状态的会话"""
        current_time = self.clock()
        count = await self.session_repo.close_started_before(current_time - max_age, end_time=current_time)
        if count > 0:
            logger.info(f"关闭了 {count} 个遗留会话")
        return count
