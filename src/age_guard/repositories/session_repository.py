"""使用会话数据访问层"""

import logging
from datetime import datetime

from age_guard.core.exceptions import PersistenceError
from age_guard.core.timezone import now
from age_guard.models.session import Session
from age_guard.repositories.base import BaseRepository, persistence_errors

logger = logging.getLogger(__name__)


class SessionRepository(BaseRepository):
    """使用会话 Repository"""

    @persistence_errors
    async def try_create_or_get_active(
        self,
        user_id: str,
        start_time: datetime | None = None,
    ) -> tuple[bool, Session]:
        """
        创建活跃会话，或返回用户已有的活跃会话

        (user_id) WHERE is_active 部分唯一索引保证并发 start 时每个用户最多一个活跃会话。

        Returns:
            (created, session): created=True 表示新开了会话
        """
        conn = await self._get_connection()
        try:
            if start_time is None:
                start_time = now()

            record = await conn.fetchrow(
                """
                INSERT INTO user_sessions (user_id, start_time, end_time, is_active)
                VALUES ($1, $2, NULL, TRUE)
                ON CONFLICT (user_id) WHERE is_active DO NOTHING
                RETURNING *
                """,
                user_id,
                start_time,
            )
            if record:
                return True, self._to_model(record)

            record = await conn.fetchrow(
                """
                SELECT * FROM user_sessions
                WHERE user_id = $1 AND is_active
                ORDER BY start_time DESC
                LIMIT 1
                """,
                user_id,
            )
            if not record:
                # 冲突行在两条语句之间被关闭
                raise PersistenceError(f"会话状态冲突，请重试: user_id={user_id}")
            return False, self._to_model(record)
        finally:
            await self._release_connection(conn)

    @persistence_errors
    async def get_active_by_user(self, user_id: str) -> Session | None:
        """获取用户的活跃会话"""
        conn = await self._get_connection()
        try:
            record = await conn.fetchrow(
                """
                SELECT * FROM user_sessions
                WHERE user_id = $1 AND is_active
                ORDER BY start_time DESC
                LIMIT 1
                """,
                user_id,
            )
            if not record:
                return None
            return self._to_model(record)
        finally:
            await self._release_connection(conn)

    @persistence_errors
    async def end(
        self,
        session_id: int,
        user_id: str | None = None,
        end_time: datetime | None = None,
    ) -> Session | None:
        """
        结束活跃会话

        Args:
            session_id: 会话 ID
            user_id: 指定时只结束该用户自己的会话

        Returns:
            已结束的会话；没有匹配的活跃会话时返回 None
        """
        conn = await self._get_connection()
        try:
            if end_time is None:
                end_time = now()

            record = await conn.fetchrow(
                """
                UPDATE user_sessions
                SET end_time = $1, is_active = FALSE
                WHERE id = $2
                AND is_active
                AND ($3::TEXT IS NULL OR user_id = $3)
                RETURNING *
                """,
                end_time,
                session_id,
                user_id,
            )
            if not record:
                return None
            return self._to_model(record)
        finally:
            await self._release_connection(conn)

    @persistence_errors
    async def close_started_before(self, cutoff: datetime, end_time: datetime | None = None) -> int:
        """关闭开始时间早于 cutoff 的活跃会话"""
        conn = await self._get_connection()
        try:
            if end_time is None:
                end_time = now()

            result = await conn.execute(
                """
                UPDATE user_sessions
                SET end_time = $1, is_active = FALSE
                WHERE is_active AND start_time < $2
                """,
                end_time,
                cutoff,
            )
            # 解析 "UPDATE n" 返回值
            return int(result.split()[-1]) if result else 0
        finally:
            await self._release_connection(conn)

    @staticmethod
    def _to_model(record) -> Session:
        """数据库记录转换为模型"""
        return Session(
            id=record["id"],
            user_id=record["user_id"],
            start_time=record["start_time"],
            end_time=record["end_time"],
            is_active=record["is_active"],
        )
