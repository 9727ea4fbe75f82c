"""账号状态数据访问层"""

import logging

from age_guard.core.timezone import now
from age_guard.repositories.base import BaseRepository, persistence_errors

logger = logging.getLogger(__name__)


class AccountRepository(BaseRepository):
    """
    账号状态 Repository

    users 表的状态行由本模块维护：家长首次做出决定时创建，之后原地更新。
    """

    @persistence_errors
    async def activate(self, user_id: str):
        """家长同意后激活账号"""
        conn = await self._get_connection()
        try:
            current_time = now()
            await conn.execute(
                """
                INSERT INTO users (id, is_active, parental_consent_given, consent_received_at, created_at, updated_at)
                VALUES ($1, TRUE, TRUE, $2, $2, $2)
                ON CONFLICT (id) DO UPDATE SET
                    is_active = TRUE,
                    parental_consent_given = TRUE,
                    consent_received_at = EXCLUDED.consent_received_at
                """,
                user_id,
                current_time,
            )
            logger.debug(f"账号已激活: {user_id}")
        finally:
            await self._release_connection(conn)

    @persistence_errors
    async def deactivate(self, user_id: str):
        """家长拒绝后停用账号"""
        conn = await self._get_connection()
        try:
            current_time = now()
            await conn.execute(
                """
                INSERT INTO users (id, is_active, parental_consent_given, created_at, updated_at)
                VALUES ($1, FALSE, FALSE, $2, $2)
                ON CONFLICT (id) DO UPDATE SET
                    is_active = FALSE,
                    parental_consent_given = FALSE
                """,
                user_id,
                current_time,
            )
            logger.debug(f"账号已停用: {user_id}")
        finally:
            await self._release_connection(conn)
