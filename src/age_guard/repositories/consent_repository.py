"""家长同意令牌数据访问层"""

import logging
from datetime import datetime

from age_guard.config.constants import ConsentDecision
from age_guard.core.encryption import decrypt_value, encrypt_value
from age_guard.core.timezone import now
from age_guard.models.consent import ConsentToken
from age_guard.repositories.base import BaseRepository, persistence_errors

logger = logging.getLogger(__name__)


class ConsentTokenRepository(BaseRepository):
    """家长同意令牌 Repository（处理后的令牌保留作为审计记录）"""

    @persistence_errors
    async def create(
        self,
        token: str,
        parent_email: str,
        child_user_id: str,
        child_name: str,
        child_age: int,
        expires_at: datetime,
    ) -> ConsentToken:
        """创建同意令牌（家长邮箱加密存储）"""
        conn = await self._get_connection()
        try:
            record = await conn.fetchrow(
                """
                INSERT INTO parental_consent_tokens (
                    token, parent_email, child_user_id, child_name, child_age,
                    expires_at, is_used, decision, processed_at, created_at
                )
                VALUES ($1, $2, $3, $4, $5, $6, FALSE, NULL, NULL, $7)
                RETURNING *
                """,
                token,
                encrypt_value(parent_email),
                child_user_id,
                child_name,
                child_age,
                expires_at,
                now(),
            )
            return self._to_model(record)
        finally:
            await self._release_connection(conn)

    @persistence_errors
    async def get(self, token: str, for_update: bool = False) -> ConsentToken | None:
        """
        获取同意令牌

        Args:
            for_update: 对令牌行加锁，直到所在事务结束
        """
        conn = await self._get_connection()
        try:
            query = "SELECT * FROM parental_consent_tokens WHERE token = $1"
            if for_update:
                query += " FOR UPDATE"
            record = await conn.fetchrow(query, token)
            if not record:
                return None
            return self._to_model(record)
        finally:
            await self._release_connection(conn)

    @persistence_errors
    async def mark_used(
        self,
        token: str,
        decision: ConsentDecision,
        processed_at: datetime | None = None,
    ) -> bool:
        """将未使用的令牌标记为已使用并记录决定"""
        conn = await self._get_connection()
        try:
            if processed_at is None:
                processed_at = now()

            result = await conn.execute(
                """
                UPDATE parental_consent_tokens
                SET is_used = TRUE, decision = $1, processed_at = $2
                WHERE token = $3 AND NOT is_used
                """,
                decision.value,
                processed_at,
                token,
            )
            return result == "UPDATE 1"
        finally:
            await self._release_connection(conn)

    @persistence_errors
    async def supersede_pending(self, child_user_id: str, processed_at: datetime | None = None) -> int:
        """作废孩子所有未使用的令牌（被新请求取代）"""
        conn = await self._get_connection()
        try:
            if processed_at is None:
                processed_at = now()

            result = await conn.execute(
                """
                UPDATE parental_consent_tokens
                SET is_used = TRUE, decision = $1, processed_at = $2
                WHERE child_user_id = $3 AND NOT is_used
                """,
                ConsentDecision.SUPERSEDED.value,
                processed_at,
                child_user_id,
            )
            count = int(result.split()[-1]) if result else 0
            if count > 0:
                logger.info(f"已作废孩子 {child_user_id} 的 {count} 个未处理令牌")
            return count
        finally:
            await self._release_connection(conn)

    @staticmethod
    def _to_model(record) -> ConsentToken:
        """数据库记录转换为模型"""
        decision = record["decision"]
        return ConsentToken(
            token=record["token"],
            parent_email=decrypt_value(record["parent_email"]),
            child_user_id=record["child_user_id"],
            child_name=record["child_name"],
            child_age=record["child_age"],
            expires_at=record["expires_at"],
            is_used=record["is_used"],
            decision=ConsentDecision(decision) if decision else None,
            processed_at=record["processed_at"],
            created_at=record["created_at"],
        )
