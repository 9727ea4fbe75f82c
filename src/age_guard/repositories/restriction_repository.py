"""年龄限制数据访问层"""

import json
import logging

from age_guard.core.timezone import now
from age_guard.models.restriction import RequiredBreaks, RestrictionBundle, TimeRestrictions
from age_guard.repositories.base import BaseRepository, persistence_errors

logger = logging.getLogger(__name__)


class RestrictionRepository(BaseRepository):
    """年龄限制 Repository（每个用户一行，写入即整体覆盖）"""

    @persistence_errors
    async def get(self, user_id: str) -> RestrictionBundle | None:
        """获取用户的限制组合"""
        conn = await self._get_connection()
        try:
            record = await conn.fetchrow(
                "SELECT * FROM user_age_restrictions WHERE user_id = $1",
                user_id,
            )
            if not record:
                return None
            return self._to_model(record)
        finally:
            await self._release_connection(conn)

    @persistence_errors
    async def upsert(self, user_id: str, bundle: RestrictionBundle) -> RestrictionBundle:
        """创建或整体替换用户的限制组合"""
        conn = await self._get_connection()
        try:
            current_time = now()
            record = await conn.fetchrow(
                """
                INSERT INTO user_age_restrictions (
                    user_id, monthly_spending_limit, daily_spending_limit,
                    time_restrictions, required_breaks, created_at, updated_at
                )
                VALUES ($1, $2, $3, $4, $5, $6, $6)
                ON CONFLICT (user_id) DO UPDATE SET
                    monthly_spending_limit = EXCLUDED.monthly_spending_limit,
                    daily_spending_limit = EXCLUDED.daily_spending_limit,
                    time_restrictions = EXCLUDED.time_restrictions,
                    required_breaks = EXCLUDED.required_breaks,
                    updated_at = EXCLUDED.updated_at
                RETURNING *
                """,
                user_id,
                bundle.monthly_spending_limit,
                bundle.daily_spending_limit,
                json.dumps(bundle.time_restrictions.to_dict()),
                json.dumps(bundle.required_breaks.to_dict()),
                current_time,
            )
            logger.debug(f"限制已保存: 用户 {user_id}")
            return self._to_model(record)
        finally:
            await self._release_connection(conn)

    @staticmethod
    def _to_model(record) -> RestrictionBundle:
        """数据库记录转换为模型"""
        time_restrictions = record["time_restrictions"]
        if isinstance(time_restrictions, str):
            time_restrictions = json.loads(time_restrictions)

        required_breaks = record["required_breaks"]
        if isinstance(required_breaks, str):
            required_breaks = json.loads(required_breaks)

        return RestrictionBundle(
            monthly_spending_limit=record["monthly_spending_limit"],
            daily_spending_limit=record["daily_spending_limit"],
            time_restrictions=TimeRestrictions.from_dict(time_restrictions),
            required_breaks=RequiredBreaks.from_dict(required_breaks),
        )
