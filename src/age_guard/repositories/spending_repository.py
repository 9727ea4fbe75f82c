"""消费记录数据访问层"""

import logging
from datetime import datetime

from age_guard.core.timezone import now
from age_guard.models.spending import QuotaWindow, SpendingRecord
from age_guard.repositories.base import BaseRepository, persistence_errors

logger = logging.getLogger(__name__)


class SpendingRepository(BaseRepository):
    """消费记录 Repository（只追加）"""

    @persistence_errors
    async def create(
        self,
        user_id: str,
        amount: int,
        description: str,
        transaction_date: datetime | None = None,
    ) -> SpendingRecord:
        """追加消费记录"""
        conn = await self._get_connection()
        try:
            current_time = now()
            if transaction_date is None:
                transaction_date = current_time

            record = await conn.fetchrow(
                """
                INSERT INTO user_spending_history (user_id, amount, description, transaction_date, created_at)
                VALUES ($1, $2, $3, $4, $5)
                RETURNING *
                """,
                user_id,
                amount,
                description,
                transaction_date,
                current_time,
            )
            return self._to_model(record)
        finally:
            await self._release_connection(conn)

    @persistence_errors
    async def sum_usage(self, user_id: str, window: QuotaWindow) -> tuple[int, int]:
        """
        汇总当日与当月消费

        Returns:
            (当日累计, 当月累计)
        """
        conn = await self._get_connection()
        try:
            record = await conn.fetchrow(
                """
                SELECT
                    COALESCE(SUM(amount) FILTER (
                        WHERE transaction_date >= $2 AND transaction_date < $3
                    ), 0) AS daily,
                    COALESCE(SUM(amount), 0) AS monthly
                FROM user_spending_history
                WHERE user_id = $1
                AND transaction_date >= $4
                AND transaction_date < $5
                """,
                user_id,
                window.day_start,
                window.day_end,
                window.month_start,
                window.month_end,
            )
            return int(record["daily"]), int(record["monthly"])
        finally:
            await self._release_connection(conn)

    @persistence_errors
    async def lock_user(self, user_id: str):
        """
        对该用户的消费写入加锁，直到所在事务结束

        必须在 ``transaction()`` 内调用。
        """
        conn = await self._get_connection()
        try:
            await conn.execute(
                "SELECT pg_advisory_xact_lock(hashtext('spending:' || $1))",
                user_id,
            )
        finally:
            await self._release_connection(conn)

    @staticmethod
    def _to_model(record) -> SpendingRecord:
        """数据库记录转换为模型"""
        return SpendingRecord(
            id=record["id"],
            user_id=record["user_id"],
            amount=record["amount"],
            description=record["description"],
            transaction_date=record["transaction_date"],
            created_at=record["created_at"],
        )
