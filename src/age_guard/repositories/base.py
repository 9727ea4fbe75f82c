"""Repository 基类"""

import asyncio
import logging
from abc import ABC
from functools import wraps

from age_guard.core.database import STORE_ERRORS, DatabaseConnection, current_transaction, transaction
from age_guard.core.exceptions import PersistenceError

logger = logging.getLogger(__name__)


def persistence_errors(func):
    """
    装饰器：将驱动 / 网络错误转换为 PersistenceError

    用法:
        @persistence_errors
        async def get(self, user_id: str):
            ...
    """
    @wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except STORE_ERRORS as e:
            logger.error(f"存储操作 {func.__qualname__} 失败: {type(e).__name__}: {e}")
            raise PersistenceError(f"存储操作失败: {func.__name__}") from e
    return wrapper


class BaseRepository(ABC):
    """Repository 基类"""

    # 使用任务本地存储隔离每个任务的连接上下文
    _contexts = {}

    def transaction(self):
        """开启（或加入）当前任务中所有 Repository 共享的事务"""
        return transaction()

    async def _get_connection(self):
        """获取数据库连接（事务进行中时返回事务连接）"""
        tx_conn = current_transaction()
        if tx_conn is not None:
            return tx_conn

        # 使用当前任务 ID 作为 key，确保并发安全
        task_id = id(asyncio.current_task())

        if task_id not in self._contexts:
            self._contexts[task_id] = DatabaseConnection()

        db_context = self._contexts[task_id]
        try:
            conn = await db_context.__aenter__()
        except BaseException:
            # 未拿到连接，不会再有对应的 _release_connection
            del self._contexts[task_id]
            raise
        return conn

    async def _release_connection(self, _conn=None):
        """
        释放数据库连接（异常安全）

        事务中的连接由事务自身释放。
        """
        if current_transaction() is not None:
            return

        task_id = id(asyncio.current_task())

        if task_id in self._contexts:
            try:
                await self._contexts[task_id].__aexit__(None, None, None)
            except Exception as e:
                logger.warning(f"释放数据库连接出错: {e}")
            finally:
                del self._contexts[task_id]
