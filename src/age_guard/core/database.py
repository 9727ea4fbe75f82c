"""数据库连接池管理"""

import logging
from contextlib import asynccontextmanager
from contextvars import ContextVar
from typing import Optional

import asyncpg
from asyncpg import Pool

from age_guard.config.settings import get_settings
from age_guard.core.exceptions import PersistenceError

logger = logging.getLogger(__name__)

_pool: Optional[Pool] = None

# 驱动 / 网络层错误，对外统一转换为 PersistenceError
STORE_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)

# 当前任务中正在进行的事务连接（同一事务内的多个 Repository 共享）
_tx_connection: ContextVar[Optional[asyncpg.Connection]] = ContextVar(
    "age_guard_tx_connection", default=None
)


async def _init_connection(conn):
    """初始化数据库连接（设置时区）"""
    settings = get_settings()
    # 设置数据库会话时区，使 NOW() 与参考时区一致
    await conn.execute(f"SET TIME ZONE '{settings.timezone}';")


async def get_pool() -> Pool:
    """获取数据库连接池（单例模式）"""
    global _pool
    if _pool is None:
        settings = get_settings()
        _pool = await asyncpg.create_pool(
            settings.database_url,
            min_size=5,
            max_size=20,
            command_timeout=60,
            init=_init_connection,
        )
    return _pool


async def close_pool():
    """关闭数据库连接池"""
    global _pool
    if _pool:
        await _pool.close()
        _pool = None


def current_transaction() -> Optional[asyncpg.Connection]:
    """获取当前任务中的事务连接（没有则返回 None）"""
    return _tx_connection.get()


@asynccontextmanager
async def transaction():
    """
    事务上下文

    在 async with 块内调用的所有 Repository 方法共享同一个连接与事务，
    块正常退出时提交，抛出异常时回滚。嵌套调用复用外层事务。

    Raises:
        PersistenceError: 获取连接、BEGIN 或 COMMIT 失败
    """
    existing = _tx_connection.get()
    if existing is not None:
        yield existing
        return

    try:
        pool = await get_pool()
        async with pool.acquire() as conn:
            async with conn.transaction():
                token = _tx_connection.set(conn)
                try:
                    yield conn
                finally:
                    _tx_connection.reset(token)
    except STORE_ERRORS as e:
        logger.error(f"事务失败: {type(e).__name__}: {e}")
        raise PersistenceError("存储事务失败") from e


class DatabaseConnection:
    """数据库连接上下文管理器"""

    def __init__(self):
        self._conn = None
        self._pool = None
        self._acquire_context = None

    async def __aenter__(self):
        self._pool = await get_pool()
        # acquire() 返回上下文管理器，需要通过 __aenter__ 获取实际连接
        self._acquire_context = self._pool.acquire()
        self._conn = await self._acquire_context.__aenter__()
        return self._conn

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._acquire_context:
            await self._acquire_context.__aexit__(exc_type, exc_val, exc_tb)
            self._acquire_context = None
            self._conn = None


# ==================== 数据库自动初始化 ====================

_INIT_SQL_TABLES = """

-- ==================== 表结构 ====================

-- 账号状态表（首次家长决定时由 activate / deactivate 写入）
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    is_active BOOLEAN NOT NULL DEFAULT FALSE,
    parental_consent_given BOOLEAN NOT NULL DEFAULT FALSE,
    consent_received_at TIMESTAMP,
    created_at TIMESTAMP NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMP NOT NULL DEFAULT NOW()
);

-- 年龄限制表（每个用户最多一行，写入即整体覆盖）
CREATE TABLE IF NOT EXISTS user_age_restrictions (
    user_id TEXT PRIMARY KEY,
    monthly_spending_limit INTEGER NOT NULL,
    daily_spending_limit INTEGER NOT NULL,
    time_restrictions JSONB NOT NULL,
    required_breaks JSONB NOT NULL,
    created_at TIMESTAMP NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMP NOT NULL DEFAULT NOW()
);

-- 消费记录表（只追加）
CREATE TABLE IF NOT EXISTS user_spending_history (
    id BIGSERIAL PRIMARY KEY,
    user_id TEXT NOT NULL,
    amount INTEGER NOT NULL CHECK (amount > 0),
    description TEXT NOT NULL DEFAULT '',
    transaction_date TIMESTAMP NOT NULL,
    created_at TIMESTAMP NOT NULL DEFAULT NOW()
);

-- 使用会话表
CREATE TABLE IF NOT EXISTS user_sessions (
    id BIGSERIAL PRIMARY KEY,
    user_id TEXT NOT NULL,
    start_time TIMESTAMP NOT NULL,
    end_time TIMESTAMP,
    is_active BOOLEAN NOT NULL DEFAULT TRUE
);

-- 家长同意令牌表（处理后保留作为审计记录）
CREATE TABLE IF NOT EXISTS parental_consent_tokens (
    token TEXT PRIMARY KEY,
    parent_email TEXT NOT NULL,
    child_user_id TEXT NOT NULL,
    child_name TEXT NOT NULL,
    child_age SMALLINT NOT NULL,
    expires_at TIMESTAMP NOT NULL,
    is_used BOOLEAN NOT NULL DEFAULT FALSE,
    decision VARCHAR(20),
    processed_at TIMESTAMP,
    created_at TIMESTAMP NOT NULL DEFAULT NOW()
);

-- ==================== 索引 ====================

CREATE INDEX IF NOT EXISTS idx_spending_user_date
    ON user_spending_history(user_id, transaction_date);

-- 每个用户最多一个活跃会话
CREATE UNIQUE INDEX IF NOT EXISTS idx_sessions_one_active_per_user
    ON user_sessions(user_id)
    WHERE is_active;
CREATE INDEX IF NOT EXISTS idx_sessions_active_start
    ON user_sessions(start_time)
    WHERE is_active;

CREATE INDEX IF NOT EXISTS idx_consent_tokens_child
    ON parental_consent_tokens(child_user_id)
    WHERE NOT is_used;

-- ==================== 触发器 ====================

-- 更新时间戳触发器函数
CREATE OR REPLACE FUNCTION update_updated_at_column()
RETURNS TRIGGER AS $$
BEGIN
    NEW.updated_at = NOW();
    RETURN NEW;
END;
$$ LANGUAGE plpgsql;

DROP TRIGGER IF EXISTS update_users_updated_at ON users;
CREATE TRIGGER update_users_updated_at
    BEFORE UPDATE ON users
    FOR EACH ROW
    EXECUTE FUNCTION update_updated_at_column();

DROP TRIGGER IF EXISTS update_age_restrictions_updated_at ON user_age_restrictions;
CREATE TRIGGER update_age_restrictions_updated_at
    BEFORE UPDATE ON user_age_restrictions
    FOR EACH ROW
    EXECUTE FUNCTION update_updated_at_column();
"""


async def init_database():
    """初始化数据库表（不存在时创建）"""
    settings = get_settings()

    try:
        conn = await asyncpg.connect(settings.database_url)

        try:
            await conn.execute(f"SET TIME ZONE '{settings.timezone}';")
            await conn.execute(_INIT_SQL_TABLES)
            logger.info("数据库表初始化成功")
        finally:
            await conn.close()

    except Exception as e:
        logger.error(f"数据库初始化失败: {e}", exc_info=True)
        raise
