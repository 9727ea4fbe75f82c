"""遗留会话清理任务"""

import logging
from datetime import timedelta

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from age_guard.config.settings import get_settings
from age_guard.services.session_store import SessionStore

logger = logging.getLogger(__name__)


def register_session_cleanup(scheduler: AsyncIOScheduler, session_store: SessionStore | None = None):
    """
    注册遗留会话清理任务

    客户端异常退出时会话不会被结束，超过 stale_session_hours 的活跃会话在这里关闭。

    Args:
        scheduler: 调度器实例
        session_store: 会话存储（默认新建）
    """
    settings = get_settings()
    store = session_store or SessionStore()
    max_age = timedelta(hours=settings.stale_session_hours)

    async def cleanup_callback():
        """清理回调"""
        try:
            await store.close_stale(max_age)
        except Exception as e:
            logger.error(f"会话清理错误: {e}", exc_info=True)

    scheduler.add_job(
        cleanup_callback,
        "interval",
        minutes=settings.session_cleanup_interval_minutes,
        id="session_cleanup",
        replace_existing=True,
    )

    logger.info("会话清理任务已注册")
