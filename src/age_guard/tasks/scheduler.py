"""任务调度器"""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from age_guard.core.timezone import get_timezone
from age_guard.tasks.session_cleanup import register_session_cleanup

logger = logging.getLogger(__name__)


def create_scheduler() -> AsyncIOScheduler:
    """
    创建调度器并注册所有定时任务

    Returns:
        未启动的调度器
    """
    scheduler = AsyncIOScheduler(timezone=get_timezone())

    # 注册遗留会话清理任务
    register_session_cleanup(scheduler)

    logger.info("所有定时任务已注册")
    return scheduler
