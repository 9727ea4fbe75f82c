"""服务启动入口"""

import asyncio
import logging
import signal
import sys
from datetime import datetime

from age_guard.config.settings import get_settings
from age_guard.core.timezone import get_timezone

RESET = "\033[0m"

# 日志级别颜色映射
LOG_COLORS = {
    logging.DEBUG: "\033[38;5;245m",      # 灰色
    logging.INFO: "\033[38;5;79m",        # 青绿色
    logging.WARNING: "\033[38;5;221m",    # 柔和橙黄
    logging.ERROR: "\033[38;5;203m",      # 柔和红
    logging.CRITICAL: "\033[1;38;5;203m", # 粗体柔和红
}

# 日志级别名称映射（对齐）
LOG_LEVEL_NAMES = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO ",
    logging.WARNING: "WARN ",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "CRIT ",
}


class ColorFormatter(logging.Formatter):
    """带颜色和对齐的日志格式化器（时间按参考时区显示）"""

    def formatTime(self, record, datefmt=None):
        dt = datetime.fromtimestamp(record.created, tz=get_timezone())
        return dt.strftime(datefmt or "%Y-%m-%d %H:%M:%S")

    def format(self, record):
        level_color = LOG_COLORS.get(record.levelno, "")
        record.levelname = LOG_LEVEL_NAMES.get(record.levelno, record.levelname)

        result = super().format(record)

        # 整条消息应用颜色
        if level_color:
            result = f"{level_color}{result}{RESET}"
        return result


def setup_logging():
    """配置日志"""
    settings = get_settings()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ColorFormatter(
        fmt="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    logging.basicConfig(level=settings.log_level, handlers=[handler])

    # 隐藏冗余的日志
    logging.getLogger("apscheduler.executors.default").setLevel(logging.WARNING)
    logging.getLogger("apscheduler.scheduler").setLevel(logging.WARNING)
    logging.getLogger("asyncpg").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.INFO)


async def serve():
    """初始化数据库、启动定时任务，直到收到停止信号"""
    from age_guard.core.database import close_pool, get_pool, init_database
    from age_guard.tasks.scheduler import create_scheduler

    logger = logging.getLogger(__name__)

    await init_database()
    await get_pool()

    scheduler = create_scheduler()
    scheduler.start()
    logger.info("服务已启动")

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # Windows 不支持 add_signal_handler
            pass

    try:
        await stop_event.wait()
    finally:
        logger.info("正在停止服务...")
        scheduler.shutdown(wait=False)
        await close_pool()
        logger.info("服务已停止")


def main():
    """启动服务"""
    setup_logging()
    try:
        asyncio.run(serve())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
