"""参考时区

日 / 月 / 周末的边界全部按同一个参考时区计算。库内流转的时间均为该时区的 naive datetime，
与数据库会话时区（连接时设置）一致。
"""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from age_guard.config.settings import get_settings


def get_timezone() -> ZoneInfo:
    """获取参考时区"""
    return ZoneInfo(get_settings().timezone)


def now() -> datetime:
    """参考时区的当前时间（naive）"""
    return datetime.now(get_timezone()).replace(tzinfo=None)


def day_bounds(at: datetime) -> tuple[datetime, datetime]:
    """at 所在自然日 [00:00, 次日 00:00)"""
    start = at.replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)


def month_bounds(at: datetime) -> tuple[datetime, datetime]:
    """at 所在自然月 [1 日 00:00, 下月 1 日 00:00)"""
    start = at.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if start.month == 12:
        return start, start.replace(year=start.year + 1, month=1)
    return start, start.replace(month=start.month + 1)


def format_datetime(dt: datetime, fmt: str = "%Y-%m-%d %H:%M:%S") -> str:
    """格式化为参考时区字符串（naive 视为已是参考时区）"""
    if dt.tzinfo is not None:
        dt = dt.astimezone(get_timezone())
    return dt.strftime(fmt)
