"""使用会话数据模型"""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Session:
    """会话模型"""

    id: int
    user_id: str
    start_time: datetime
    end_time: datetime | None
    is_active: bool

    def elapsed_minutes(self, at: datetime) -> int:
        """从会话开始到 at 的整分钟数"""
        seconds = (at - self.start_time).total_seconds()
        return max(0, int(seconds // 60))
