"""消费记录数据模型"""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class SpendingRecord:
    """消费记录（只追加，不修改）"""

    id: int
    user_id: str
    amount: int
    description: str
    transaction_date: datetime
    created_at: datetime


@dataclass
class SpendingUsage:
    """当日 / 当月累计消费"""

    daily: int
    monthly: int
    last_updated: datetime

    def to_dict(self) -> dict:
        return {
            "daily": self.daily,
            "monthly": self.monthly,
            "lastUpdated": self.last_updated.isoformat(),
        }


@dataclass(frozen=True)
class QuotaWindow:
    """额度统计区间（半开区间 [start, end)）"""

    day_start: datetime
    day_end: datetime
    month_start: datetime
    month_end: datetime
