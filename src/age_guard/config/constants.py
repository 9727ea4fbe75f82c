"""常量定义模块"""

from enum import Enum
from typing import Final


# ==================== 年龄阈值 ====================
ADULT_AGE: Final[int] = 18  # 成年年龄，达到后不再受限
SENIOR_MINOR_AGE: Final[int] = 16  # 16-17 岁适用较高额度


# ==================== 周末定义 ====================
# datetime.weekday(): 周一=0 ... 周六=5, 周日=6
WEEKEND_DAYS: Final[frozenset[int]] = frozenset({5, 6})


# ==================== 违规类型 ====================
class ViolationCode(str, Enum):
    """策略拒绝原因（机器可读）"""
    DAILY_LIMIT_EXCEEDED = "DAILY_LIMIT_EXCEEDED"
    MONTHLY_LIMIT_EXCEEDED = "MONTHLY_LIMIT_EXCEEDED"
    OUTSIDE_ALLOWED_HOURS = "OUTSIDE_ALLOWED_HOURS"
    CONTINUOUS_USAGE_LIMIT = "CONTINUOUS_USAGE_LIMIT"


# ==================== 家长同意决定 ====================
class ConsentDecision(str, Enum):
    """同意令牌的处理结果"""
    APPROVED = "approved"
    DENIED = "denied"
    SUPERSEDED = "superseded"  # 同一孩子发起了新的同意请求


# ==================== 同意令牌状态 ====================
class ConsentStatus(str, Enum):
    """同意令牌状态（派生值，不直接存储）"""
    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"
    SUPERSEDED = "superseded"
    EXPIRED = "expired"
