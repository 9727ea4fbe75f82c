"""家长同意令牌数据模型"""

from dataclasses import dataclass
from datetime import datetime

from age_guard.config.constants import ConsentDecision, ConsentStatus


@dataclass
class ConsentToken:
    """同意令牌模型"""

    token: str
    parent_email: str  # 明文（落库时加密）
    child_user_id: str
    child_name: str
    child_age: int
    expires_at: datetime
    is_used: bool
    decision: ConsentDecision | None
    processed_at: datetime | None
    created_at: datetime

    def is_expired(self, at: datetime) -> bool:
        return at > self.expires_at

    def status(self, at: datetime) -> ConsentStatus:
        """计算令牌当前状态"""
        if self.decision is not None:
            return ConsentStatus(self.decision.value)
        if self.is_expired(at):
            return ConsentStatus.EXPIRED
        return ConsentStatus.PENDING
