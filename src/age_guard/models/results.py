"""检查结果数据模型

策略拒绝以 allowed=False 返回，code 为机器可读的原因，reason 为展示用文本。
"""

from dataclasses import dataclass, field
from datetime import datetime

from age_guard.config.constants import ConsentDecision, ViolationCode
from age_guard.models.restriction import RestrictionBundle, TimeWindow
from age_guard.models.spending import SpendingRecord, SpendingUsage


@dataclass
class SpendingCheckResult:
    """消费额度检查结果"""

    allowed: bool
    reason: str | None = None
    code: ViolationCode | None = None
    current_usage: SpendingUsage | None = None

    def to_dict(self) -> dict:
        data = {"allowed": self.allowed}
        if self.reason:
            data["reason"] = self.reason
            data["code"] = self.code.value
        if self.current_usage is not None:
            data["currentUsage"] = self.current_usage.to_dict()
        return data


@dataclass
class SpendingRecordResult:
    """消费记录结果（检查与写入在同一事务内完成）"""

    check: SpendingCheckResult
    record: SpendingRecord | None = None

    @property
    def recorded(self) -> bool:
        return self.record is not None


@dataclass
class TimeCheckResult:
    """时段检查结果"""

    allowed: bool
    reason: str | None = None
    code: ViolationCode | None = None
    allowed_hours: TimeWindow | None = None

    def to_dict(self) -> dict:
        data = {"allowed": self.allowed}
        if self.reason:
            data["reason"] = self.reason
            data["code"] = self.code.value
        if self.allowed_hours is not None:
            data["allowedHours"] = self.allowed_hours.to_dict()
        return data


@dataclass
class UsageCheckResult:
    """连续使用检查结果"""

    allowed: bool
    reason: str | None = None
    code: ViolationCode | None = None
    suggested_break: int | None = None  # 分钟
    continuous_minutes: int | None = None

    def to_dict(self) -> dict:
        data = {"allowed": self.allowed}
        if self.reason:
            data["reason"] = self.reason
            data["code"] = self.code.value
        if self.suggested_break is not None:
            data["suggestedBreak"] = self.suggested_break
        if self.continuous_minutes is not None:
            data["continuousMinutes"] = self.continuous_minutes
        return data


@dataclass
class AggregateCheckResult:
    """综合检查结果（收集全部违规项，不在第一个失败处停止）"""

    violations: list[str] = field(default_factory=list)
    codes: list[ViolationCode] = field(default_factory=list)
    current_usage: SpendingUsage | None = None

    @property
    def allowed(self) -> bool:
        return not self.violations

    def add(self, code: ViolationCode, reason: str):
        self.codes.append(code)
        self.violations.append(reason)

    def to_dict(self) -> dict:
        data = {
            "allowed": self.allowed,
            "violations": list(self.violations),
            "codes": [code.value for code in self.codes],
        }
        if self.current_usage is not None:
            data["currentUsage"] = self.current_usage.to_dict()
        return data


@dataclass
class ConsentRequestResult:
    """同意请求结果"""

    token: str
    expires_at: datetime
    notified: bool
    warning: str | None = None


@dataclass
class ConsentProcessResult:
    """同意处理结果"""

    child_user_id: str
    decision: ConsentDecision
    restrictions: RestrictionBundle | None = None

    def to_dict(self) -> dict:
        return {
            "childUserId": self.child_user_id,
            "decision": self.decision.value,
            "restrictions": self.restrictions.to_dict() if self.restrictions else None,
        }
