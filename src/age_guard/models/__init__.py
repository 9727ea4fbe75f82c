"""数据模型模块"""

from age_guard.models.consent import ConsentToken
from age_guard.models.restriction import RequiredBreaks, RestrictionBundle, TimeRestrictions, TimeWindow
from age_guard.models.results import (
    AggregateCheckResult,
    ConsentProcessResult,
    ConsentRequestResult,
    SpendingCheckResult,
    SpendingRecordResult,
    TimeCheckResult,
    UsageCheckResult,
)
from age_guard.models.session import Session
from age_guard.models.spending import QuotaWindow, SpendingRecord, SpendingUsage

__all__ = [
    "TimeWindow",
    "TimeRestrictions",
    "RequiredBreaks",
    "RestrictionBundle",
    "SpendingRecord",
    "SpendingUsage",
    "QuotaWindow",
    "Session",
    "ConsentToken",
    "SpendingCheckResult",
    "SpendingRecordResult",
    "TimeCheckResult",
    "UsageCheckResult",
    "AggregateCheckResult",
    "ConsentRequestResult",
    "ConsentProcessResult",
]
