"""业务服务模块"""

from age_guard.services.age import calculate_age
from age_guard.services.consent import ConsentWorkflow, generate_consent_token
from age_guard.services.notification import ConsentNotifier
from age_guard.services.policy import resolve_restrictions
from age_guard.services.quota import QuotaLedger, quota_window
from age_guard.services.restriction_checker import AggregateRestrictionChecker
from age_guard.services.session_store import SessionStore
from age_guard.services.spending_guard import SpendingGuard, evaluate_spending
from age_guard.services.time_window import TimeWindowGuard
from age_guard.services.usage_guard import ContinuousUsageGuard

__all__ = [
    "calculate_age",
    "resolve_restrictions",
    "QuotaLedger",
    "quota_window",
    "SpendingGuard",
    "evaluate_spending",
    "TimeWindowGuard",
    "SessionStore",
    "ContinuousUsageGuard",
    "AggregateRestrictionChecker",
    "ConsentNotifier",
    "ConsentWorkflow",
    "generate_consent_token",
]
