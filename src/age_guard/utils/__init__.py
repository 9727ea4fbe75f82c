"""工具函数模块"""

from age_guard.utils.formatter import (
    format_consent_email,
    format_continuous_usage_reason,
    format_daily_limit_reason,
    format_monthly_limit_reason,
    format_time_window_reason,
    format_yen,
)
from age_guard.utils.validator import clean_input, parse_birth_date, validate_amount, validate_email

__all__ = [
    "format_yen",
    "format_daily_limit_reason",
    "format_monthly_limit_reason",
    "format_time_window_reason",
    "format_continuous_usage_reason",
    "format_consent_email",
    "clean_input",
    "parse_birth_date",
    "validate_amount",
    "validate_email",
]
