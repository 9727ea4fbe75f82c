"""格式化工具"""

from datetime import datetime

from age_guard.core.timezone import format_datetime
from age_guard.models.restriction import TimeWindow


def format_yen(amount: int) -> str:
    """格式化金额（千分位）"""
    return f"{amount:,} 日元"


def format_daily_limit_reason(limit: int) -> str:
    return f"超过每日消费上限（{format_yen(limit)}）"


def format_monthly_limit_reason(limit: int) -> str:
    return f"超过每月消费上限（{format_yen(limit)}）"


def format_time_window_reason(window: TimeWindow) -> str:
    return f"当前不在可用时段内。可用时段: {window.start}-{window.end}"


def format_continuous_usage_reason(limit_minutes: int, suggested_break: int) -> str:
    return f"已达到连续使用上限（{limit_minutes} 分钟），建议休息 {suggested_break} 分钟"


def format_consent_email(
    child_name: str,
    child_age: int,
    consent_url: str,
    expires_at: datetime,
) -> tuple[str, str]:
    """
    格式化家长同意邮件

    Args:
        child_name: 孩子的显示名
        child_age: 孩子的年龄
        consent_url: 含令牌的同意页面链接
        expires_at: 令牌过期时间

    Returns:
        (subject, body)
    """
    subject = f"请确认 {child_name} 的账号使用许可"

    lines = [
        "您好，",
        "",
        f"{child_name}（{child_age} 岁）申请使用需要监护人同意的付费服务。",
        "请通过以下链接确认是否同意，并可在同意时调整消费额度与使用时段：",
        "",
        consent_url,
        "",
        f"该链接将于 {format_datetime(expires_at, '%Y-%m-%d %H:%M')} 失效，且仅能使用一次。",
        "如果您不认识该申请，请忽略本邮件。",
    ]

    return subject, "\n".join(lines)
