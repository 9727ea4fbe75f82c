"""验证工具"""

import re
from datetime import date, datetime

from age_guard.core.exceptions import ValidationError

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def clean_input(text: str) -> str:
    """
    清理输入文本

    Args:
        text: 输入文本

    Returns:
        清理后的文本
    """
    # 去除首尾空格
    text = text.strip()

    # 去除多余空格
    text = " ".join(text.split())

    return text


def parse_birth_date(value: str | date | None, today: date | None = None) -> date:
    """
    解析出生日期

    Args:
        value: "YYYY-MM-DD" 字符串或 date
        today: 参考日期（用于拒绝未来日期）

    Raises:
        ValidationError: 格式无效或晚于参考日期
    """
    if value is None or value == "":
        raise ValidationError("缺少出生日期")

    if isinstance(value, datetime):
        birth_date = value.date()
    elif isinstance(value, date):
        birth_date = value
    else:
        try:
            birth_date = date.fromisoformat(clean_input(str(value))[:10])
        except ValueError as e:
            raise ValidationError(f"出生日期格式无效: {value}") from e

    if today is not None and birth_date > today:
        raise ValidationError("出生日期不能晚于今天")

    return birth_date


def validate_amount(value, allow_zero: bool = False) -> int:
    """
    验证消费金额（整数货币单位）

    Raises:
        ValidationError: 缺失、非整数或不为正
    """
    if value is None or value == "":
        raise ValidationError("缺少金额")

    if isinstance(value, bool):
        raise ValidationError(f"金额无效: {value}")

    try:
        amount = int(str(value).strip())
    except ValueError as e:
        raise ValidationError(f"金额无效: {value}") from e

    if amount < 0 or (amount == 0 and not allow_zero):
        raise ValidationError(f"金额必须为正数: {amount}")

    return amount


def validate_email(value: str | None) -> str:
    """验证邮箱地址格式"""
    email = clean_input(value or "")
    if not _EMAIL_PATTERN.match(email):
        raise ValidationError(f"邮箱地址无效: {value}")
    return email
