"""年龄计算"""

from datetime import date

from age_guard.core.timezone import now


def calculate_age(birth_date: date, today: date | None = None) -> int:
    """
    计算周岁

    今年的生日还没到时，在年份差的基础上减一。

    Args:
        birth_date: 出生日期
        today: 参考日期（默认为参考时区的今天）

    Returns:
        周岁年龄
    """
    if today is None:
        today = now().date()

    age = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age
