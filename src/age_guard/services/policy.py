"""年龄分级策略

年龄 → 限制组合的唯一定义处，其他模块不得重复这张表。
"""

from age_guard.config.constants import ADULT_AGE, SENIOR_MINOR_AGE
from age_guard.models.restriction import RequiredBreaks, RestrictionBundle, TimeRestrictions, TimeWindow

# 未满 16 岁
JUNIOR_DAILY_LIMIT = 1000
JUNIOR_MONTHLY_LIMIT = 5000

# 16-17 岁
SENIOR_DAILY_LIMIT = 2000
SENIOR_MONTHLY_LIMIT = 10000

# 所有未成年人共用
MINOR_TIME_RESTRICTIONS = TimeRestrictions(
    weekdays=TimeWindow(start="06:00", end="22:00"),
    weekends=TimeWindow(start="06:00", end="23:00"),
)
MINOR_REQUIRED_BREAKS = RequiredBreaks(
    continuous_minutes=60,  # 连续使用 60 分钟需要休息
    daily_minutes=180,  # 每日最多 3 小时
)


def resolve_restrictions(age: int) -> RestrictionBundle | None:
    """
    根据年龄获取默认限制

    Args:
        age: 周岁年龄

    Returns:
        限制组合；成年人返回 None（不受限制）
    """
    if age >= ADULT_AGE:
        return None

    if age < SENIOR_MINOR_AGE:
        daily, monthly = JUNIOR_DAILY_LIMIT, JUNIOR_MONTHLY_LIMIT
    else:
        daily, monthly = SENIOR_DAILY_LIMIT, SENIOR_MONTHLY_LIMIT

    return RestrictionBundle(
        monthly_spending_limit=monthly,
        daily_spending_limit=daily,
        time_restrictions=MINOR_TIME_RESTRICTIONS,
        required_breaks=MINOR_REQUIRED_BREAKS,
    )
