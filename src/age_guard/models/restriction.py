"""年龄限制数据模型"""

from dataclasses import dataclass


def parse_clock(value: str) -> int:
    """将 "HH:MM" 转换为 hour*100+minute 便于直接比较"""
    hours, minutes = value.split(":")
    return int(hours) * 100 + int(minutes)


@dataclass(frozen=True)
class TimeWindow:
    """允许使用的时段（含首尾）"""

    start: str  # "HH:MM"
    end: str  # "HH:MM"

    @property
    def start_value(self) -> int:
        return parse_clock(self.start)

    @property
    def end_value(self) -> int:
        return parse_clock(self.end)

    def contains(self, clock_value: int) -> bool:
        """clock_value 为 hour*100+minute"""
        return self.start_value <= clock_value <= self.end_value

    def to_dict(self) -> dict:
        return {"start": self.start, "end": self.end}

    @classmethod
    def from_dict(cls, data: dict) -> "TimeWindow":
        return cls(start=data["start"], end=data["end"])


@dataclass(frozen=True)
class TimeRestrictions:
    """平日 / 周末时段"""

    weekdays: TimeWindow
    weekends: TimeWindow

    def to_dict(self) -> dict:
        return {
            "weekdays": self.weekdays.to_dict(),
            "weekends": self.weekends.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TimeRestrictions":
        return cls(
            weekdays=TimeWindow.from_dict(data["weekdays"]),
            weekends=TimeWindow.from_dict(data["weekends"]),
        )


@dataclass(frozen=True)
class RequiredBreaks:
    """休息要求"""

    continuous_minutes: int  # 连续使用达到该分钟数需要休息
    daily_minutes: int  # 每日使用上限（分钟）

    def to_dict(self) -> dict:
        return {
            "continuousMinutes": self.continuous_minutes,
            "dailyMinutes": self.daily_minutes,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RequiredBreaks":
        return cls(
            continuous_minutes=int(data["continuousMinutes"]),
            daily_minutes=int(data["dailyMinutes"]),
        )


@dataclass(frozen=True)
class RestrictionBundle:
    """
    单个用户当前生效的全部限制

    每个用户最多一份，写入时整体覆盖；不存在即表示不受限制。
    """

    monthly_spending_limit: int
    daily_spending_limit: int
    time_restrictions: TimeRestrictions
    required_breaks: RequiredBreaks

    def to_dict(self) -> dict:
        """转换为对外载荷（camelCase）"""
        return {
            "monthlySpendingLimit": self.monthly_spending_limit,
            "dailySpendingLimit": self.daily_spending_limit,
            "timeRestrictions": self.time_restrictions.to_dict(),
            "requiredBreaks": self.required_breaks.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RestrictionBundle":
        return cls(
            monthly_spending_limit=int(data["monthlySpendingLimit"]),
            daily_spending_limit=int(data["dailySpendingLimit"]),
            time_restrictions=TimeRestrictions.from_dict(data["timeRestrictions"]),
            required_breaks=RequiredBreaks.from_dict(data["requiredBreaks"]),
        )

    def merge(self, overrides: dict | None) -> "RestrictionBundle":
        """
        浅合并覆盖项

        Args:
            overrides: 顶层键为 camelCase 的部分载荷，嵌套对象整体替换

        Returns:
            合并后的新实例
        """
        if not overrides:
            return self
        return RestrictionBundle.from_dict({**self.to_dict(), **overrides})
