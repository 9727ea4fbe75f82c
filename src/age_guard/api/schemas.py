"""请求载荷模型"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

CLOCK_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class TimeWindowModel(BaseModel):
    """时段（HH:MM，首尾均含）"""

    model_config = ConfigDict(extra="forbid")

    start: str = Field(..., pattern=CLOCK_PATTERN, description="开始时间")
    end: str = Field(..., pattern=CLOCK_PATTERN, description="结束时间")

    @model_validator(mode="after")
    def check_order(self):
        if self.start > self.end:
            raise ValueError(f"start {self.start} must not be after end {self.end}")
        return self


class TimeRestrictionsModel(BaseModel):
    """平日 / 周末时段"""

    model_config = ConfigDict(extra="forbid")

    weekdays: TimeWindowModel
    weekends: TimeWindowModel


class RequiredBreaksModel(BaseModel):
    """休息要求"""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    continuous_minutes: int = Field(..., alias="continuousMinutes", gt=0, description="连续使用上限（分钟）")
    daily_minutes: int = Field(..., alias="dailyMinutes", gt=0, description="每日使用上限（分钟）")


class CustomRestrictionsModel(BaseModel):
    """家长自定义的限制覆盖项（未提供的字段沿用默认值）"""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    monthly_spending_limit: Optional[int] = Field(None, alias="monthlySpendingLimit", ge=0)
    daily_spending_limit: Optional[int] = Field(None, alias="dailySpendingLimit", ge=0)
    time_restrictions: Optional[TimeRestrictionsModel] = Field(None, alias="timeRestrictions")
    required_breaks: Optional[RequiredBreaksModel] = Field(None, alias="requiredBreaks")

    def to_overrides(self) -> dict:
        """转换为 camelCase 覆盖项（只含显式提供的非空字段）"""
        data = self.model_dump(by_alias=True, exclude_unset=True)
        return {key: value for key, value in data.items() if value is not None}


class RestrictionBundleModel(BaseModel):
    """完整限制组合（管理员覆盖用）"""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    monthly_spending_limit: int = Field(..., alias="monthlySpendingLimit", ge=0)
    daily_spending_limit: int = Field(..., alias="dailySpendingLimit", ge=0)
    time_restrictions: TimeRestrictionsModel = Field(..., alias="timeRestrictions")
    required_breaks: RequiredBreaksModel = Field(..., alias="requiredBreaks")


class RecordSpendingRequest(BaseModel):
    """消费记录请求"""

    amount: int = Field(..., gt=0, description="金额（整数货币单位）")
    description: str = Field(default="", max_length=500, description="消费说明")


class ParentalConsentRequest(BaseModel):
    """家长同意请求"""

    model_config = ConfigDict(populate_by_name=True)

    parent_email: str = Field(..., alias="parentEmail", description="家长邮箱")
    child_name: str = Field(..., alias="childName", min_length=1, description="孩子的显示名")
    child_age: int = Field(..., alias="childAge", ge=0, lt=18, description="孩子的年龄")


class ProcessConsentRequest(BaseModel):
    """家长同意处理请求"""

    model_config = ConfigDict(populate_by_name=True)

    token: str = Field(..., min_length=1, description="同意令牌")
    agrees: bool = Field(..., description="家长是否同意")
    custom_restrictions: Optional[CustomRestrictionsModel] = Field(None, alias="customRestrictions")
