"""配置管理模块"""

import logging

from pydantic import Field, ConfigDict, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """应用配置类"""

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==================== 数据库配置 ====================
    database_url: str = Field(..., description="PostgreSQL 连接字符串")
    encryption_key: str = Field(..., min_length=32, description="AES-256-GCM 加密密钥（32 字节或 base64 编码）")

    # ==================== 运行时配置 ====================
    timezone: str = Field(default="Asia/Tokyo", description="参考时区（日/月/周末边界）")
    suggested_break_minutes: int = Field(default=15, description="连续使用超限时建议的休息时长（分钟）")
    stale_session_hours: int = Field(default=12, description="超过该时长仍处于活跃状态的会话视为遗留会话")
    session_cleanup_interval_minutes: int = Field(default=10, description="遗留会话清理间隔（分钟）")

    # ==================== 家长同意配置 ====================
    consent_token_ttl_days: int = Field(default=7, description="同意令牌有效期（天）")
    consent_base_url: str = Field(
        default="https://example.com/parental-consent",
        description="家长同意页面地址（令牌以 token 参数附加）",
    )

    # ==================== 邮件 API 配置 ====================
    mail_api_url: str = Field(default="", description="事务邮件 HTTP API 地址（为空时仅记录日志）")
    mail_api_key: str = Field(default="", description="事务邮件 API 密钥")
    mail_from: str = Field(default="no-reply@example.com", description="发件人地址")
    mail_timeout: int = Field(default=15, description="邮件请求超时（秒）")

    # ==================== 日志配置 ====================
    log_level_str: str = Field(default="INFO", alias="LOG_LEVEL", description="日志级别: DEBUG, INFO, WARNING, ERROR")

    @field_validator("log_level_str")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """验证日志级别"""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}, got '{v}'")
        return v_upper

    @field_validator("consent_token_ttl_days", "suggested_break_minutes", "stale_session_hours")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """验证正整数配置"""
        if v <= 0:
            raise ValueError(f"value must be positive, got {v}")
        return v

    @property
    def log_level(self) -> int:
        """获取日志级别常量"""
        return getattr(logging, self.log_level_str)

    @property
    def mail_enabled(self) -> bool:
        """是否配置了邮件 API"""
        return bool(self.mail_api_url)


# 全局配置实例
_settings: Settings | None = None


def get_settings() -> Settings:
    """获取配置实例（单例模式）"""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
