"""配置模块"""

from age_guard.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
