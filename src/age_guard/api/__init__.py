"""对外接口模块（与传输层无关，返回响应载荷）"""

from age_guard.api.endpoints import AgeRestrictionEndpoints

__all__ = ["AgeRestrictionEndpoints"]
