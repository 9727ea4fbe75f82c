"""异常定义

策略拒绝（超额、时段外、连续使用超限）不是异常，而是 allowed=False 的正常结果。
这里只定义"系统无法完成请求"的错误。
"""


class AgeGuardError(Exception):
    """基础异常"""

    code = "AGE_GUARD_ERROR"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__doc__ or self.code

    def to_dict(self) -> dict:
        """转换为响应载荷"""
        return {
            "success": False,
            "error": self.code,
            "message": self.message,
        }


class ValidationError(AgeGuardError):
    """请求参数无效"""

    code = "VALIDATION_ERROR"


class TokenInvalidError(AgeGuardError):
    """同意令牌无效"""

    code = "TOKEN_INVALID"


class TokenExpiredError(AgeGuardError):
    """同意令牌已过期"""

    code = "TOKEN_EXPIRED"


class TokenAlreadyUsedError(AgeGuardError):
    """同意令牌已被使用"""

    code = "TOKEN_ALREADY_USED"


class SessionNotFoundError(AgeGuardError):
    """会话不存在或已结束"""

    code = "SESSION_NOT_FOUND"


class PersistenceError(AgeGuardError):
    """存储不可用或写入失败"""

    code = "PERSISTENCE_ERROR"


class NotificationError(AgeGuardError):
    """通知发送失败"""

    code = "NOTIFICATION_FAILED"
