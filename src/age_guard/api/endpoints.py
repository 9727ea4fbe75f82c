"""年龄限制接口

每个方法对应一个 HTTP 路由（路由本身由外部传输层负责），返回 JSON 可序列化的载荷:

    GET  /age-restrictions/check?amount?                 -> check_restrictions
    GET  /age-restrictions/spending-check?amount         -> spending_check
    GET  /age-restrictions/time-check                    -> time_check
    GET  /age-restrictions/usage-check                   -> usage_check
    GET  /age-restrictions/my-restrictions               -> my_restrictions
    POST /age-restrictions/record-spending               -> record_spending
    POST /age-restrictions/start-session                 -> start_session
    POST /age-restrictions/end-session/:sessionId        -> end_session
    POST /age-restrictions/request-parental-consent      -> request_parental_consent
    POST /age-restrictions/process-parental-consent      -> process_parental_consent
    GET  /age-restrictions/consent-status?token          -> consent_status
    GET  /age-restrictions/calculate-age?birthDate       -> calculate_age
    PUT  /age-restrictions/admin/:userId                 -> override_restrictions
"""

import logging
from datetime import datetime
from functools import wraps
from typing import Callable

from pydantic import ValidationError as PydanticValidationError

from age_guard.api.schemas import (
    ParentalConsentRequest,
    ProcessConsentRequest,
    RecordSpendingRequest,
    RestrictionBundleModel,
)
from age_guard.config.constants import ADULT_AGE
from age_guard.core.exceptions import AgeGuardError, PersistenceError, ValidationError
from age_guard.core.timezone import now
from age_guard.models.restriction import RestrictionBundle
from age_guard.repositories.account_repository import AccountRepository
from age_guard.repositories.consent_repository import ConsentTokenRepository
from age_guard.repositories.restriction_repository import RestrictionRepository
from age_guard.repositories.session_repository import SessionRepository
from age_guard.repositories.spending_repository import SpendingRepository
from age_guard.services.age import calculate_age
from age_guard.services.consent import ConsentWorkflow
from age_guard.services.notification import ConsentNotifier
from age_guard.services.policy import resolve_restrictions
from age_guard.services.restriction_checker import AggregateRestrictionChecker
from age_guard.services.session_store import SessionStore
from age_guard.services.spending_guard import SpendingGuard
from age_guard.services.time_window import TimeWindowGuard
from age_guard.services.usage_guard import ContinuousUsageGuard
from age_guard.utils.validator import parse_birth_date, validate_amount

logger = logging.getLogger(__name__)


def _format_validation_errors(error: PydanticValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(loc) for loc in item["loc"])
        parts.append(f"{location}: {item['msg']}" if location else item["msg"])
    return "; ".join(parts)


def api_response(func):
    """
    装饰器：将领域异常转换为失败载荷

    策略拒绝由接口自身返回；这里只处理请求错误与系统错误，其他异常交给传输层。
    """
    @wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except PydanticValidationError as e:
            message = _format_validation_errors(e)
            logger.info(f"{func.__name__}: 请求参数无效 - {message}")
            return ValidationError(message).to_dict()
        except PersistenceError as e:
            logger.error(f"{func.__name__}: 存储错误 - {e.message}")
            return e.to_dict()
        except AgeGuardError as e:
            logger.info(f"{func.__name__}: {e.code} - {e.message}")
            return e.to_dict()
    return wrapper


class AgeRestrictionEndpoints:
    """年龄限制接口集合"""

    def __init__(
        self,
        restriction_repo: RestrictionRepository | None = None,
        spending_repo: SpendingRepository | None = None,
        session_repo: SessionRepository | None = None,
        consent_repo: ConsentTokenRepository | None = None,
        account_repo: AccountRepository | None = None,
        notifier: ConsentNotifier | None = None,
        clock: Callable[[], datetime] = now,
    ):
        self.clock = clock
        self.restriction_repo = restriction_repo or RestrictionRepository()
        self.session_store = SessionStore(session_repo, clock=clock)
        self.spending_guard = SpendingGuard(self.restriction_repo, spending_repo, clock=clock)
        self.time_guard = TimeWindowGuard(self.restriction_repo, clock=clock)
        self.usage_guard = ContinuousUsageGuard(self.restriction_repo, self.session_store, clock=clock)
        self.checker = AggregateRestrictionChecker(self.time_guard, self.usage_guard, self.spending_guard)
        self.consent = ConsentWorkflow(
            consent_repo=consent_repo,
            restriction_repo=self.restriction_repo,
            account_repo=account_repo,
            notifier=notifier,
            clock=clock,
        )

    # ==================== 检查 ====================

    @api_response
    async def check_restrictions(self, user_id: str, amount=None) -> dict:
        """综合检查"""
        requested_amount = None if amount in (None, "") else validate_amount(amount, allow_zero=True)
        result = await self.checker.check(user_id, requested_amount)
        return {"success": True, "data": result.to_dict()}

    @api_response
    async def spending_check(self, user_id: str, amount) -> dict:
        """消费额度检查"""
        requested_amount = validate_amount(amount, allow_zero=True)
        result = await self.spending_guard.check(user_id, requested_amount)
        return {"success": True, "data": result.to_dict()}

    @api_response
    async def time_check(self, user_id: str) -> dict:
        """时段检查"""
        result = await self.time_guard.check(user_id)
        return {"success": True, "data": result.to_dict()}

    @api_response
    async def usage_check(self, user_id: str) -> dict:
        """连续使用检查"""
        result = await self.usage_guard.check(user_id)
        return {"success": True, "data": result.to_dict()}

    @api_response
    async def my_restrictions(self, user_id: str) -> dict:
        """当前用户的限制"""
        bundle = await self.restriction_repo.get(user_id)
        return {"success": True, "data": bundle.to_dict() if bundle else None}

    # ==================== 消费 ====================

    @api_response
    async def record_spending(self, user_id: str, body: dict) -> dict:
        """检查额度并记录消费"""
        request = RecordSpendingRequest.model_validate(body)
        result = await self.spending_guard.record(user_id, request.amount, request.description)
        check = result.check
        usage = check.current_usage.to_dict() if check.current_usage else None

        if not result.recorded:
            return {
                "success": False,
                "error": "SPENDING_LIMIT_EXCEEDED",
                "code": check.code.value,
                "message": check.reason,
                "currentUsage": usage,
            }

        return {
            "success": True,
            "message": "消费已记录",
            "recordId": result.record.id,
            "currentUsage": usage,
        }

    # ==================== 会话 ====================

    @api_response
    async def start_session(self, user_id: str) -> dict:
        """
        开始会话（时段外拒绝）

        已有活跃会话时返回该会话，resumed=True，startTime 为原会话的开始时间，
        连续使用时长继续累计。休息后重新计时需要先调用 end_session。
        """
        time_check = await self.time_guard.check(user_id)
        if not time_check.allowed:
            return {
                "success": False,
                "error": "TIME_RESTRICTION",
                "message": time_check.reason,
                "allowedHours": time_check.allowed_hours.to_dict(),
            }

        session, resumed = await self.session_store.open(user_id)
        return {
            "success": True,
            "sessionId": session.id,
            "startTime": session.start_time.isoformat(),
            "resumed": resumed,
            "message": "沿用进行中的会话" if resumed else "会话已开始",
        }

    @api_response
    async def end_session(self, user_id: str, session_id) -> dict:
        """结束会话"""
        try:
            session_id = int(session_id)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"会话 ID 无效: {session_id}") from e

        await self.session_store.end(session_id, user_id=user_id)
        return {"success": True, "message": "会话已结束"}

    # ==================== 家长同意 ====================

    @api_response
    async def request_parental_consent(self, user_id: str, body: dict) -> dict:
        """向家长发送同意请求（令牌只发给家长，不返回给调用方）"""
        request = ParentalConsentRequest.model_validate(body)
        result = await self.consent.request(
            parent_email=request.parent_email,
            child_user_id=user_id,
            child_name=request.child_name,
            child_age=request.child_age,
        )

        payload = {
            "success": True,
            "message": "家长同意请求已发送" if result.notified else "家长同意请求已保存，但通知发送失败",
            "notified": result.notified,
            "expiresAt": result.expires_at.isoformat(),
        }
        if result.warning:
            payload["warning"] = result.warning
        return payload

    @api_response
    async def process_parental_consent(self, body: dict) -> dict:
        """处理家长的决定"""
        request = ProcessConsentRequest.model_validate(body)
        overrides = request.custom_restrictions.to_overrides() if request.custom_restrictions else None
        result = await self.consent.process(request.token, request.agrees, overrides)
        return {"success": True, "data": result.to_dict()}

    @api_response
    async def consent_status(self, token: str) -> dict:
        """查询同意令牌状态（同意页面展示用，含即将生效的默认限制）"""
        consent, status = await self.consent.status(token)
        defaults = resolve_restrictions(consent.child_age)
        return {
            "success": True,
            "data": {
                "status": status.value,
                "childName": consent.child_name,
                "childAge": consent.child_age,
                "expiresAt": consent.expires_at.isoformat(),
                "processedAt": consent.processed_at.isoformat() if consent.processed_at else None,
                "defaultRestrictions": defaults.to_dict() if defaults else None,
            },
        }

    # ==================== 其他 ====================

    @api_response
    async def calculate_age(self, birth_date) -> dict:
        """计算年龄与默认限制"""
        today = self.clock().date()
        age = calculate_age(parse_birth_date(birth_date, today=today), today=today)
        defaults = resolve_restrictions(age)
        return {
            "success": True,
            "data": {
                "age": age,
                "isMinor": age < ADULT_AGE,
                "requiresParentalConsent": age < ADULT_AGE,
                "defaultRestrictions": defaults.to_dict() if defaults else None,
            },
        }

    @api_response
    async def override_restrictions(self, target_user_id: str, body: dict) -> dict:
        """管理员覆盖用户限制"""
        request = RestrictionBundleModel.model_validate(body)
        bundle = RestrictionBundle.from_dict(request.model_dump(by_alias=True))
        saved = await self.restriction_repo.upsert(target_user_id, bundle)
        logger.info(f"管理员覆盖了用户 {target_user_id} 的限制")
        return {"success": True, "data": saved.to_dict()}
