"""家长同意流程

令牌状态: pending → approved | denied | expired（另有 superseded：同一孩子发起了新请求）。
处理令牌时，令牌行加锁，限制写入、账号状态变更与令牌标记在同一事务内提交。
"""

import logging
import secrets
from datetime import datetime, timedelta
from typing import Callable

from age_guard.config.constants import ADULT_AGE, ConsentDecision, ConsentStatus
from age_guard.config.settings import get_settings
from age_guard.core.exceptions import (
    NotificationError,
    PersistenceError,
    TokenAlreadyUsedError,
    TokenExpiredError,
    TokenInvalidError,
    ValidationError,
)
from age_guard.core.timezone import now
from age_guard.models.consent import ConsentToken
from age_guard.models.restriction import RestrictionBundle
from age_guard.models.results import ConsentProcessResult, ConsentRequestResult
from age_guard.repositories.account_repository import AccountRepository
from age_guard.repositories.consent_repository import ConsentTokenRepository
from age_guard.repositories.restriction_repository import RestrictionRepository
from age_guard.services.notification import ConsentNotifier
from age_guard.services.policy import resolve_restrictions
from age_guard.utils.validator import clean_input, validate_email

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32  # 256 位随机数


def generate_consent_token() -> str:
    """生成不可猜测的同意令牌"""
    return secrets.token_urlsafe(TOKEN_BYTES)


class ConsentWorkflow:
    """家长同意流程"""

    def __init__(
        self,
        consent_repo: ConsentTokenRepository | None = None,
        restriction_repo: RestrictionRepository | None = None,
        account_repo: AccountRepository | None = None,
        notifier: ConsentNotifier | None = None,
        clock: Callable[[], datetime] = now,
    ):
        self.settings = get_settings()
        self.consent_repo = consent_repo or ConsentTokenRepository()
        self.restriction_repo = restriction_repo or RestrictionRepository()
        self.account_repo = account_repo or AccountRepository()
        self.notifier = notifier or ConsentNotifier()
        self.clock = clock

    async def request(
        self,
        parent_email: str,
        child_user_id: str,
        child_name: str,
        child_age: int,
    ) -> ConsentRequestResult:
        """
        发起家长同意请求

        先保存令牌再通知家长；保存失败则不通知。通知失败时令牌仍然有效，
        结果中 notified=False 并附带警告。同一孩子之前未处理的令牌会被作废。

        Args:
            parent_email: 家长邮箱
            child_user_id: 孩子的用户 ID
            child_name: 孩子的显示名
            child_age: 孩子的年龄

        Returns:
            请求结果（含令牌与过期时间）
        """
        parent_email = validate_email(parent_email)
        child_name = clean_input(child_name or "")
        if not child_name:
            raise ValidationError("缺少孩子姓名")
        if isinstance(child_age, bool) or not isinstance(child_age, int) or not 0 <= child_age < ADULT_AGE:
            raise ValidationError(f"家长同意仅适用于未成年人: age={child_age}")

        token = generate_consent_token()
        expires_at = self.clock() + timedelta(days=self.settings.consent_token_ttl_days)

        async with self.consent_repo.transaction():
            await self.consent_repo.supersede_pending(child_user_id, processed_at=self.clock())
            await self.consent_repo.create(
                token=token,
                parent_email=parent_email,
                child_user_id=child_user_id,
                child_name=child_name,
                child_age=child_age,
                expires_at=expires_at,
            )
        logger.info(f"家长同意令牌已创建: 孩子 {child_user_id} 过期时间 {expires_at:%Y-%m-%d %H:%M}")

        try:
            await self.notifier.send_consent_request(
                parent_email=parent_email,
                child_name=child_name,
                child_age=child_age,
                token=token,
                expires_at=expires_at,
            )
        except NotificationError as e:
            logger.warning(f"家长通知失败，令牌仍然有效: 孩子 {child_user_id} - {e.message}")
            return ConsentRequestResult(
                token=token,
                expires_at=expires_at,
                notified=False,
                warning=e.message,
            )

        return ConsentRequestResult(token=token, expires_at=expires_at, notified=True)

    async def process(
        self,
        token: str,
        agrees: bool,
        custom_restrictions: dict | None = None,
    ) -> ConsentProcessResult:
        """
        处理家长的决定

        Args:
            token: 同意令牌
            agrees: 家长是否同意
            custom_restrictions: 覆盖默认限制的部分载荷（camelCase 顶层键，浅合并）

        Returns:
            处理结果

        Raises:
            TokenInvalidError: 令牌不存在或已被新请求取代
            TokenAlreadyUsedError: 令牌已处理
            TokenExpiredError: 令牌已过期（不做任何变更）
        """
        async with self.consent_repo.transaction():
            consent = await self.consent_repo.get(token, for_update=True)
            current_time = self.clock()
            self._ensure_processable(consent, current_time)

            child_user_id = consent.child_user_id
            restrictions = None

            if agrees:
                restrictions = self._build_restrictions(consent.child_age, custom_restrictions)
                if restrictions is not None:
                    await self.restriction_repo.upsert(child_user_id, restrictions)
                await self.account_repo.activate(child_user_id)
                decision = ConsentDecision.APPROVED
            else:
                await self.account_repo.deactivate(child_user_id)
                decision = ConsentDecision.DENIED

            if not await self.consent_repo.mark_used(token, decision, processed_at=current_time):
                raise PersistenceError("同意令牌标记失败")

        logger.info(f"家长同意已处理: 孩子 {child_user_id} 决定={decision.value}")
        return ConsentProcessResult(
            child_user_id=child_user_id,
            decision=decision,
            restrictions=restrictions,
        )

    async def status(self, token: str) -> tuple[ConsentToken, ConsentStatus]:
        """查询令牌状态"""
        consent = await self.consent_repo.get(token)
        if consent is None:
            raise TokenInvalidError("同意令牌无效")
        return consent, consent.status(self.clock())

    @staticmethod
    def _ensure_processable(consent: ConsentToken | None, current_time: datetime):
        """校验令牌可被处理（顺序: 存在 → 未使用 → 未过期）"""
        if consent is None:
            raise TokenInvalidError("同意令牌无效")

        if consent.is_used:
            if consent.decision == ConsentDecision.SUPERSEDED:
                raise TokenInvalidError("同意令牌已被新的请求取代")
            raise TokenAlreadyUsedError("同意令牌已被使用")

        if consent.is_expired(current_time):
            logger.info(f"同意令牌已过期: 孩子 {consent.child_user_id} 过期时间 {consent.expires_at}")
            raise TokenExpiredError("同意令牌已过期")

    @staticmethod
    def _build_restrictions(child_age: int, custom_restrictions: dict | None) -> RestrictionBundle | None:
        """默认限制 + 自定义覆盖"""
        defaults = resolve_restrictions(child_age)
        if defaults is None:
            logger.warning(f"同意令牌记录的年龄已成年 ({child_age})，不写入限制")
            return None

        try:
            return defaults.merge(custom_restrictions)
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"自定义限制无效: {e}") from e
