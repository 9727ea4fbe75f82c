"""家长通知服务"""

import logging
from datetime import datetime
from urllib.parse import urlencode

from curl_cffi.requests import AsyncSession

from age_guard.config.settings import get_settings
from age_guard.core.exceptions import NotificationError
from age_guard.utils.formatter import format_consent_email

logger = logging.getLogger(__name__)


def mask_email(email: str) -> str:
    """日志中隐藏邮箱地址"""
    name, _, domain = email.partition("@")
    return f"{name[:1]}***@{domain}"


class ConsentNotifier:
    """通过事务邮件 HTTP API 通知家长"""

    def __init__(self):
        self.settings = get_settings()

    def build_consent_url(self, token: str) -> str:
        """生成含令牌的同意页面链接"""
        return f"{self.settings.consent_base_url}?{urlencode({'token': token})}"

    async def send_consent_request(
        self,
        parent_email: str,
        child_name: str,
        child_age: int,
        token: str,
        expires_at: datetime,
    ):
        """
        发送家长同意邮件

        Args:
            parent_email: 家长邮箱
            child_name: 孩子的显示名
            child_age: 孩子的年龄
            token: 同意令牌
            expires_at: 令牌过期时间

        Raises:
            NotificationError: 邮件 API 调用失败
        """
        subject, body = format_consent_email(
            child_name=child_name,
            child_age=child_age,
            consent_url=self.build_consent_url(token),
            expires_at=expires_at,
        )

        if not self.settings.mail_enabled:
            logger.info(f"未配置邮件 API，跳过发送: 收件人 {mask_email(parent_email)} 主题={subject}")
            return

        payload = {
            "from": self.settings.mail_from,
            "to": parent_email,
            "subject": subject,
            "text": body,
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.settings.mail_api_key}",
        }

        async with AsyncSession() as session:
            try:
                logger.info(f"发送家长同意邮件: 收件人 {mask_email(parent_email)}")
                response = await session.post(
                    self.settings.mail_api_url,
                    json=payload,
                    headers=headers,
                    timeout=self.settings.mail_timeout,
                )
            except Exception as e:
                logger.error(f"发送家长同意邮件异常: {type(e).__name__}: {e}")
                raise NotificationError(f"邮件发送失败: {e}") from e

        if response.status_code >= 300:
            logger.warning(f"发送家长同意邮件失败: HTTP {response.status_code} {response.text[:200]}")
            raise NotificationError(f"邮件发送失败: HTTP {response.status_code}")

        logger.info(f"家长同意邮件已发送: 收件人 {mask_email(parent_email)}")
