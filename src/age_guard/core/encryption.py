"""AES-256-GCM 加密工具（用于家长邮箱等个人信息的落库加密）"""

import base64
import logging
import os

from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from age_guard.config.settings import get_settings

logger = logging.getLogger(__name__)

NONCE_SIZE = 12  # 96 位


def _get_key() -> bytes:
    """
    获取加密密钥（32 字节）

    Raises:
        ValueError: 如果密钥无效（不是有效的 32 字节密钥）
    """
    key_str = get_settings().encryption_key

    # 32 字符的原始密钥直接使用
    if len(key_str) == 32:
        return key_str.encode()

    try:
        key_bytes = base64.b64decode(key_str, validate=True)
    except ValueError as e:
        logger.error(f"无效的加密密钥配置: {type(e).__name__}: {e}")
        raise ValueError(
            "无效的加密密钥配置。密钥应为 32 字节的原始密钥，或 32 字节密钥的 Base64 编码。"
        ) from e

    if len(key_bytes) != 32:
        raise ValueError(f"Base64 解码后的密钥长度为 {len(key_bytes)} 字节，应为 32 字节")
    return key_bytes


def encrypt_value(plaintext: str) -> str:
    """
    加密字符串

    Args:
        plaintext: 明文

    Returns:
        Base64 编码的加密数据（nonce + ciphertext）
    """
    nonce = os.urandom(NONCE_SIZE)
    ciphertext = AESGCM(_get_key()).encrypt(nonce, plaintext.encode(), None)
    return base64.b64encode(nonce + ciphertext).decode()


def decrypt_value(encrypted_data: str) -> str:
    """
    解密字符串

    Args:
        encrypted_data: Base64 编码的加密数据（nonce + ciphertext）

    Returns:
        明文
    """
    combined = base64.b64decode(encrypted_data)
    nonce, ciphertext = combined[:NONCE_SIZE], combined[NONCE_SIZE:]
    plaintext = AESGCM(_get_key()).decrypt(nonce, ciphertext, None)
    return plaintext.decode()
