"""Fernet encryption for sensitive fields (withdrawal payout details)."""

import base64
import hashlib

from cryptography.fernet import Fernet, InvalidToken

from growvest.core.config import get_settings
from growvest.core.exceptions import BadRequestError


def _get_fernet() -> Fernet:
    settings = get_settings()
    key = settings.token_encryption_key
    if not key or len(key) != 44:
        # Derive from secret_key for dev when TOKEN_ENCRYPTION_KEY not set
        digest = hashlib.sha256(settings.secret_key.encode()).digest()
        key = base64.urlsafe_b64encode(digest).decode()
    try:
        return Fernet(key.encode())
    except ValueError as e:
        raise BadRequestError(f"Invalid encryption key: {e}") from e


def encrypt_field(plain: str) -> str:
    if not plain:
        return ""
    return _get_fernet().encrypt(plain.encode()).decode()


def decrypt_field(encrypted: str) -> str:
    """Return the plaintext, or "" when the value was written under another key."""
    if not encrypted:
        return ""
    try:
        return _get_fernet().decrypt(encrypted.encode()).decode()
    except InvalidToken:
        return ""
