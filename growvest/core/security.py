import hashlib
from typing import Any

import bcrypt
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from growvest.core.config import get_settings

BCRYPT_ROUNDS = 12

SESSION_SALT = "growvest-session"
PASSWORD_RESET_SALT = "growvest-password-reset"


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode()


def verify_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # malformed stored hash
        return False


def _serializer(salt: str) -> URLSafeTimedSerializer:
    settings = get_settings()
    return URLSafeTimedSerializer(
        settings.secret_key,
        salt=salt,
        signer_kwargs={"key_derivation": "hmac", "digest_method": hashlib.sha256},
    )


def create_access_token(payload: dict[str, Any]) -> str:
    """Signed, timestamped token used both as bearer token and session cookie."""
    return _serializer(SESSION_SALT).dumps(payload)


def load_access_token(token: str) -> dict[str, Any] | None:
    try:
        return _serializer(SESSION_SALT).loads(token, max_age=get_settings().session_max_age)
    except (BadSignature, SignatureExpired):
        return None


def create_password_reset_token(user_id: str, session_version: int) -> str:
    return _serializer(PASSWORD_RESET_SALT).dumps({"user_id": user_id, "session_version": session_version})


def load_password_reset_token(token: str) -> dict[str, Any] | None:
    try:
        return _serializer(PASSWORD_RESET_SALT).loads(token, max_age=get_settings().password_reset_max_age)
    except (BadSignature, SignatureExpired):
        return None
