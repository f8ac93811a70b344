"""Failed login attempts per email via Redis: LOGIN_MAX_ATTEMPTS per hour."""

from redis.exceptions import RedisError

from growvest.core.config import get_settings
from growvest.core.logging import get_logger

log = get_logger(__name__)

KEY_PREFIX = "login:failed"
WINDOW_SECONDS = 3600


def _key(email: str) -> str:
    return f"{KEY_PREFIX}:{email}"


async def get_failed_logins(redis, email: str) -> int:
    """Return failed attempts in the current window. Redis outages fail open."""
    try:
        val = await redis.get(_key(email))
        return int(val) if val is not None else 0
    except RedisError as e:
        log.warning("login_rate_limit_unavailable", error=str(e))
        return 0


async def incr_failed_logins(redis, email: str) -> int:
    """Increment and return new count; the window starts at the first failure."""
    key = _key(email)
    try:
        n = await redis.incr(key)
        if n == 1:
            await redis.expire(key, WINDOW_SECONDS)
        return n
    except RedisError as e:
        log.warning("login_rate_limit_unavailable", error=str(e))
        return 0


async def reset_failed_logins(redis, email: str) -> None:
    try:
        await redis.delete(_key(email))
    except RedisError as e:
        log.warning("login_rate_limit_unavailable", error=str(e))


def login_max_attempts() -> int:
    return get_settings().login_max_attempts
