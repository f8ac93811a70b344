"""Registration, login, password reset and admin user management."""

from datetime import datetime

from beanie import PydanticObjectId
from pymongo.errors import DuplicateKeyError

from growvest.core.audit import log_event
from growvest.core.config import get_settings
from growvest.core.exceptions import BadRequestError, ConflictError, NotFoundError, UnauthorizedError
from growvest.core.logging import get_logger
from growvest.core.security import (
    create_access_token,
    create_password_reset_token,
    hash_password,
    load_password_reset_token,
    verify_password,
)
from growvest.models.user import User
from growvest.services import referrals as referrals_service

log = get_logger(__name__)

FORGOT_PASSWORD_MESSAGE = "If the email exists, a reset link has been sent"


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


async def register_user(email: str, password: str, referral_code: str | None = None) -> User:
    email = normalize_email(email)
    if await User.find_one(User.email == email):
        raise ConflictError("User with this email already exists")
    referrer = None
    if referral_code and referral_code.strip():
        referrer = await referrals_service.find_referrer(referral_code)
        if not referrer:
            raise BadRequestError("Invalid referral code")
    user = User(
        email=email,
        password_hash=hash_password(password),
        role="user",
        referral_code=await referrals_service.generate_unique_code(),
        referred_by=referrer.id if referrer else None,
    )
    try:
        await user.insert()
    except DuplicateKeyError:
        raise ConflictError("User with this email already exists")
    log.info("user_registered", user_id=str(user.id), referred=referrer is not None)
    await log_event(str(user.id), "user_registered", "user", str(user.id), {"email": email})
    return user


async def authenticate(email: str, password: str) -> User:
    user = await User.find_one(User.email == normalize_email(email))
    if not user:
        raise UnauthorizedError("Invalid credentials")
    if user.is_suspended:
        raise UnauthorizedError("Account is suspended")
    if not verify_password(password, user.password_hash):
        raise UnauthorizedError("Invalid credentials")
    user.last_login_at = datetime.utcnow()
    await user.save()
    log.info("user_login", user_id=str(user.id))
    return user


def token_payload_for_user(user: User) -> dict:
    return {"user_id": str(user.id), "session_version": user.session_version}


def issue_access_token(user: User) -> str:
    return create_access_token(token_payload_for_user(user))


async def request_password_reset(email: str) -> str | None:
    """Return a reset token for a known user, None otherwise. Delivery is out of band."""
    user = await User.find_one(User.email == normalize_email(email))
    if not user:
        return None
    token = create_password_reset_token(str(user.id), user.session_version)
    if get_settings().env == "production":
        log.info("password_reset_requested", user_id=str(user.id))
    else:
        # no mail delivery; outside production the token is handed over through the log
        log.info("password_reset_requested", user_id=str(user.id), token=token)
    await log_event(str(user.id), "password_reset_requested", "user", str(user.id))
    return token


async def reset_password(token: str, new_password: str) -> User:
    payload = load_password_reset_token(token)
    if not payload or not payload.get("user_id"):
        raise BadRequestError("Invalid or expired reset token")
    user = await User.get(PydanticObjectId(payload["user_id"]))
    # a used token is dead: the reset bumps session_version
    if not user or payload.get("session_version") != user.session_version:
        raise BadRequestError("Invalid or expired reset token")
    user.password_hash = hash_password(new_password)
    user.session_version += 1
    user.updated_at = datetime.utcnow()
    await user.save()
    log.info("password_reset", user_id=str(user.id))
    await log_event(str(user.id), "password_reset", "user", str(user.id))
    return user


async def get_user(user_id: PydanticObjectId) -> User:
    user = await User.get(user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


async def list_users(limit: int, offset: int) -> tuple[list[User], int]:
    total = await User.find_all().count()
    users = await User.find_all().sort(-User.created_at).skip(offset).limit(limit).to_list()
    return users, total


async def update_user(
    admin: User,
    user_id: PydanticObjectId,
    email: str | None = None,
    is_suspended: bool | None = None,
) -> User:
    """Admin edit. Suspending bumps session_version so outstanding tokens stop working."""
    user = await get_user(user_id)
    changes: dict = {}
    if email is not None:
        email = normalize_email(email)
        if email != user.email:
            other = await User.find_one(User.email == email)
            if other:
                raise ConflictError("User with this email already exists")
            changes["email"] = email
            user.email = email
    if is_suspended is not None and is_suspended != user.is_suspended:
        changes["is_suspended"] = is_suspended
        user.is_suspended = is_suspended
        if is_suspended:
            user.session_version += 1
    if changes:
        user.updated_at = datetime.utcnow()
        await user.save()
        event = "user_updated"
        if "is_suspended" in changes:
            event = "user_suspended" if is_suspended else "user_unsuspended"
        log.info(event, user_id=str(user.id), admin_id=str(admin.id))
        await log_event(str(admin.id), event, "user", str(user.id), changes)
    return user


async def ensure_admin(email: str, password: str) -> tuple[User, str]:
    """Create the admin account or upgrade an existing user. Returns (user, outcome)."""
    email = normalize_email(email)
    user = await User.find_one(User.email == email)
    if user:
        if user.is_admin:
            return user, "exists"
        user.role = "admin"
        user.updated_at = datetime.utcnow()
        await user.save()
        await log_event(None, "user_promoted_admin", "user", str(user.id), {"email": email})
        return user, "upgraded"
    user = User(
        email=email,
        password_hash=hash_password(password),
        role="admin",
        referral_code=await referrals_service.generate_unique_code(),
    )
    await user.insert()
    await log_event(None, "admin_created", "user", str(user.id), {"email": email})
    return user, "created"


async def find_admin_by_email(email: str | None) -> User | None:
    if not email:
        return None
    user = await User.find_one(User.email == normalize_email(email))
    if not user or not user.is_admin:
        return None
    return user


def session_cookie_max_age() -> int:
    return get_settings().session_max_age
