"""Shared FastAPI dependencies. The resolved User is passed explicitly into services."""

from collections.abc import AsyncIterator

import redis.asyncio as aioredis
from beanie import PydanticObjectId
from bson.errors import InvalidId
from fastapi import Request

from growvest.core.config import get_settings
from growvest.core.exceptions import ForbiddenError, NotFoundError, UnauthorizedError
from growvest.core.logging import bind_actor
from growvest.core.security import load_access_token
from growvest.models.user import User

SESSION_COOKIE_NAME = "growvest_session"


def parse_id(value: str, entity: str = "Resource") -> PydanticObjectId:
    """Path id -> ObjectId; malformed ids are reported as not found."""
    try:
        return PydanticObjectId(value)
    except (InvalidId, TypeError):
        raise NotFoundError(f"{entity} not found")


def _token_from_request(request: Request) -> str | None:
    auth = request.headers.get("Authorization") or ""
    scheme, _, value = auth.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return request.cookies.get(SESSION_COOKIE_NAME)


async def get_current_user(request: Request) -> User:
    """Dependency: load user from bearer token or session cookie."""
    token = _token_from_request(request)
    if not token:
        raise UnauthorizedError("Not authenticated")
    payload = load_access_token(token)
    if not payload:
        raise UnauthorizedError("Invalid or expired session")
    user_id = payload.get("user_id")
    if not user_id:
        raise UnauthorizedError("Invalid session")
    try:
        user = await User.get(PydanticObjectId(user_id))
    except InvalidId:
        raise UnauthorizedError("Invalid session")
    if not user:
        raise UnauthorizedError("User not found")
    if payload.get("session_version") != user.session_version:
        raise UnauthorizedError("Session invalidated")
    if user.is_suspended:
        raise UnauthorizedError("Account is suspended")
    bind_actor(str(user.id), user.role)
    return user


async def require_admin(request: Request) -> User:
    """Dependency: require current user to have role admin."""
    user = await get_current_user(request)
    if not user.is_admin:
        raise ForbiddenError("Admin only")
    return user


async def get_redis() -> AsyncIterator[aioredis.Redis]:
    client = aioredis.from_url(get_settings().redis_url, decode_responses=True)
    try:
        yield client
    finally:
        await client.aclose()
