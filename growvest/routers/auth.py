from fastapi import APIRouter, Depends, Response, status
from pydantic import EmailStr, Field

from growvest.core.exceptions import TooManyRequestsError, UnauthorizedError
from growvest.deps import SESSION_COOKIE_NAME, get_current_user, get_redis
from growvest.models.user import User
from growvest.serializers import CamelModel, user_out
from growvest.services import rate_limit
from growvest.services import users as user_service

router = APIRouter()


class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=8)
    referral_code: str | None = None


class LoginRequest(CamelModel):
    email: EmailStr
    password: str


class ForgotPasswordRequest(CamelModel):
    email: EmailStr


class ResetPasswordRequest(CamelModel):
    token: str
    new_password: str = Field(min_length=8)


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        max_age=user_service.session_cookie_max_age(),
        httponly=True,
        secure=False,  # set True in prod with HTTPS
        samesite="lax",
        path="/",
    )


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def auth_register(body: RegisterRequest):
    """Create an account (optionally referred) and return an access token."""
    user = await user_service.register_user(body.email, body.password, body.referral_code)
    return {"accessToken": user_service.issue_access_token(user), "user": user_out(user)}


@router.post("/login")
async def auth_login(body: LoginRequest, response: Response, redis=Depends(get_redis)):
    """Exchange credentials for a token; also sets the httpOnly session cookie."""
    email = user_service.normalize_email(body.email)
    if await rate_limit.get_failed_logins(redis, email) >= rate_limit.login_max_attempts():
        raise TooManyRequestsError("Too many failed login attempts, try again later")
    try:
        user = await user_service.authenticate(email, body.password)
    except UnauthorizedError:
        await rate_limit.incr_failed_logins(redis, email)
        raise
    await rate_limit.reset_failed_logins(redis, email)
    token = user_service.issue_access_token(user)
    _set_session_cookie(response, token)
    return {"accessToken": token, "user": user_out(user)}


@router.post("/logout")
async def auth_logout(response: Response):
    response.delete_cookie(SESSION_COOKIE_NAME, path="/")
    return {"message": "Logged out"}


@router.post("/forgot-password")
async def auth_forgot_password(body: ForgotPasswordRequest):
    """Same answer whether or not the email is registered."""
    await user_service.request_password_reset(body.email)
    return {"message": user_service.FORGOT_PASSWORD_MESSAGE}


@router.post("/reset-password")
async def auth_reset_password(body: ResetPasswordRequest):
    await user_service.reset_password(body.token, body.new_password)
    return {"message": "Password has been reset"}


@router.get("/me")
async def auth_me(user: User = Depends(get_current_user)):
    return user_out(user)
