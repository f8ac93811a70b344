from fastapi import APIRouter, Depends
from pydantic import EmailStr

from growvest.core.exceptions import ForbiddenError
from growvest.core.money import money_str
from growvest.core.pagination import page_response, paginate
from growvest.deps import get_current_user, parse_id, require_admin
from growvest.models.user import User
from growvest.serializers import CamelModel, user_out
from growvest.services import users as user_service
from growvest.services import wallet as wallet_service

router = APIRouter()


class UserUpdateRequest(CamelModel):
    email: EmailStr | None = None
    is_suspended: bool | None = None


@router.get("")
async def users_list(
    admin: User = Depends(require_admin),
    limit: int = 50,
    offset: int = 0,
):
    """Admin: all users, newest first."""
    limit, offset = paginate(limit, offset)
    users, total = await user_service.list_users(limit, offset)
    return page_response([user_out(u) for u in users], limit, offset, total)


@router.get("/me/summary")
async def users_me_summary(user: User = Depends(get_current_user)):
    """Dashboard figures, all derived from deposits, investments, withdrawals and referrals."""
    s = await wallet_service.dashboard_summary(user)
    return {
        "availableBalance": money_str(s["available_balance"]),
        "unallocatedDeposits": money_str(s["unallocated_deposits"]),
        "totalInvested": money_str(s["total_invested"]),
        "totalProfit": money_str(s["total_profit"]),
        "activeInvestments": s["active_investments"],
        "referralCount": s["referral_count"],
        "referralEarnings": money_str(s["referral_earnings"]),
    }


@router.get("/{user_id}")
async def users_get(user_id: str, user: User = Depends(get_current_user)):
    target_id = parse_id(user_id, "User")
    if not user.is_admin and target_id != user.id:
        raise ForbiddenError("You can only view your own profile")
    return user_out(await user_service.get_user(target_id))


@router.patch("/{user_id}")
async def users_update(user_id: str, body: UserUpdateRequest, admin: User = Depends(require_admin)):
    """Admin: change email or suspend/unsuspend."""
    updated = await user_service.update_user(
        admin,
        parse_id(user_id, "User"),
        email=body.email,
        is_suspended=body.is_suspended,
    )
    return user_out(updated)
