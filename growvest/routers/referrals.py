from fastapi import APIRouter, Depends

from growvest.core.money import money_str
from growvest.deps import get_current_user
from growvest.models.user import User
from growvest.services import referrals as referrals_service

router = APIRouter()


@router.get("")
async def referrals_list(user: User = Depends(get_current_user)):
    """Commissions earned from referred users, newest first."""
    rows = await referrals_service.list_referrals(user.id)
    return {
        "referrals": [
            {
                "id": str(row["referral"].id),
                "referredEmail": row["referred_email"],
                "commissionAmount": money_str(row["referral"].commission_amount),
                "createdAt": row["referral"].created_at.isoformat(),
            }
            for row in rows
        ]
    }


@router.get("/stats")
async def referral_stats(user: User = Depends(get_current_user)):
    """Referral stats: referralCode, referredCount, totalCommission."""
    stats = await referrals_service.referral_stats(user)
    return {
        "referralCode": stats["referral_code"],
        "referredCount": stats["referred_count"],
        "totalCommission": money_str(stats["total_commission"]),
    }
