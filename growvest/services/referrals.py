"""Referral codes and commission on a referred user's first approved deposit."""

import secrets
import string
from decimal import Decimal

from beanie import PydanticObjectId
from beanie.operators import In
from pymongo.errors import DuplicateKeyError

from growvest.core.config import get_settings
from growvest.core.exceptions import BadRequestError
from growvest.core.logging import get_logger
from growvest.core.money import ZERO, percent_of
from growvest.models.deposit import Deposit
from growvest.models.referral import Referral
from growvest.models.user import User

log = get_logger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 8


def _generate_code() -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


async def generate_unique_code() -> str:
    for _ in range(10):
        code = _generate_code()
        if not await User.find_one(User.referral_code == code):
            return code
    raise BadRequestError("Could not generate unique referral code")


async def find_referrer(code: str) -> User | None:
    code = (code or "").strip().upper()
    if not code:
        return None
    return await User.find_one(User.referral_code == code)


async def grant_commission_for_deposit(deposit: Deposit) -> Referral | None:
    """
    Pay the referrer REFERRAL_COMMISSION_PERCENT of the referee's first approved deposit.
    At most once per referred user: the unique index on referred_id decides races.
    """
    referee = await User.get(deposit.user_id)
    if not referee or referee.referred_by is None:
        return None
    if await Referral.find_one(Referral.referred_id == referee.id):
        return None
    commission = percent_of(deposit.amount, get_settings().referral_commission_percent)
    if commission <= 0:
        return None
    referral = Referral(
        referrer_id=referee.referred_by,
        referred_id=referee.id,
        commission_amount=commission,
        deposit_id=deposit.id,
    )
    try:
        await referral.insert()
    except DuplicateKeyError:
        return None
    log.info(
        "referral_commission_granted",
        referrer_id=str(referee.referred_by),
        referred_id=str(referee.id),
        amount=str(commission),
    )
    return referral


async def list_referrals(user_id: PydanticObjectId) -> list[dict]:
    """Commissions earned by user, newest first, with the referred user's email."""
    referrals = await Referral.find(Referral.referrer_id == user_id).sort(-Referral.created_at).to_list()
    ids = [r.referred_id for r in referrals]
    users = await User.find(In(User.id, ids)).to_list() if ids else []
    emails = {u.id: u.email for u in users}
    return [
        {"referral": r, "referred_email": emails.get(r.referred_id)}
        for r in referrals
    ]


async def total_commission(user_id: PydanticObjectId) -> Decimal:
    referrals = await Referral.find(Referral.referrer_id == user_id).to_list()
    return sum((r.commission_amount for r in referrals), ZERO)


async def referral_stats(user: User) -> dict:
    """Referred user count and total commission earned."""
    referred_count = await User.find(User.referred_by == user.id).count()
    return {
        "referral_code": user.referral_code,
        "referred_count": referred_count,
        "total_commission": await total_commission(user.id),
    }
