"""Plans, investment activation (with funding check) and admin closing."""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Literal

from beanie import PydanticObjectId
from beanie.operators import In, Set

from growvest.core.audit import log_event
from growvest.core.exceptions import BadRequestError, ConflictError, ForbiddenError, InsufficientFundsError, NotFoundError
from growvest.core.logging import get_logger
from growvest.core.money import money_str, quantize
from growvest.models.investment import Investment
from growvest.models.plan import Plan
from growvest.models.profit_credit import ProfitCredit
from growvest.models.user import User
from growvest.services import wallet as wallet_service

log = get_logger(__name__)

DEFAULT_PLANS = [
    {"name": "Plan A", "daily_percent": Decimal("3.00"), "lock_period_days": 30, "refundable_principal": True},
    {"name": "Plan B", "daily_percent": Decimal("7.00"), "lock_period_days": 90, "refundable_principal": False},
]


async def seed_default_plans() -> int:
    """Insert the default plans when the collection is empty. Returns the number inserted."""
    if await Plan.find_all().count():
        return 0
    for fields in DEFAULT_PLANS:
        await Plan(**fields).insert()
    log.info("plans_seeded", count=len(DEFAULT_PLANS))
    return len(DEFAULT_PLANS)


async def list_plans() -> list[Plan]:
    return await Plan.find_all().sort(+Plan.created_at).to_list()


async def activate_investment(user: User, plan_id: PydanticObjectId, amount: Decimal) -> Investment:
    """
    Create an active investment once the funding check passes: the amount must be
    covered by approved deposits that are neither allocated to other investments
    nor reserved by withdrawals.
    """
    plan = await Plan.get(plan_id)
    if not plan:
        raise BadRequestError("Investment plan not found")
    amount = quantize(amount)
    if amount <= 0:
        raise BadRequestError("Amount must be greater than 0")
    balances = await wallet_service.compute_balances(user.id)
    if amount > balances.investable:
        raise InsufficientFundsError(
            "Insufficient approved deposit balance for this investment",
            details={"requested": money_str(amount), "available": money_str(balances.investable)},
        )
    start = datetime.utcnow()
    investment = Investment(
        user_id=user.id,
        plan_id=plan.id,
        amount=amount,
        start_date=start,
        end_date=start + timedelta(days=plan.lock_period_days),
        status="active",
    )
    await investment.insert()
    log.info(
        "investment_activated",
        investment_id=str(investment.id),
        user_id=str(user.id),
        plan=plan.name,
        amount=money_str(amount),
    )
    await log_event(
        str(user.id),
        "investment_activated",
        "investment",
        str(investment.id),
        {"plan_id": str(plan.id), "amount": money_str(amount)},
    )
    return investment


async def list_investments(user_id: PydanticObjectId) -> list[Investment]:
    return await Investment.find(Investment.user_id == user_id).sort(-Investment.created_at).to_list()


async def get_investment_for(user: User, investment_id: PydanticObjectId) -> Investment:
    investment = await Investment.get(investment_id)
    if not investment:
        raise NotFoundError("Investment not found")
    if not user.is_admin and investment.user_id != user.id:
        raise ForbiddenError("You can only access your own investments")
    return investment


async def list_profit_credits(investment: Investment) -> list[ProfitCredit]:
    return await ProfitCredit.find(ProfitCredit.investment_id == investment.id).sort(-ProfitCredit.date).to_list()


async def close_investment(
    investment_id: PydanticObjectId,
    admin: User,
    status: Literal["completed", "cancelled"],
) -> Investment:
    """Admin completion/cancellation; only an active investment can be closed."""
    result = await Investment.find_one(
        Investment.id == investment_id,
        Investment.status == "active",
    ).update(Set({
        Investment.status: status,
        Investment.closed_by: admin.id,
        Investment.updated_at: datetime.utcnow(),
    }))
    if result.modified_count == 0:
        existing = await Investment.get(investment_id)
        if not existing:
            raise NotFoundError("Investment not found")
        raise ConflictError(f"Investment is already {existing.status}", details={"status": existing.status})
    investment = await Investment.get(investment_id)
    log.info(f"investment_{status}", investment_id=str(investment_id), admin_id=str(admin.id))
    await log_event(str(admin.id), f"investment_{status}", "investment", str(investment_id))
    return investment


async def plans_by_id(plan_ids: list[PydanticObjectId]) -> dict[PydanticObjectId, Plan]:
    if not plan_ids:
        return {}
    return {p.id: p for p in await Plan.find(In(Plan.id, list(set(plan_ids)))).to_list()}
