"""Derived balances. Nothing here is stored; every figure is summed from the records."""

from dataclasses import dataclass
from decimal import Decimal

from beanie import PydanticObjectId
from beanie.operators import In

from growvest.core.money import ZERO, quantize
from growvest.models.deposit import Deposit
from growvest.models.investment import Investment
from growvest.models.plan import Plan
from growvest.models.referral import Referral
from growvest.models.user import User
from growvest.models.withdrawal import Withdrawal


@dataclass
class Balances:
    approved_deposits: Decimal
    allocated_principal: Decimal  # principal of investments not cancelled
    locked_principal: Decimal  # active, or completed without refundable principal
    active_principal: Decimal
    total_profit: Decimal
    referral_earnings: Decimal
    reserved_withdrawals: Decimal  # pending + approved
    active_investments: int

    @property
    def unallocated_deposits(self) -> Decimal:
        return quantize(self.approved_deposits - self.allocated_principal)

    @property
    def available_balance(self) -> Decimal:
        return quantize(
            self.approved_deposits
            - self.locked_principal
            + self.total_profit
            + self.referral_earnings
            - self.reserved_withdrawals
        )

    @property
    def investable(self) -> Decimal:
        """Funds an activation may draw on: deposited money not yet allocated nor withdrawn."""
        return max(ZERO, min(self.unallocated_deposits, self.available_balance))


def _sum(values) -> Decimal:
    return quantize(sum(values, ZERO))


async def compute_balances(user_id: PydanticObjectId) -> Balances:
    deposits = await Deposit.find(Deposit.user_id == user_id, Deposit.status == "approved").to_list()
    investments = await Investment.find(Investment.user_id == user_id).to_list()
    withdrawals = await Withdrawal.find(
        Withdrawal.user_id == user_id,
        In(Withdrawal.status, ["pending", "approved"]),
    ).to_list()
    referrals = await Referral.find(Referral.referrer_id == user_id).to_list()

    plan_ids = list({i.plan_id for i in investments})
    plans = {p.id: p for p in await Plan.find(In(Plan.id, plan_ids)).to_list()} if plan_ids else {}

    def is_locked(inv: Investment) -> bool:
        if inv.status == "active":
            return True
        plan = plans.get(inv.plan_id)
        return inv.status == "completed" and plan is not None and not plan.refundable_principal

    active = [i for i in investments if i.status == "active"]
    return Balances(
        approved_deposits=_sum(d.amount for d in deposits),
        allocated_principal=_sum(i.amount for i in investments if i.status != "cancelled"),
        locked_principal=_sum(i.amount for i in investments if is_locked(i)),
        active_principal=_sum(i.amount for i in active),
        total_profit=_sum(i.profit_accrued for i in investments),
        referral_earnings=_sum(r.commission_amount for r in referrals),
        reserved_withdrawals=_sum(w.amount for w in withdrawals),
        active_investments=len(active),
    )


async def dashboard_summary(user: User) -> dict:
    balances = await compute_balances(user.id)
    referral_count = await User.find(User.referred_by == user.id).count()
    return {
        "available_balance": balances.available_balance,
        "unallocated_deposits": balances.unallocated_deposits,
        "total_invested": balances.active_principal,
        "total_profit": balances.total_profit,
        "active_investments": balances.active_investments,
        "referral_count": referral_count,
        "referral_earnings": balances.referral_earnings,
    }
