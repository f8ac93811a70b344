"""Admin review of deposits and withdrawals: pending -> approved | rejected, both terminal.

The transition is a single compare-and-set on status == "pending", so a record
already reviewed (or one racing with another admin) is rejected with a conflict
instead of being silently overwritten.
"""

from datetime import datetime
from typing import Literal

from beanie import PydanticObjectId
from beanie.operators import Set

from growvest.core.audit import log_event
from growvest.core.exceptions import ConflictError, NotFoundError
from growvest.core.logging import get_logger
from growvest.core.money import money_str
from growvest.models.deposit import Deposit
from growvest.models.user import User
from growvest.models.withdrawal import Withdrawal
from growvest.services import referrals as referrals_service

log = get_logger(__name__)

Decision = Literal["approved", "rejected"]


async def _review(
    model: type[Deposit] | type[Withdrawal],
    entity: str,
    record_id: PydanticObjectId,
    admin: User,
    decision: Decision,
    reason: str | None = None,
) -> Deposit | Withdrawal:
    update = {
        model.status: decision,
        model.reviewed_by: admin.id,
        model.reviewed_at: datetime.utcnow(),
    }
    if decision == "rejected" and reason:
        update[model.rejection_reason] = reason
    result = await model.find_one(model.id == record_id, model.status == "pending").update(Set(update))
    if result.modified_count == 0:
        existing = await model.get(record_id)
        if not existing:
            raise NotFoundError(f"{entity.capitalize()} not found")
        raise ConflictError(
            f"{entity.capitalize()} has already been {existing.status}",
            code="ALREADY_REVIEWED",
            details={"status": existing.status},
        )
    record = await model.get(record_id)
    log.info(
        f"{entity}_{decision}",
        record_id=str(record_id),
        admin_id=str(admin.id),
        amount=money_str(record.amount),
    )
    await log_event(
        str(admin.id),
        f"{entity}_{decision}",
        entity,
        str(record_id),
        {"amount": money_str(record.amount), "user_id": str(record.user_id), "reason": reason},
    )
    return record


async def approve_deposit(deposit_id: PydanticObjectId, admin: User) -> Deposit:
    deposit = await _review(Deposit, "deposit", deposit_id, admin, "approved")
    await referrals_service.grant_commission_for_deposit(deposit)
    return deposit


async def reject_deposit(deposit_id: PydanticObjectId, admin: User, reason: str | None = None) -> Deposit:
    return await _review(Deposit, "deposit", deposit_id, admin, "rejected", reason)


async def approve_withdrawal(withdrawal_id: PydanticObjectId, admin: User) -> Withdrawal:
    return await _review(Withdrawal, "withdrawal", withdrawal_id, admin, "approved")


async def reject_withdrawal(withdrawal_id: PydanticObjectId, admin: User, reason: str | None = None) -> Withdrawal:
    return await _review(Withdrawal, "withdrawal", withdrawal_id, admin, "rejected", reason)
