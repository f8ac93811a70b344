"""Withdrawal requests. Payout details are stored encrypted."""

from decimal import Decimal

from beanie import PydanticObjectId

from growvest.core.audit import log_event
from growvest.core.encryption import decrypt_field, encrypt_field
from growvest.core.exceptions import BadRequestError, InsufficientFundsError
from growvest.core.logging import get_logger
from growvest.core.money import money_str, quantize
from growvest.models.deposit import ReviewStatus
from growvest.models.user import User
from growvest.models.withdrawal import Withdrawal
from growvest.services import wallet as wallet_service

log = get_logger(__name__)


async def create_withdrawal(user: User, amount: Decimal, method_details: str) -> Withdrawal:
    amount = quantize(amount)
    if amount <= 0:
        raise BadRequestError("Amount must be greater than 0")
    method_details = (method_details or "").strip()
    if not method_details:
        raise BadRequestError("Withdrawal method details are required")
    balances = await wallet_service.compute_balances(user.id)
    if amount > balances.available_balance:
        raise InsufficientFundsError(
            "Insufficient available balance for this withdrawal",
            details={"requested": money_str(amount), "available": money_str(balances.available_balance)},
        )
    withdrawal = Withdrawal(
        user_id=user.id,
        amount=amount,
        method_details=encrypt_field(method_details),
        status="pending",
    )
    await withdrawal.insert()
    log.info("withdrawal_created", withdrawal_id=str(withdrawal.id), user_id=str(user.id), amount=money_str(amount))
    await log_event(str(user.id), "withdrawal_created", "withdrawal", str(withdrawal.id), {"amount": money_str(amount)})
    return withdrawal


def method_details_of(withdrawal: Withdrawal) -> str:
    return decrypt_field(withdrawal.method_details)


async def list_withdrawals(
    user: User,
    limit: int,
    offset: int,
    status: ReviewStatus | None = None,
    user_id: PydanticObjectId | None = None,
) -> tuple[list[Withdrawal], int]:
    filters = []
    if not user.is_admin:
        filters.append(Withdrawal.user_id == user.id)
    elif user_id is not None:
        filters.append(Withdrawal.user_id == user_id)
    if status:
        filters.append(Withdrawal.status == status)
    total = await Withdrawal.find(*filters).count()
    items = await Withdrawal.find(*filters).sort(-Withdrawal.created_at).skip(offset).limit(limit).to_list()
    return items, total
