from decimal import Decimal

from fastapi import APIRouter, Depends, Query, status
from pydantic import Field

from growvest.core.money import MAX_DIGITS
from growvest.core.pagination import page_response, paginate
from growvest.deps import get_current_user, parse_id
from growvest.models.deposit import ReviewStatus
from growvest.models.user import User
from growvest.serializers import CamelModel, withdrawal_out
from growvest.services import withdrawals as withdrawals_service

router = APIRouter()


class WithdrawalCreate(CamelModel):
    amount: Decimal = Field(gt=0, max_digits=MAX_DIGITS, decimal_places=2)
    method_details: str = Field(min_length=1)


@router.post("", status_code=status.HTTP_201_CREATED)
async def withdrawal_create(body: WithdrawalCreate, user: User = Depends(get_current_user)):
    """Request a payout; the amount must be covered by the available balance."""
    w = await withdrawals_service.create_withdrawal(user, body.amount, body.method_details)
    return withdrawal_out(w, body.method_details.strip())


@router.get("")
async def withdrawals_list(
    user: User = Depends(get_current_user),
    status: ReviewStatus | None = None,
    user_id: str | None = Query(None, alias="userId"),
    limit: int = 50,
    offset: int = 0,
):
    limit, offset = paginate(limit, offset)
    owner = parse_id(user_id, "User") if user_id else None
    items, total = await withdrawals_service.list_withdrawals(user, limit, offset, status=status, user_id=owner)
    return page_response(
        [withdrawal_out(w, withdrawals_service.method_details_of(w)) for w in items],
        limit,
        offset,
        total,
    )
