from decimal import Decimal

from beanie import PydanticObjectId
from bson.errors import InvalidId
from fastapi import APIRouter, Depends, status
from pydantic import Field

from growvest.core.exceptions import BadRequestError
from growvest.core.money import MAX_DIGITS
from growvest.deps import get_current_user, parse_id
from growvest.models.user import User
from growvest.serializers import CamelModel, investment_out, profit_credit_out
from growvest.services import investments as investments_service

router = APIRouter()


class ActivateRequest(CamelModel):
    plan_id: str
    amount: Decimal = Field(gt=0, max_digits=MAX_DIGITS, decimal_places=2)


@router.post("/activate", status_code=status.HTTP_201_CREATED)
async def investment_activate(body: ActivateRequest, user: User = Depends(get_current_user)):
    """Start an investment funded from approved, unallocated deposits."""
    try:
        plan_id = PydanticObjectId(body.plan_id)
    except (InvalidId, TypeError):
        raise BadRequestError("Investment plan not found")
    investment = await investments_service.activate_investment(user, plan_id, body.amount)
    return investment_out(investment)


@router.get("")
async def investments_list(user: User = Depends(get_current_user)):
    items = await investments_service.list_investments(user.id)
    plans = await investments_service.plans_by_id([i.plan_id for i in items])
    return {"investments": [investment_out(i, plans.get(i.plan_id)) for i in items]}


@router.get("/{investment_id}/profits")
async def investment_profits(investment_id: str, user: User = Depends(get_current_user)):
    """Daily profit credits of one investment, newest first."""
    investment = await investments_service.get_investment_for(user, parse_id(investment_id, "Investment"))
    credits = await investments_service.list_profit_credits(investment)
    return {
        "investment": investment_out(investment),
        "profits": [profit_credit_out(c) for c in credits],
    }
