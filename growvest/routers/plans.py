from fastapi import APIRouter

from growvest.serializers import plan_out
from growvest.services import investments as investments_service

router = APIRouter()


@router.get("")
async def plans_list():
    """Public: the investment plans on offer."""
    plans = await investments_service.list_plans()
    return {"plans": [plan_out(p) for p in plans]}
