from decimal import Decimal

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from growvest.core.config import get_settings
from growvest.core.money import MAX_DIGITS
from growvest.core.pagination import page_response, paginate
from growvest.deps import get_current_user, parse_id
from growvest.models.deposit import ReviewStatus
from growvest.models.user import User
from growvest.serializers import deposit_out
from growvest.services import deposits as deposits_service

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
async def deposit_create(
    user: User = Depends(get_current_user),
    amount: Decimal = Form(..., gt=0, max_digits=MAX_DIGITS, decimal_places=2),
    method: str = Form(...),
    tx_id: str | None = Form(None, alias="txId"),
    proof: UploadFile | None = File(None),
):
    """Submit a deposit for review. Optional proof: image or PDF."""
    upload = None
    if proof is not None and proof.filename:
        # one byte past the limit is enough to reject
        content = await proof.read(get_settings().max_upload_bytes + 1)
        upload = (content, proof.filename, proof.content_type)
    deposit = await deposits_service.create_deposit(user, amount, method, tx_id, upload)
    return deposit_out(deposit)


@router.get("")
async def deposits_list(
    user: User = Depends(get_current_user),
    status: ReviewStatus | None = None,
    user_id: str | None = Query(None, alias="userId"),
    limit: int = 50,
    offset: int = 0,
):
    """Own deposits; admins see all and may filter by status and userId."""
    limit, offset = paginate(limit, offset)
    owner = parse_id(user_id, "User") if user_id else None
    items, total = await deposits_service.list_deposits(user, limit, offset, status=status, user_id=owner)
    return page_response([deposit_out(d) for d in items], limit, offset, total)
