"""Deposit requests with an optional proof-of-payment upload."""

import os
import uuid
from decimal import Decimal

from beanie import PydanticObjectId

from growvest.core.audit import log_event
from growvest.core.config import get_settings
from growvest.core.exceptions import BadRequestError
from growvest.core.logging import get_logger
from growvest.core.money import money_str, quantize
from growvest.models.deposit import Deposit, ReviewStatus
from growvest.models.user import User
from growvest.storage.base import get_storage

log = get_logger(__name__)

ALLOWED_PROOF_TYPES = {
    ".jpeg": {"image/jpeg"},
    ".jpg": {"image/jpeg", "image/jpg"},
    ".png": {"image/png"},
    ".gif": {"image/gif"},
    ".pdf": {"application/pdf"},
}
PROOF_TYPE_ERROR = "Only images and PDF files are allowed"


def validate_proof(filename: str, content_type: str | None, size: int) -> str:
    """Check extension, content type and size; return the lower-cased extension."""
    ext = os.path.splitext(filename or "")[1].lower()
    allowed = ALLOWED_PROOF_TYPES.get(ext)
    if not allowed or (content_type or "").lower() not in allowed:
        raise BadRequestError(PROOF_TYPE_ERROR)
    limit = get_settings().max_upload_bytes
    if size > limit:
        raise BadRequestError("File too large", details={"max_bytes": limit})
    if size == 0:
        raise BadRequestError("Empty file")
    return ext


async def store_proof(user_id: PydanticObjectId, content: bytes, filename: str, content_type: str | None) -> str:
    ext = validate_proof(filename, content_type, len(content))
    key = f"proofs/{user_id}/{uuid.uuid4().hex}{ext}"
    return await get_storage().put(key, content, content_type=content_type)


async def create_deposit(
    user: User,
    amount: Decimal,
    method: str,
    tx_id: str | None = None,
    proof: tuple[bytes, str, str | None] | None = None,
) -> Deposit:
    """Create a pending deposit. proof is (content, filename, content_type)."""
    amount = quantize(amount)
    if amount <= 0:
        raise BadRequestError("Amount must be greater than 0")
    method = (method or "").strip()
    if not method:
        raise BadRequestError("Deposit method is required")
    proof_key = None
    if proof is not None:
        content, filename, content_type = proof
        proof_key = await store_proof(user.id, content, filename, content_type)
    deposit = Deposit(
        user_id=user.id,
        amount=amount,
        method=method,
        tx_id=(tx_id or "").strip() or None,
        proof_url=proof_key,
        status="pending",
    )
    await deposit.insert()
    log.info("deposit_created", deposit_id=str(deposit.id), user_id=str(user.id), amount=money_str(amount))
    await log_event(str(user.id), "deposit_created", "deposit", str(deposit.id), {"amount": money_str(amount)})
    return deposit


async def list_deposits(
    user: User,
    limit: int,
    offset: int,
    status: ReviewStatus | None = None,
    user_id: PydanticObjectId | None = None,
) -> tuple[list[Deposit], int]:
    """Own deposits; admins see everyone's, optionally filtered by status and user."""
    filters = []
    if not user.is_admin:
        filters.append(Deposit.user_id == user.id)
    elif user_id is not None:
        filters.append(Deposit.user_id == user_id)
    if status:
        filters.append(Deposit.status == status)
    total = await Deposit.find(*filters).count()
    items = await Deposit.find(*filters).sort(-Deposit.created_at).skip(offset).limit(limit).to_list()
    return items, total
