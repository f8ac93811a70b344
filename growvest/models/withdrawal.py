from datetime import datetime

from beanie import Document, PydanticObjectId
from pydantic import Field

from growvest.core.money import Money
from growvest.models.deposit import ReviewStatus


class Withdrawal(Document):
    user_id: PydanticObjectId
    amount: Money
    method_details: str  # Fernet-encrypted
    status: ReviewStatus = "pending"
    reviewed_by: PydanticObjectId | None = None
    reviewed_at: datetime | None = None
    rejection_reason: str | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "withdrawals"
        indexes = [
            [("user_id", 1), ("created_at", -1)],
            [("status", 1), ("created_at", -1)],
        ]
