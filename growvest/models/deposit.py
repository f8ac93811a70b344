from datetime import datetime
from typing import Literal

from beanie import Document, PydanticObjectId
from pydantic import Field

from growvest.core.money import Money

ReviewStatus = Literal["pending", "approved", "rejected"]


class Deposit(Document):
    user_id: PydanticObjectId
    amount: Money
    method: str
    tx_id: str | None = None
    proof_url: str | None = None  # storage key of the uploaded proof
    status: ReviewStatus = "pending"
    reviewed_by: PydanticObjectId | None = None
    reviewed_at: datetime | None = None
    rejection_reason: str | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "deposits"
        indexes = [
            [("user_id", 1), ("created_at", -1)],
            [("status", 1), ("created_at", -1)],
        ]
