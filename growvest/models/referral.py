from datetime import datetime

from beanie import Document, Indexed, PydanticObjectId
from pydantic import Field

from growvest.core.money import Money


class Referral(Document):
    """Commission paid to referrer for a referred user's first approved deposit."""
    referrer_id: PydanticObjectId
    referred_id: Indexed(PydanticObjectId, unique=True)
    commission_amount: Money
    deposit_id: PydanticObjectId | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "referrals"
        indexes = [[("referrer_id", 1), ("created_at", -1)]]
