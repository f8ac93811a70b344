from datetime import datetime

from beanie import Document, PydanticObjectId
from pydantic import Field
from pymongo import IndexModel

from growvest.core.money import Money


class ProfitCredit(Document):
    """Per-investment, per-date credit. Unique (investment_id, date) makes retries safe."""
    investment_id: PydanticObjectId
    user_id: PydanticObjectId
    date: datetime
    amount: Money
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "profit_credits"
        indexes = [
            IndexModel([("investment_id", 1), ("date", 1)], unique=True),
            [("user_id", 1), ("date", -1)],
        ]
