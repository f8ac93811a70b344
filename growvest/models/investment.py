from datetime import datetime
from decimal import Decimal
from typing import Literal

from beanie import Document, PydanticObjectId
from pydantic import Field

from growvest.core.money import Money

InvestmentStatus = Literal["active", "completed", "cancelled"]


class Investment(Document):
    user_id: PydanticObjectId
    plan_id: PydanticObjectId
    amount: Money
    profit_accrued: Money = Decimal("0.00")
    start_date: datetime
    end_date: datetime
    status: InvestmentStatus = "active"
    last_profit_date: datetime | None = None  # midnight of the latest credited day
    credited_dates: list[datetime] = Field(default_factory=list)  # every day a profit credit was applied
    closed_by: PydanticObjectId | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "investments"
        indexes = [
            [("user_id", 1), ("created_at", -1)],
            [("status", 1)],
        ]
