from datetime import datetime
from decimal import Decimal
from typing import Literal

from beanie import Document, Indexed, PydanticObjectId
from pydantic import Field

from growvest.core.money import Money


class ProfitLedger(Document):
    """One row per distribution date; the unique date index is the run's idempotency guard."""
    date: Indexed(datetime, unique=True)
    status: Literal["running", "completed"] = "running"
    total_distributed: Money = Decimal("0.00")
    investment_count: int = 0
    created_by: PydanticObjectId
    started_at: datetime = Field(default_factory=datetime.utcnow)
    completed_at: datetime | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "profit_ledgers"
