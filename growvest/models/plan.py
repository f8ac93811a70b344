from datetime import datetime

from beanie import Document, Indexed
from pydantic import Field

from growvest.core.money import Money


class Plan(Document):
    """Reference data: daily rate and lock period. Read-only to the profit run."""
    name: Indexed(str, unique=True)
    daily_percent: Money  # 3.00 means 3% per day
    lock_period_days: int
    refundable_principal: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "plans"
