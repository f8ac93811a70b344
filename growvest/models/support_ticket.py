from datetime import datetime
from typing import Literal

from beanie import Document, PydanticObjectId
from pydantic import BaseModel, Field

TicketStatus = Literal["open", "in_progress", "resolved", "closed"]


class AdminReply(BaseModel):
    admin_id: PydanticObjectId
    reply: str
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class SupportTicket(Document):
    user_id: PydanticObjectId
    subject: str
    message: str
    status: TicketStatus = "open"
    admin_replies: list[AdminReply] = Field(default_factory=list)  # append-only
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "support_tickets"
        indexes = [
            [("user_id", 1), ("created_at", -1)],
            [("status", 1)],
        ]
