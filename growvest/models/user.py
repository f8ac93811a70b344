from datetime import datetime
from typing import Literal

from beanie import Document, Indexed, PydanticObjectId
from pydantic import Field


class User(Document):
    email: Indexed(str, unique=True)
    password_hash: str
    role: Literal["user", "admin"] = "user"
    is_suspended: bool = False
    referral_code: Indexed(str, unique=True)
    referred_by: PydanticObjectId | None = None
    session_version: int = 0
    last_login_at: datetime | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "users"
        indexes = [[("referred_by", 1)]]

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
