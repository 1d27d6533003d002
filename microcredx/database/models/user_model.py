from beanie import Document
from pydantic import Field
from pymongo import IndexModel, ASCENDING
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class RoleEnum(str, Enum):
    borrower = "borrower"
    manager = "manager"
    admin = "admin"


class User(Document):
    name: Optional[str] = Field(None, description="Display name of the user")
    email: str = Field(..., description="Email address of the user, stored as supplied")
    role: RoleEnum = Field(default=RoleEnum.borrower, description="Marketplace role of the user")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), alias="createdAt")

    class Settings:
        name = "user"
        indexes = [
            IndexModel([("email", ASCENDING)], name="unique_user_email", unique=True),
        ]

    class Config:
        populate_by_name = True
        json_encoders = {datetime: lambda v: v.isoformat()}
