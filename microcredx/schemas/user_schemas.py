from pydantic import BaseModel, Field
from typing import Optional


class UserRegister(BaseModel):
    email: str = Field(..., min_length=1, description="Email address of the user")
    name: Optional[str] = Field(None, description="Display name of the user")
    role: Optional[str] = Field(None, description="Initial role; borrower when omitted")


class RoleUpdate(BaseModel):
    role: str = Field(..., description="New role: borrower, manager or admin")


class RoleResponse(BaseModel):
    role: str
