"""
User API Schemas - User profiles

Profiles carry no credentials: callers identify themselves with the X-User-Id header.
"""

from datetime import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, Field, field_validator


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Display name")
    email: str = Field(..., description="Unique email address")
    role: Literal["user", "admin"] = Field("user", description="Access role")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip().lower()
        local, _, domain = v.partition("@")
        if not local or "." not in domain:
            raise ValueError("Invalid email address")
        return v


class User(BaseModel):
    id: str
    name: str
    email: str
    role: Literal["user", "admin"] = "user"
    created_at: Optional[datetime] = None


class UserSummary(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
