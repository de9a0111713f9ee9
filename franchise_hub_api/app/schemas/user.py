"""
Pydantic models for user data.

``User`` is the stored record and carries the password hash.  The API
only ever returns ``UserRead``, which omits it.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class UserRole(str, Enum):
    BUSINESS = "BUSINESS"
    PARTNER = "PARTNER"


class UserBase(BaseModel):
    email: str = Field(..., examples=["owner@example.com"])
    first_name: str = Field(..., examples=["Ravi"])
    last_name: str = Field("", examples=["Kumar"])
    role: UserRole = Field(..., examples=["BUSINESS"])
    phone: Optional[str] = None
    company: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    avatar: Optional[str] = None


class User(UserBase):
    """Stored user record."""

    id: str
    created_at: datetime
    updated_at: datetime
    is_active: bool = True
    last_login_at: Optional[datetime] = None
    password_hash: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class UserRead(UserBase):
    """Schema for reading a user from the API."""

    id: str
    created_at: datetime
    updated_at: datetime
    is_active: bool
    last_login_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True,
    }


class UserCreate(UserBase):
    password: str = Field(..., min_length=6, examples=["strongpassword"])


class UserLogin(BaseModel):
    email: str = Field(..., examples=["business@demo.com"])
    password: str = Field(..., examples=["password123"])


class ProfileUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    avatar: Optional[str] = None


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserRead
