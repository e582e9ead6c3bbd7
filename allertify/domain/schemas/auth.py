"""Pydantic schemas for User and Auth."""

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from allertify.domain.schemas.common import CamelModel


class UserCreate(CamelModel):
    full_name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    phone_number: Optional[str] = None
    password: str = Field(min_length=8)


class UserRead(CamelModel):
    id: int
    full_name: str
    email: str
    phone_number: Optional[str] = None
    role: str
    is_verified: bool
    created_at: Optional[datetime] = None


class LoginRequest(CamelModel):
    email: str
    password: str


class TokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    user: UserRead
