"""Pydantic models for authentication."""

from __future__ import annotations

import re
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.features.users.models import UserRole

_SYMBOL = re.compile(r"[^A-Za-z0-9]")


def check_password_strength(password: str) -> str:
    """8+ chars with lower, upper, digit and symbol."""
    if (
        len(password) < 8
        or not re.search(r"[a-z]", password)
        or not re.search(r"[A-Z]", password)
        or not re.search(r"[0-9]", password)
        or not _SYMBOL.search(password)
    ):
        raise ValueError("Password is not strong enough")
    return password


class RegisterRequest(BaseModel):
    """User registration request."""
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=3, max_length=20)
    email_id: EmailStr = Field(alias="emailId")
    password: str = Field(max_length=100)
    age: Optional[int] = Field(default=None, ge=6, le=80)

    @field_validator("password")
    @classmethod
    def _strong(cls, value: str) -> str:
        return check_password_strength(value)


class AdminRegisterRequest(RegisterRequest):
    role: UserRole


class LoginRequest(BaseModel):
    """Credentials supplied for user authentication."""
    model_config = ConfigDict(populate_by_name=True)

    email_id: str = Field(alias="emailId", min_length=1)
    password: str = Field(min_length=1)


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    name: str
    email_id: str = Field(alias="emailId")
    role: UserRole


class ProfileOut(UserOut):
    age: Optional[int] = None
    problems_solved: List[int] = Field(default_factory=list, alias="problemSolved")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")


class AuthResponse(BaseModel):
    user: UserOut
    message: str


class ProfileResponse(BaseModel):
    data: ProfileOut


class MessageResponse(BaseModel):
    message: str
