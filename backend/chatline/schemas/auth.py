from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from chatline.schemas.common import CamelModel, CamelRequest
from chatline.security.sanitizer import InputSanitizer


class RegisterIn(CamelRequest):
    """Registration request."""

    username: str = Field(min_length=3, max_length=64)
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    profile_picture: Optional[str] = None
    about: Optional[str] = Field(default=None, max_length=255)

    @field_validator('username')
    @classmethod
    def validate_username(cls, v: str) -> str:
        return InputSanitizer.sanitize_username(v)

    @field_validator('about')
    @classmethod
    def validate_about(cls, v: Optional[str]) -> Optional[str]:
        return InputSanitizer.sanitize_line(v) if v is not None else v


class LoginIn(CamelRequest):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)

    @field_validator('password')
    @classmethod
    def validate_password_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError('Password cannot be empty')
        return v


class UserUpdate(CamelRequest):
    """Partial profile update; unset fields are left alone."""

    username: Optional[str] = Field(default=None, min_length=3, max_length=64)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, min_length=8, max_length=128)
    profile_picture: Optional[str] = None
    about: Optional[str] = Field(default=None, max_length=255)

    @field_validator('username')
    @classmethod
    def validate_username(cls, v: Optional[str]) -> Optional[str]:
        return InputSanitizer.sanitize_username(v) if v is not None else v

    @field_validator('about')
    @classmethod
    def validate_about(cls, v: Optional[str]) -> Optional[str]:
        return InputSanitizer.sanitize_line(v) if v is not None else v


class UserOut(CamelModel):
    """Public user view (never carries the password hash)."""

    id: int
    username: str
    email: str
    profile_picture: Optional[str] = None
    about: Optional[str] = None
    created_at: datetime
