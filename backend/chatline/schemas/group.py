from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from chatline.schemas.common import CamelModel, CamelRequest
from chatline.security.sanitizer import InputSanitizer


class GroupCreate(CamelRequest):
    name: str = Field(..., min_length=1, max_length=128)
    description: Optional[str] = Field(default=None, max_length=1000)
    creator_id: int = Field(..., ge=1)
    profile_picture: Optional[str] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = InputSanitizer.sanitize_line(v, max_length=128)
        if not v:
            raise ValueError('Group name cannot be empty')
        return v

    @field_validator('description')
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        return InputSanitizer.sanitize_content(v, max_length=1000) if v is not None else v


class GroupOut(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    creator_id: int
    profile_picture: Optional[str] = None
    created_at: datetime


class MemberAdd(CamelRequest):
    user_id: int = Field(..., ge=1)
    is_admin: bool = False
    can_write: bool = True


class MemberUpdate(CamelRequest):
    is_admin: Optional[bool] = None
    can_write: Optional[bool] = None


class MemberOut(CamelModel):
    id: int
    group_id: int
    user_id: int
    is_admin: bool
    can_write: bool
    joined_at: datetime


class GroupDetailOut(GroupOut):
    members: List[MemberOut] = []
