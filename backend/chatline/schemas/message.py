from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from chatline.schemas.common import CamelModel, CamelRequest
from chatline.security.sanitizer import InputSanitizer


class MessageCreate(CamelRequest):
    sender_id: int = Field(..., ge=1)
    chat_id: str = Field(..., min_length=1, max_length=64)
    content: str = Field(..., min_length=1, max_length=50000)
    content_type: str = Field(default='text', max_length=32)

    @field_validator('content')
    @classmethod
    def validate_content(cls, v: str) -> str:
        if not v.strip():
            raise ValueError('Content cannot be empty')
        return InputSanitizer.sanitize_content(v)


class MessageOut(CamelModel):
    id: int
    sender_id: int
    chat_id: str
    content: str
    content_type: str
    timestamp: datetime
    is_read: bool
    is_deleted: bool


class MessageReadUpdate(CamelRequest):
    is_read: bool = True
