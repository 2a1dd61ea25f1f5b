from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from chatline.schemas.common import CamelModel, CamelRequest
from chatline.security.sanitizer import InputSanitizer


class StatusCreate(CamelRequest):
    user_id: int = Field(..., ge=1)
    content: str = Field(..., min_length=1)
    content_type: str = Field(default='image', max_length=32)
    caption: Optional[str] = Field(default=None, max_length=500)

    @field_validator('caption')
    @classmethod
    def validate_caption(cls, v: Optional[str]) -> Optional[str]:
        return InputSanitizer.sanitize_line(v, max_length=500) if v is not None else v


class StatusOut(CamelModel):
    id: int
    user_id: int
    content: str
    content_type: str
    caption: Optional[str] = None
    created_at: datetime
    expires_at: Optional[datetime] = None


class StatusViewCreate(CamelRequest):
    viewer_id: int = Field(..., ge=1)


class StatusViewOut(CamelModel):
    id: int
    status_id: int
    viewer_id: int
    viewed_at: datetime
