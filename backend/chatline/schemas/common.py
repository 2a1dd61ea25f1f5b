from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for every wire model: snake_case in Python, camelCase in JSON."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class CamelRequest(CamelModel):
    model_config = ConfigDict(extra='forbid')


class StatusResponse(BaseModel):
    """Response for update/delete operations."""
    model_config = ConfigDict(extra='forbid')
    status: str
