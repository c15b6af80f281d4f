"""
Base schema classes with common fields and configurations.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "BaseSchema",
    "BaseResponseSchema",
]


class BaseSchema(BaseModel):
    """
    Base schema with common Pydantic configuration.

    All application-facing schemas inherit from this to get ORM loading
    and whitespace stripping.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        use_enum_values=False,
        str_strip_whitespace=True,
    )


class BaseResponseSchema(BaseSchema):
    """Response schema for persisted entities."""

    id: str = Field(..., description="Entity identifier")
    created_at: datetime = Field(..., description="Creation timestamp")
