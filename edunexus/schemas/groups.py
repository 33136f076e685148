"""Group schemas."""

from typing import Literal

from pydantic import Field

from edunexus.schemas.base import BaseSchema, VersionMixin


class GroupCreate(BaseSchema):
    """Schema for creating a group."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field("", max_length=2000)
    type: Literal["PUBLIC", "PRIVATE"] = "PUBLIC"
    is_ai_enabled: bool = False


class GroupRead(BaseSchema, VersionMixin):
    """Schema for reading group data."""

    id: str
    name: str
    description: str
    type: str
    is_ai_enabled: bool
    members: list[str]
    created_by: str
    created_at: int
    invite_code: str | None = None


class GroupJoinRequest(BaseSchema):
    """Join a private group with its invite code."""

    invite_code: str = Field(..., min_length=1, max_length=32)
