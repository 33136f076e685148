"""Support ticket schemas."""

from pydantic import Field

from edunexus.schemas.base import BaseSchema, VersionMixin


class TicketCreate(BaseSchema):
    """Schema for opening a ticket."""

    subject: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1, max_length=10000)


class TicketRead(BaseSchema, VersionMixin):
    """Schema for reading ticket data."""

    id: str
    user_id: str
    user_name: str
    email: str
    subject: str
    message: str
    status: str
    admin_reply: str | None = None
    timestamp: int


class TicketResolve(BaseSchema):
    """Staff answer that closes a ticket."""

    reply: str = Field(..., min_length=1, max_length=10000)
