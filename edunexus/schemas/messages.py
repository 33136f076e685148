"""Chat message schemas."""

import base64
import binascii

from pydantic import BaseModel, Field, field_validator, model_validator

from edunexus.config import get_settings
from edunexus.schemas.base import BaseSchema, VersionMixin
from edunexus.services.tutor import AiIntent


class AttachmentUpload(BaseModel):
    """Inline base64 file sent with a message."""

    name: str = Field(..., min_length=1, max_length=255)
    type: str = Field(..., min_length=1, max_length=128)
    data: str = Field(..., min_length=1)

    @field_validator("data")
    @classmethod
    def validate_data(cls, v: str) -> str:
        try:
            raw = base64.b64decode(v, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError("attachment data must be base64") from e
        if len(raw) > get_settings().max_attachment_size_bytes:
            raise ValueError("attachment exceeds the maximum size")
        return v

    @property
    def size(self) -> int:
        return len(base64.b64decode(self.data))


class AttachmentRead(BaseSchema):
    id: str
    name: str
    type: str
    size: int
    data: str


class MessageCreate(BaseModel):
    """Request to post into a room."""

    content: str = Field("", max_length=20000)
    intent: AiIntent | None = None
    attachment: AttachmentUpload | None = None

    @model_validator(mode="after")
    def require_something(self) -> "MessageCreate":
        if not self.content.strip() and self.attachment is None and self.intent is None:
            raise ValueError("message needs content, an intent or an attachment")
        return self


class MessageRead(BaseSchema, VersionMixin):
    """Schema for reading a stored message."""

    seq: int
    id: str
    group_id: str
    user_id: str
    user_name: str
    content: str
    timestamp: int
    is_ai: bool
    attachments: list[AttachmentRead] = []


class MessagePage(BaseModel):
    """A page of messages plus the cursor to continue from."""

    messages: list[MessageRead]
    next_cursor: int | None = Field(None, description="Pass as ``after`` to fetch newer messages")
