"""System settings schemas."""

from typing import Literal

from pydantic import Field

from edunexus.schemas.base import BaseSchema, VersionMixin

SettingsToggle = Literal[
    "maintenance_mode",
    "enable_ai_teacher",
    "enable_file_uploads",
    "enable_youtube_analysis",
    "enable_chat",
    "enable_ads",
    "enable_payments",
]


class SystemSettingsRead(BaseSchema, VersionMixin):
    """Schema for reading the platform settings."""

    maintenance_mode: bool
    enable_ai_teacher: bool
    enable_file_uploads: bool
    enable_youtube_analysis: bool
    enable_chat: bool
    enable_ads: bool
    enable_payments: bool
    system_announcement: str
    is_default: bool = Field(False, description="True when no record is stored and defaults apply")


class SystemSettingsUpdate(BaseSchema):
    """Full replacement of the settings record."""

    maintenance_mode: bool
    enable_ai_teacher: bool
    enable_file_uploads: bool
    enable_youtube_analysis: bool
    enable_chat: bool
    enable_ads: bool
    enable_payments: bool
    system_announcement: str = Field("", max_length=2000)
    expected_version: int | None = Field(
        None, description="Reject the write if the stored version differs"
    )
