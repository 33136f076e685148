"""Pydantic schemas for API request/response validation."""

from edunexus.schemas.accounts import AccountRead, SubscriptionUpdate
from edunexus.schemas.auth import LoginRequest, RegisterRequest, TokenResponse
from edunexus.schemas.groups import GroupCreate, GroupJoinRequest, GroupRead
from edunexus.schemas.messages import (
    AttachmentRead,
    AttachmentUpload,
    MessageCreate,
    MessagePage,
    MessageRead,
)
from edunexus.schemas.settings import SettingsToggle, SystemSettingsRead, SystemSettingsUpdate
from edunexus.schemas.tickets import TicketCreate, TicketRead, TicketResolve

__all__ = [
    # Accounts
    "AccountRead",
    "SubscriptionUpdate",
    # Auth
    "LoginRequest",
    "RegisterRequest",
    "TokenResponse",
    # Groups
    "GroupCreate",
    "GroupJoinRequest",
    "GroupRead",
    # Messages
    "AttachmentRead",
    "AttachmentUpload",
    "MessageCreate",
    "MessagePage",
    "MessageRead",
    # Settings
    "SettingsToggle",
    "SystemSettingsRead",
    "SystemSettingsUpdate",
    # Tickets
    "TicketCreate",
    "TicketRead",
    "TicketResolve",
]
