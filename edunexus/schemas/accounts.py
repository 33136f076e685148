"""Account schemas."""

from typing import Literal

from edunexus.schemas.base import BaseSchema, VersionMixin


class AccountRead(BaseSchema, VersionMixin):
    """Schema for reading account data. Never exposes the password hash."""

    id: str
    username: str
    full_name: str
    email: str
    role: str
    is_blocked: bool
    subscription: str
    subscription_expiry: int | None = None
    created_at: int
    last_login: int


class SubscriptionUpdate(BaseSchema):
    """Schema for changing one's own plan."""

    plan: Literal["FREE", "PRO", "ENTERPRISE"]
