"""API routes package."""

from edunexus.api.routes import (
    accounts,
    admin,
    auth,
    groups,
    messages,
    settings,
    sync,
    tickets,
)

__all__ = [
    "accounts",
    "admin",
    "auth",
    "groups",
    "messages",
    "settings",
    "sync",
    "tickets",
]
