"""Compiled-in defaults and the rows seeded by the initial migration."""

from edunexus.db.models import SETTINGS_KEY, SubscriptionPlan, SystemSettings, UserRole

DEFAULT_SETTINGS: dict = {
    "id": SETTINGS_KEY,
    "maintenance_mode": False,
    "enable_ai_teacher": True,
    "enable_file_uploads": True,
    "enable_youtube_analysis": True,
    "enable_chat": True,
    "enable_ads": True,
    "enable_payments": True,
    "system_announcement": "Welcome to EduNexus AI V2.0",
    "version": 1,
}

DEFAULT_ACCOUNTS: list[dict] = [
    {
        "id": "founder_001",
        "username": "founder",
        "full_name": "Platform Founder",
        "email": "founder@edunexus.ai",
        "role": UserRole.FOUNDER.value,
        "subscription": SubscriptionPlan.ENTERPRISE.value,
        "is_blocked": False,
        "last_login": 0,
        "version": 1,
    },
    {
        "id": "admin_001",
        "username": "admin",
        "full_name": "System Admin",
        "email": "admin@edunexus.ai",
        "role": UserRole.ADMIN.value,
        "subscription": SubscriptionPlan.ENTERPRISE.value,
        "is_blocked": False,
        "last_login": 0,
        "version": 1,
    },
]


def default_settings() -> SystemSettings:
    """Transient (never persisted) settings record with compiled-in values."""
    return SystemSettings(**DEFAULT_SETTINGS)
