"""
SQLAlchemy 2.0 Models for EduNexus.

Uses modern declarative syntax with Mapped[] type annotations.
Keys are opaque strings, timestamps are epoch milliseconds. Mutable records
carry a ``version`` counter bumped on every update.
"""

from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import JSON, BigInteger, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from edunexus.db.base import Base, new_id, now_ms


# =============================================================================
# ENUMS
# =============================================================================


class UserRole(str, PyEnum):
    """Account role, highest privilege first."""

    FOUNDER = "FOUNDER"
    ADMIN = "ADMIN"
    TEACHER = "TEACHER"
    STUDENT = "STUDENT"
    GUEST = "GUEST"


STAFF_ROLES = frozenset({UserRole.FOUNDER.value, UserRole.ADMIN.value})


class SubscriptionPlan(str, PyEnum):
    FREE = "FREE"
    PRO = "PRO"
    ENTERPRISE = "ENTERPRISE"


class GroupType(str, PyEnum):
    """Group visibility."""

    PUBLIC = "PUBLIC"
    PRIVATE = "PRIVATE"


class TicketStatus(str, PyEnum):
    OPEN = "OPEN"
    RESOLVED = "RESOLVED"


# Reserved author identity for AI-written messages
AI_TEACHER_ID = "AI_TEACHER"
AI_TEACHER_NAME = "Prof. Nexus"

SETTINGS_KEY = "global"


# =============================================================================
# MODELS
# =============================================================================


class Account(Base):
    """
    User account.

    ``username`` is the unique secondary key used for login. ``password_hash``
    is optional: accounts created without a password log in by username alone.
    """

    __tablename__ = "accounts"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: new_id("u"))
    username: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    email: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=UserRole.STUDENT.value)
    is_blocked: Mapped[bool] = mapped_column(nullable=False, default=False)
    subscription: Mapped[str] = mapped_column(
        String(16), nullable=False, default=SubscriptionPlan.FREE.value
    )
    subscription_expiry: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    password_hash: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_ms)
    last_login: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES


class Group(Base):
    """
    Chat room.

    ``members`` is a JSON list of account ids kept free of duplicates.
    PRIVATE groups are only visible to members and carry an invite code.
    """

    __tablename__ = "groups"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: new_id("g"))
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    type: Mapped[str] = mapped_column(String(16), nullable=False, default=GroupType.PUBLIC.value)
    is_ai_enabled: Mapped[bool] = mapped_column(nullable=False, default=False)
    members: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    created_by: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_ms)
    invite_code: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    def is_visible_to(self, account_id: str) -> bool:
        return self.type == GroupType.PUBLIC.value or account_id in self.members


class Message(Base):
    """
    Chat message in a group.

    ``seq`` is the store's insertion sequence and breaks ties between equal
    timestamps; ``id`` is the public key. ``group_id`` is a plain reference
    (the per-account AI lab has no group row).
    """

    __tablename__ = "messages"
    __table_args__ = (Index("idx_messages_group_id", "group_id"),)

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(
        String(64), unique=True, nullable=False, default=lambda: new_id("msg")
    )
    group_id: Mapped[str] = mapped_column(String(128), nullable=False)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    user_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_ms)
    is_ai: Mapped[bool] = mapped_column(nullable=False, default=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    # Relationships
    attachments: Mapped[list["Attachment"]] = relationship(
        "Attachment",
        back_populates="message",
        cascade="all, delete-orphan",
        order_by="Attachment.position",
    )


class Attachment(Base):
    """File attached to a message, stored inline as base64."""

    __tablename__ = "attachments"
    __table_args__ = (Index("idx_attachments_message_id", "message_id"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: new_id("att"))
    message_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("messages.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(128), nullable=False)  # MIME type
    size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    data: Mapped[str] = mapped_column(Text, nullable=False)  # base64

    # Relationships
    message: Mapped["Message"] = relationship("Message", back_populates="attachments")


class SystemSettings(Base):
    """Platform-wide feature toggles. Exactly one row, keyed ``global``."""

    __tablename__ = "system_settings"

    id: Mapped[str] = mapped_column(String(16), primary_key=True, default=SETTINGS_KEY)
    maintenance_mode: Mapped[bool] = mapped_column(nullable=False, default=False)
    enable_ai_teacher: Mapped[bool] = mapped_column(nullable=False, default=True)
    enable_file_uploads: Mapped[bool] = mapped_column(nullable=False, default=True)
    enable_youtube_analysis: Mapped[bool] = mapped_column(nullable=False, default=True)
    enable_chat: Mapped[bool] = mapped_column(nullable=False, default=True)
    enable_ads: Mapped[bool] = mapped_column(nullable=False, default=True)
    enable_payments: Mapped[bool] = mapped_column(nullable=False, default=True)
    system_announcement: Mapped[str] = mapped_column(Text, nullable=False, default="")
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)


class SupportTicket(Base):
    """Support desk request, answered by staff."""

    __tablename__ = "tickets"
    __table_args__ = (Index("idx_tickets_user_id", "user_id"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: new_id("req"))
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    user_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    email: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    subject: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=TicketStatus.OPEN.value)
    admin_reply: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_ms)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
