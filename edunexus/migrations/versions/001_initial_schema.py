"""Initial schema with all collections and seed data.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18

This migration creates the complete EduNexus store:
- Tables: accounts, groups, messages, attachments, system_settings, tickets
- Indexes: unique username lookup, group-scoped message lookup
- Seed: founder and admin accounts, the global settings record
"""

import time
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from edunexus.db.seed import DEFAULT_ACCOUNTS, DEFAULT_SETTINGS

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ==========================================================================
    # ACCOUNTS TABLE
    # ==========================================================================
    accounts = op.create_table(
        "accounts",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("username", sa.String(64), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("role", sa.String(16), nullable=False),
        sa.Column("is_blocked", sa.Boolean(), nullable=False),
        sa.Column("subscription", sa.String(16), nullable=False),
        sa.Column("subscription_expiry", sa.BigInteger(), nullable=True),
        sa.Column("password_hash", sa.String(255), nullable=True),
        sa.Column("created_at", sa.BigInteger(), nullable=False),
        sa.Column("last_login", sa.BigInteger(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_accounts_username", "accounts", ["username"], unique=True)

    # ==========================================================================
    # GROUPS TABLE
    # ==========================================================================
    op.create_table(
        "groups",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("type", sa.String(16), nullable=False),
        sa.Column("is_ai_enabled", sa.Boolean(), nullable=False),
        sa.Column("members", sa.JSON(), nullable=False),
        sa.Column("created_by", sa.String(64), nullable=False),
        sa.Column("created_at", sa.BigInteger(), nullable=False),
        sa.Column("invite_code", sa.String(32), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    # ==========================================================================
    # MESSAGES + ATTACHMENTS TABLES
    # ==========================================================================
    op.create_table(
        "messages",
        sa.Column("seq", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("group_id", sa.String(128), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("user_name", sa.String(255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("timestamp", sa.BigInteger(), nullable=False),
        sa.Column("is_ai", sa.Boolean(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("seq"),
        sa.UniqueConstraint("id"),
    )
    op.create_index("idx_messages_group_id", "messages", ["group_id"])

    op.create_table(
        "attachments",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("message_id", sa.String(64), sa.ForeignKey("messages.id", ondelete="CASCADE"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("type", sa.String(128), nullable=False),
        sa.Column("size", sa.BigInteger(), nullable=False),
        sa.Column("data", sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_attachments_message_id", "attachments", ["message_id"])

    # ==========================================================================
    # SYSTEM SETTINGS TABLE
    # ==========================================================================
    system_settings = op.create_table(
        "system_settings",
        sa.Column("id", sa.String(16), nullable=False),
        sa.Column("maintenance_mode", sa.Boolean(), nullable=False),
        sa.Column("enable_ai_teacher", sa.Boolean(), nullable=False),
        sa.Column("enable_file_uploads", sa.Boolean(), nullable=False),
        sa.Column("enable_youtube_analysis", sa.Boolean(), nullable=False),
        sa.Column("enable_chat", sa.Boolean(), nullable=False),
        sa.Column("enable_ads", sa.Boolean(), nullable=False),
        sa.Column("enable_payments", sa.Boolean(), nullable=False),
        sa.Column("system_announcement", sa.Text(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    # ==========================================================================
    # TICKETS TABLE
    # ==========================================================================
    op.create_table(
        "tickets",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("user_name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("subject", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("admin_reply", sa.Text(), nullable=True),
        sa.Column("timestamp", sa.BigInteger(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_tickets_user_id", "tickets", ["user_id"])

    # ==========================================================================
    # SEED DATA
    # ==========================================================================
    created_at = time.time_ns() // 1_000_000
    op.bulk_insert(
        accounts,
        [
            {**account, "created_at": created_at, "subscription_expiry": None, "password_hash": None}
            for account in DEFAULT_ACCOUNTS
        ],
    )
    op.bulk_insert(system_settings, [DEFAULT_SETTINGS])


def downgrade() -> None:
    op.drop_table("tickets")
    op.drop_table("system_settings")
    op.drop_index("idx_attachments_message_id", table_name="attachments")
    op.drop_table("attachments")
    op.drop_index("idx_messages_group_id", table_name="messages")
    op.drop_table("messages")
    op.drop_table("groups")
    op.drop_index("ix_accounts_username", table_name="accounts")
    op.drop_table("accounts")
