"""Declarative base and shared column helpers."""

import time
from uuid import uuid4

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all ORM models."""


_last_ms = 0


def now_ms() -> int:
    """
    Current time in epoch milliseconds, never going backwards in-process.

    Values are not unique: two calls in the same millisecond return the same
    number. Message ordering breaks ties on insertion sequence.
    """
    global _last_ms
    _last_ms = max(_last_ms, time.time_ns() // 1_000_000)
    return _last_ms


def new_id(prefix: str) -> str:
    """Opaque collection key, e.g. ``u_3f2a...``."""
    return f"{prefix}_{uuid4().hex}"
