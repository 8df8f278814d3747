# lockbox/db/base.py
"""
SQLAlchemy declarative base and re-exports of the session components.

This module defines the Base class for all ORM models and re-exports
engine, session factory and get_db from db/session.py.
"""
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Usage:
        class Container(Base):
            __tablename__ = "containers"
            id = Column(String(36), primary_key=True)
            ...
    """
    pass


def new_id() -> str:
    """Primary keys are UUID strings generated on the client side."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive datetimes are taken as UTC; aware ones are converted to it."""
    if value is None:
        return value
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware datetime stored as UTC on every backend.

    SQLite keeps no offset, so values are converted to UTC before binding
    and UTC is attached again on load.
    """
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return as_utc(value)

    def process_result_value(self, value, dialect):
        return as_utc(value)


from lockbox.db.session import (  # noqa: E402
    engine,
    AsyncSessionLocal,
    get_db,
)

__all__ = [
    "Base",
    "new_id",
    "utcnow",
    "as_utc",
    "UTCDateTime",
    "engine",
    "AsyncSessionLocal",
    "get_db",
]
