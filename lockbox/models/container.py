# lockbox/models/container.py
import enum

from sqlalchemy import Column, String, Text, Enum, ForeignKey

from lockbox.db.base import Base, UTCDateTime, new_id, utcnow


class ContainerType(str, enum.Enum):
    MIXED = "MIXED"
    SECRETS_ONLY = "SECRETS_ONLY"
    CREDENTIALS_ONLY = "CREDENTIALS_ONLY"


class Container(Base):
    """Grouping bucket for secrets and credentials ("Personal", "Work", ...)."""
    __tablename__ = "containers"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(100), nullable=False)
    icon = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(
        Enum(ContainerType, name="container_type"),
        default=ContainerType.MIXED,
        nullable=False,
    )

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime(), default=utcnow, nullable=False)
