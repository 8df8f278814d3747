# lockbox/models/platform.py
import enum

from sqlalchemy import Column, String, Enum, ForeignKey

from lockbox.db.base import Base, UTCDateTime, new_id, utcnow


class PlatformStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class Platform(Base):
    __tablename__ = "platforms"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(100), nullable=False)
    logo = Column(String(500), nullable=True)
    login_url = Column(String(500), nullable=True)
    status = Column(
        Enum(PlatformStatus, name="platform_status"),
        default=PlatformStatus.PENDING,
        nullable=False,
    )

    # NULL → global platform shared by every user
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)

    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime(), default=utcnow, nullable=False)
