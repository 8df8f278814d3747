# lockbox/models/tag.py
from sqlalchemy import Column, String, ForeignKey

from lockbox.db.base import Base, UTCDateTime, new_id, utcnow


class Tag(Base):
    __tablename__ = "tags"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(50), nullable=False)
    color = Column(String(20), nullable=True)

    container_id = Column(String(36), ForeignKey("containers.id", ondelete="SET NULL"), nullable=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)

    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime(), default=utcnow, nullable=False)
