# lockbox/models/user.py
from sqlalchemy import Column, String

from lockbox.db.base import Base, UTCDateTime, new_id, utcnow


class User(Base):
    """
    Owner of vault records.

    Accounts are managed by the authentication collaborator; the vault only
    needs a row every user_id foreign key can point at. Rows are created on
    a caller's first write.
    """
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String(255), unique=True, index=True, nullable=True)
    name = Column(String(100), nullable=True)

    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)
