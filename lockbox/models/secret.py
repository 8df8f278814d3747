# lockbox/models/secret.py
import enum

from sqlalchemy import Column, String, Text, Enum, ForeignKey
from sqlalchemy.orm import relationship

from lockbox.db.base import Base, UTCDateTime, new_id, utcnow


class SecretType(str, enum.Enum):
    API_KEY = "API_KEY"
    ENV_VARIABLE = "ENV_VARIABLE"
    DATABASE_URL = "DATABASE_URL"
    CLOUD_STORAGE_KEY = "CLOUD_STORAGE_KEY"
    THIRD_PARTY_API_KEY = "THIRD_PARTY_API_KEY"


class SecretStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"
    REVOKED = "REVOKED"


class Secret(Base):
    __tablename__ = "secrets"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(Enum(SecretType, name="secret_type"), default=SecretType.API_KEY, nullable=False)
    status = Column(Enum(SecretStatus, name="secret_status"), default=SecretStatus.ACTIVE, nullable=False)
    expires_at = Column(UTCDateTime(), nullable=True)

    # --- PROTECTED VALUE (server stores the envelope only) ---
    value_encryption_id = Column(
        String(36), ForeignKey("encrypted_data.id"), unique=True, nullable=False
    )
    value_encryption = relationship(
        "EncryptedData",
        cascade="all, delete-orphan",
        single_parent=True,
        lazy="joined",
    )

    platform_id = Column(String(36), ForeignKey("platforms.id"), nullable=False, index=True)
    container_id = Column(String(36), ForeignKey("containers.id", ondelete="SET NULL"), nullable=True, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime(), default=utcnow, nullable=False)
