# lockbox/models/credential.py
import enum

from sqlalchemy import Boolean, Column, String, Text, Enum, ForeignKey, Table
from sqlalchemy.orm import relationship

from lockbox.db.base import Base, UTCDateTime, new_id, utcnow


class AccountStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"
    DELETED = "DELETED"


credential_tags = Table(
    "credential_tags",
    Base.metadata,
    Column("credential_id", String(36), ForeignKey("credentials.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", String(36), ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class Credential(Base):
    __tablename__ = "credentials"

    id = Column(String(36), primary_key=True, default=new_id)
    username = Column(String(255), nullable=False)
    status = Column(Enum(AccountStatus, name="account_status"), default=AccountStatus.ACTIVE, nullable=False)
    description = Column(Text, nullable=True)
    login_url = Column(String(500), nullable=True)
    last_viewed = Column(UTCDateTime(), nullable=True)

    # --- PROTECTED VALUE ---
    password_encryption_id = Column(
        String(36), ForeignKey("encrypted_data.id"), unique=True, nullable=False
    )
    password_encryption = relationship(
        "EncryptedData",
        cascade="all, delete-orphan",
        single_parent=True,
        lazy="joined",
    )

    platform_id = Column(String(36), ForeignKey("platforms.id"), nullable=False, index=True)
    container_id = Column(String(36), ForeignKey("containers.id", ondelete="SET NULL"), nullable=True, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    tags = relationship("Tag", secondary=credential_tags, lazy="selectin")

    credential_metadata = relationship(
        "CredentialMetadata",
        uselist=False,
        cascade="all, delete-orphan",
        back_populates="credential",
    )
    # Removed only together with the credential itself
    history = relationship(
        "CredentialHistory",
        cascade="all, delete-orphan",
        order_by="CredentialHistory.changed_at",
    )

    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime(), default=utcnow, nullable=False)


class CredentialMetadata(Base):
    __tablename__ = "credential_metadata"

    id = Column(String(36), primary_key=True, default=new_id)
    recovery_email = Column(String(255), nullable=True)
    account_id = Column(String(255), nullable=True)
    iban = Column(String(64), nullable=True)
    bank_name = Column(String(255), nullable=True)
    other_info = Column(Text, nullable=True)
    has_2fa = Column(Boolean, default=False, nullable=False)

    credential_id = Column(
        String(36), ForeignKey("credentials.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    credential = relationship("Credential", back_populates="credential_metadata")


class CredentialHistory(Base):
    """Append-only record of one password rotation."""
    __tablename__ = "credential_history"

    id = Column(String(36), primary_key=True, default=new_id)

    old_password_encryption_id = Column(String(36), ForeignKey("encrypted_data.id"), nullable=False)
    new_password_encryption_id = Column(String(36), ForeignKey("encrypted_data.id"), nullable=False)
    old_password_encryption = relationship(
        "EncryptedData",
        foreign_keys=[old_password_encryption_id],
        cascade="all, delete-orphan",
        single_parent=True,
        lazy="joined",
    )
    new_password_encryption = relationship(
        "EncryptedData",
        foreign_keys=[new_password_encryption_id],
        cascade="all, delete-orphan",
        single_parent=True,
        lazy="joined",
    )

    changed_at = Column(UTCDateTime(), default=utcnow, nullable=False)

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    credential_id = Column(
        String(36), ForeignKey("credentials.id", ondelete="CASCADE"), nullable=False, index=True
    )
