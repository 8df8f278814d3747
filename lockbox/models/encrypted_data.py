# lockbox/models/encrypted_data.py
from sqlalchemy import Column, String, Text

from lockbox.db.base import Base, UTCDateTime, new_id, utcnow


class EncryptedData(Base):
    """
    Encryption envelope: ciphertext + exported key + IV for one protected value.

    Each row is owned by exactly one Secret, Credential or history entry and
    is never updated in place; rotating a value means a new row.
    """
    __tablename__ = "encrypted_data"

    id = Column(String(36), primary_key=True, default=new_id)

    # base64 AES-GCM output (ciphertext + tag)
    encrypted_value = Column(Text, nullable=False)
    # base64 raw key as produced by export_key
    encryption_key = Column(Text, nullable=False)
    # base64 96-bit nonce
    iv = Column(String(64), nullable=False)

    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)
