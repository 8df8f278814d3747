# lockbox/services/envelopes.py
"""
Envelope records for secret-bearing entities.

An envelope row is created together with the record it protects and is
replaced as a whole on rotation; ciphertext, key and iv never change alone.
"""
from typing import Optional

from lockbox.models import EncryptedData
from lockbox.security import crypto


def envelope_record(
    ciphertext: Optional[str],
    encryption_key: Optional[str],
    iv: Optional[str],
    plaintext: Optional[str] = None,
) -> EncryptedData:
    """
    Build the envelope row from a validated payload.

    Raises:
        EncryptionError: If plaintext was supplied and sealing fails.
    """
    if plaintext is not None:
        sealed = crypto.seal(plaintext)
        return EncryptedData(
            encrypted_value=sealed.ciphertext,
            encryption_key=sealed.encryption_key,
            iv=sealed.iv,
        )
    return EncryptedData(encrypted_value=ciphertext, encryption_key=encryption_key, iv=iv)


def copy_envelope(envelope: EncryptedData) -> EncryptedData:
    # Envelopes are never shared between records
    return EncryptedData(
        encrypted_value=envelope.encrypted_value,
        encryption_key=envelope.encryption_key,
        iv=envelope.iv,
    )


def open_record(envelope: EncryptedData) -> str:
    return crypto.decrypt(envelope.encrypted_value, envelope.encryption_key, envelope.iv)
