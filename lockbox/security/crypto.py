# lockbox/security/crypto.py
"""
Crypto envelope: one-time AES-256-GCM key per protected value.

Envelope = (ciphertext, exported key, iv), all base64 text so they can be
stored in plain columns and returned in read objects.

Security Note:
    Never log plaintext, ciphertext or key material.
    A fresh random 96-bit IV is drawn on every encrypt call.
"""
import base64
import binascii
import secrets
from dataclasses import dataclass

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from lockbox.core.errors import EncryptionError

KEY_LENGTH = 32  # AES-256
NONCE_SIZE = 12  # 96-bit IV
TAG_SIZE = 16


@dataclass(frozen=True)
class EncryptedValue:
    ciphertext: str
    iv: str


@dataclass(frozen=True)
class Envelope:
    ciphertext: str
    encryption_key: str
    iv: str


def _b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _b64decode(text: str, what: str) -> bytes:
    try:
        return base64.b64decode(text.encode("ascii"), validate=True)
    except (binascii.Error, ValueError, UnicodeEncodeError) as e:
        raise EncryptionError(f"{what} is not valid base64") from e


def generate_key() -> bytes:
    """Generate a fresh 256-bit symmetric key."""
    return AESGCM.generate_key(bit_length=KEY_LENGTH * 8)


def export_key(key: bytes) -> str:
    """Serialize a key to the opaque string stored beside its ciphertext."""
    if not isinstance(key, bytes) or len(key) != KEY_LENGTH:
        raise EncryptionError(f"Encryption key must be {KEY_LENGTH} bytes")
    return _b64encode(key)


def import_key(exported: str) -> bytes:
    key = _b64decode(exported, "Encryption key")
    if len(key) != KEY_LENGTH:
        raise EncryptionError(f"Encryption key must be {KEY_LENGTH} bytes, got {len(key)}")
    return key


def encrypt(plaintext: str, key: bytes) -> EncryptedValue:
    """
    Encrypt plaintext with AES-256-GCM under a freshly drawn IV.

    Args:
        plaintext: Value to protect.
        key: Raw 32-byte key from generate_key().

    Returns:
        EncryptedValue with base64 ciphertext (including GCM tag) and base64 IV.

    Raises:
        EncryptionError: If the key is unusable or encryption fails.
    """
    nonce = secrets.token_bytes(NONCE_SIZE)
    try:
        ciphertext = AESGCM(key).encrypt(nonce, plaintext.encode("utf-8"), None)
    except (ValueError, TypeError, AttributeError) as e:
        raise EncryptionError("Failed to encrypt value") from e
    return EncryptedValue(ciphertext=_b64encode(ciphertext), iv=_b64encode(nonce))


def decrypt(ciphertext: str, exported_key: str, iv: str) -> str:
    """
    Inverse of encrypt(), consuming the stored envelope fields.

    Raises:
        EncryptionError: On malformed fields, wrong key or tampered ciphertext.
    """
    key = import_key(exported_key)
    nonce = _b64decode(iv, "IV")
    if len(nonce) != NONCE_SIZE:
        raise EncryptionError(f"IV must be {NONCE_SIZE} bytes, got {len(nonce)}")
    data = _b64decode(ciphertext, "Ciphertext")
    if len(data) < TAG_SIZE:
        raise EncryptionError("Encrypted data too short")
    try:
        plaintext = AESGCM(key).decrypt(nonce, data, None)
        return plaintext.decode("utf-8")
    except (InvalidTag, UnicodeDecodeError) as e:
        raise EncryptionError("Failed to decrypt value") from e


def seal(plaintext: str) -> Envelope:
    """Generate a one-time key, encrypt plaintext with it and export the key."""
    key = generate_key()
    encrypted = encrypt(plaintext, key)
    return Envelope(
        ciphertext=encrypted.ciphertext,
        encryption_key=export_key(key),
        iv=encrypted.iv,
    )


def open_envelope(envelope: Envelope) -> str:
    return decrypt(envelope.ciphertext, envelope.encryption_key, envelope.iv)
