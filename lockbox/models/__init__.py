from lockbox.models.user import User
from lockbox.models.encrypted_data import EncryptedData
from lockbox.models.platform import Platform, PlatformStatus
from lockbox.models.container import Container, ContainerType
from lockbox.models.tag import Tag
from lockbox.models.secret import Secret, SecretStatus, SecretType
from lockbox.models.credential import (
    AccountStatus,
    Credential,
    CredentialHistory,
    CredentialMetadata,
    credential_tags,
)

__all__ = [
    "User",
    "EncryptedData",
    "Platform",
    "PlatformStatus",
    "Container",
    "ContainerType",
    "Tag",
    "Secret",
    "SecretStatus",
    "SecretType",
    "AccountStatus",
    "Credential",
    "CredentialHistory",
    "CredentialMetadata",
    "credential_tags",
]
