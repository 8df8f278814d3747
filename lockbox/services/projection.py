# lockbox/services/projection.py
"""
Stored record → read object.

Pure, total mappings: scalar columns are copied verbatim, joined envelopes
are flattened into value/password + encryption_key + iv, and relationship
objects never leak into the read shape.
"""
from lockbox.models import (
    Container,
    Credential,
    CredentialHistory,
    CredentialMetadata,
    Platform,
    Secret,
    Tag,
)
from lockbox.schemas.container import ContainerRo
from lockbox.schemas.credential import CredentialHistoryRo, CredentialMetadataRo, CredentialRo
from lockbox.schemas.platform import PlatformRo
from lockbox.schemas.secret import SecretRo
from lockbox.schemas.tag import TagRo


def secret_ro(secret: Secret) -> SecretRo:
    envelope = secret.value_encryption
    return SecretRo(
        id=secret.id,
        name=secret.name,
        value=envelope.encrypted_value,
        encryption_key=envelope.encryption_key,
        iv=envelope.iv,
        description=secret.description,
        type=secret.type,
        status=secret.status,
        expires_at=secret.expires_at,
        platform_id=secret.platform_id,
        container_id=secret.container_id,
        user_id=secret.user_id,
        created_at=secret.created_at,
        updated_at=secret.updated_at,
    )


def credential_ro(credential: Credential) -> CredentialRo:
    envelope = credential.password_encryption
    return CredentialRo(
        id=credential.id,
        username=credential.username,
        password=envelope.encrypted_value,
        encryption_key=envelope.encryption_key,
        iv=envelope.iv,
        status=credential.status,
        description=credential.description,
        login_url=credential.login_url,
        last_viewed=credential.last_viewed,
        created_at=credential.created_at,
        updated_at=credential.updated_at,
        platform_id=credential.platform_id,
        user_id=credential.user_id,
        container_id=credential.container_id,
        tag_ids=sorted(tag.id for tag in credential.tags),
    )


def credential_metadata_ro(metadata: CredentialMetadata) -> CredentialMetadataRo:
    return CredentialMetadataRo(
        id=metadata.id,
        recovery_email=metadata.recovery_email,
        account_id=metadata.account_id,
        iban=metadata.iban,
        bank_name=metadata.bank_name,
        other_info=metadata.other_info,
        has_2fa=metadata.has_2fa,
        credential_id=metadata.credential_id,
    )


def credential_history_ro(entry: CredentialHistory) -> CredentialHistoryRo:
    old, new = entry.old_password_encryption, entry.new_password_encryption
    return CredentialHistoryRo(
        id=entry.id,
        old_password=old.encrypted_value,
        old_encryption_key=old.encryption_key,
        old_iv=old.iv,
        new_password=new.encrypted_value,
        new_encryption_key=new.encryption_key,
        new_iv=new.iv,
        changed_at=entry.changed_at,
        user_id=entry.user_id,
        credential_id=entry.credential_id,
    )


def container_ro(container: Container) -> ContainerRo:
    return ContainerRo(
        id=container.id,
        name=container.name,
        icon=container.icon,
        description=container.description,
        type=container.type,
        updated_at=container.updated_at,
        created_at=container.created_at,
        user_id=container.user_id,
    )


def platform_ro(platform: Platform) -> PlatformRo:
    return PlatformRo(
        id=platform.id,
        name=platform.name,
        status=platform.status,
        logo=platform.logo,
        login_url=platform.login_url,
        updated_at=platform.updated_at,
        created_at=platform.created_at,
        user_id=platform.user_id,
    )


def tag_ro(tag: Tag) -> TagRo:
    return TagRo(
        id=tag.id,
        name=tag.name,
        color=tag.color,
        user_id=tag.user_id,
        container_id=tag.container_id,
        created_at=tag.created_at,
        updated_at=tag.updated_at,
    )
