# lockbox/services/credential.py
"""
Credential vault operations, including the credential + metadata composite,
password rotation history and owner-scoped password reveal.
"""
import logging
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from lockbox.core.config import settings
from lockbox.core.errors import Failure, Issue, not_found, validation_failed
from lockbox.db.base import utcnow
from lockbox.models import Credential, CredentialHistory, CredentialMetadata
from lockbox.schemas.common import OperationResult
from lockbox.schemas.credential import (
    CredentialCreate,
    CredentialHistoryResult,
    CredentialListQuery,
    CredentialListResult,
    CredentialMetadataCreate,
    CredentialMetadataResult,
    CredentialResult,
    CredentialUpdate,
    CredentialWithMetadataResult,
)
from lockbox.schemas.secret import RevealResult
from lockbox.schemas.user import Caller
from lockbox.services.envelopes import copy_envelope, envelope_record, open_record
from lockbox.services.guard import ensure_owner, require_caller
from lockbox.services.operation import PageArg, page_query, parse_payload, vault_operation
from lockbox.services.projection import (
    credential_history_ro,
    credential_metadata_ro,
    credential_ro,
)
from lockbox.services.queries import check_references, fetch_page, find_owned, find_owned_tags

logger = logging.getLogger(__name__)

Payload = Union[Mapping[str, Any], BaseModel]

ENVELOPE_FIELDS = {"password", "encryption_key", "iv", "plaintext_password"}


async def _resolve_tags(db: AsyncSession, tag_ids, user_id: str):
    """The caller's tags for tag_ids, or NotFound if any is missing or foreign."""
    tags = await find_owned_tags(db, tag_ids, user_id)
    if len(tags) != len(set(tag_ids)):
        return not_found("Tag")
    return tags


async def _build_credential(
    db: AsyncSession,
    caller: Caller,
    data: CredentialCreate,
) -> Union[Credential, Failure]:
    failure = await check_references(db, caller.id, data.platform_id, data.container_id)
    if failure:
        return failure

    tags = await _resolve_tags(db, data.tag_ids, caller.id)
    if isinstance(tags, Failure):
        return tags

    credential = Credential(
        username=data.username,
        password_encryption=envelope_record(
            data.password, data.encryption_key, data.iv, data.plaintext_password
        ),
        status=data.status,
        description=data.description,
        login_url=data.login_url,
        platform_id=data.platform_id,
        user_id=caller.id,
        tags=tags,
    )
    if data.container_id is not None:
        credential.container_id = data.container_id

    await ensure_owner(db, caller)
    return credential


@vault_operation(CredentialResult, "Credential creation")
async def create_credential(db: AsyncSession, caller: Optional[Caller], payload: Payload) -> CredentialResult:
    caller = require_caller(caller)
    if isinstance(caller, Failure):
        return CredentialResult.fail(caller)

    data = parse_payload(CredentialCreate, payload)
    if isinstance(data, Failure):
        return CredentialResult.fail(data)

    credential = await _build_credential(db, caller, data)
    if isinstance(credential, Failure):
        return CredentialResult.fail(credential)

    db.add(credential)
    await db.commit()
    logger.info("Credential %s created for user %s", credential.id, caller.id)
    return CredentialResult.ok(credential=credential_ro(credential))


@vault_operation(CredentialWithMetadataResult, "Credential creation")
async def create_credential_with_metadata(
    db: AsyncSession,
    caller: Optional[Caller],
    credential_payload: Payload,
    metadata_payload: Optional[Payload] = None,
) -> CredentialWithMetadataResult:
    """
    Create a credential, then its metadata when supplied.

    The two inserts depend on each other (metadata needs the credential id)
    and are committed together.
    """
    caller = require_caller(caller)
    if isinstance(caller, Failure):
        return CredentialWithMetadataResult.fail(caller)

    data = parse_payload(CredentialCreate, credential_payload)
    metadata = None
    if metadata_payload is not None:
        metadata = parse_payload(CredentialMetadataCreate, metadata_payload)

    issues = list(data.issues) if isinstance(data, Failure) else []
    if isinstance(metadata, Failure):
        issues.extend(Issue(path=("metadata",) + i.path, message=i.message) for i in metadata.issues)
    if issues:
        return CredentialWithMetadataResult.fail(validation_failed(issues))

    credential = await _build_credential(db, caller, data)
    if isinstance(credential, Failure):
        return CredentialWithMetadataResult.fail(credential)

    db.add(credential)
    await db.flush()

    metadata_record = None
    if metadata is not None:
        metadata_record = CredentialMetadata(
            credential_id=credential.id,
            **metadata.model_dump(),
        )
        db.add(metadata_record)

    await db.commit()
    logger.info(
        "Credential %s created for user %s (metadata: %s)",
        credential.id, caller.id, metadata_record is not None,
    )
    return CredentialWithMetadataResult.ok(
        credential=credential_ro(credential),
        metadata=credential_metadata_ro(metadata_record) if metadata_record else None,
    )


@vault_operation(CredentialResult, "Get credential")
async def get_credential_by_id(
    db: AsyncSession, caller: Optional[Caller], credential_id: str
) -> CredentialResult:
    caller = require_caller(caller)
    if isinstance(caller, Failure):
        return CredentialResult.fail(caller)

    credential = await find_owned(db, Credential, credential_id, caller.id)
    if credential is None:
        return CredentialResult.fail(not_found("Credential"))
    return CredentialResult.ok(credential=credential_ro(credential))


@vault_operation(CredentialMetadataResult, "Get credential metadata")
async def get_credential_metadata(
    db: AsyncSession, caller: Optional[Caller], credential_id: str
) -> CredentialMetadataResult:
    caller = require_caller(caller)
    if isinstance(caller, Failure):
        return CredentialMetadataResult.fail(caller)

    credential = await find_owned(db, Credential, credential_id, caller.id)
    if credential is None:
        return CredentialMetadataResult.fail(not_found("Credential"))

    result = await db.execute(
        select(CredentialMetadata).where(CredentialMetadata.credential_id == credential.id)
    )
    metadata = result.scalars().first()
    if metadata is None:
        return CredentialMetadataResult.fail(not_found("Credential metadata"))
    return CredentialMetadataResult.ok(metadata=credential_metadata_ro(metadata))


@vault_operation(CredentialResult, "Credential update")
async def update_credential(
    db: AsyncSession,
    caller: Optional[Caller],
    credential_id: str,
    payload: Payload,
) -> CredentialResult:
    caller = require_caller(caller)
    if isinstance(caller, Failure):
        return CredentialResult.fail(caller)

    credential = await find_owned(db, Credential, credential_id, caller.id)
    if credential is None:
        return CredentialResult.fail(not_found("Credential"))

    data = parse_payload(CredentialUpdate, payload)
    if isinstance(data, Failure):
        return CredentialResult.fail(data)

    changes = data.model_dump(exclude_unset=True)
    failure = await check_references(
        db, caller.id, changes.get("platform_id"), changes.get("container_id")
    )
    if failure:
        return CredentialResult.fail(failure)

    if "tag_ids" in changes:
        tags = await _resolve_tags(db, changes.pop("tag_ids"), caller.id)
        if isinstance(tags, Failure):
            return CredentialResult.fail(tags)
        credential.tags = tags

    if changes.keys() & ENVELOPE_FIELDS:
        new_envelope = envelope_record(
            data.password, data.encryption_key, data.iv, data.plaintext_password
        )
        db.add(
            CredentialHistory(
                credential_id=credential.id,
                user_id=caller.id,
                old_password_encryption=copy_envelope(credential.password_encryption),
                new_password_encryption=copy_envelope(new_envelope),
            )
        )
        credential.password_encryption = new_envelope

    for key, value in changes.items():
        if key not in ENVELOPE_FIELDS:
            setattr(credential, key, value)
    credential.updated_at = utcnow()

    await db.commit()
    return CredentialResult.ok(credential=credential_ro(credential))


@vault_operation(OperationResult, "Credential deletion")
async def delete_credential(db: AsyncSession, caller: Optional[Caller], credential_id: str) -> OperationResult:
    caller = require_caller(caller)
    if isinstance(caller, Failure):
        return OperationResult.fail(caller)

    credential = await find_owned(db, Credential, credential_id, caller.id)
    if credential is None:
        return OperationResult.fail(not_found("Credential"))

    # Cascades to the password envelope, metadata and rotation history
    await db.delete(credential)
    await db.commit()
    logger.info("Credential %s deleted for user %s", credential_id, caller.id)
    return OperationResult.ok()


@vault_operation(CredentialListResult, "List credentials")
async def list_credentials(
    db: AsyncSession,
    caller: Optional[Caller],
    page: PageArg = 1,
    limit: PageArg = settings.DEFAULT_PAGE_SIZE,
    container_id: Optional[str] = None,
    platform_id: Optional[str] = None,
    status: Optional[str] = None,
) -> CredentialListResult:
    caller = require_caller(caller)
    if isinstance(caller, Failure):
        return CredentialListResult.fail(caller)

    query = parse_payload(
        CredentialListQuery,
        page_query(page, limit, container_id=container_id, platform_id=platform_id, status=status),
    )
    if isinstance(query, Failure):
        return CredentialListResult.fail(query)

    conditions = [Credential.user_id == caller.id]
    if query.container_id:
        conditions.append(Credential.container_id == query.container_id)
    if query.platform_id:
        conditions.append(Credential.platform_id == query.platform_id)
    if query.status:
        conditions.append(Credential.status == query.status)

    credentials, total = await fetch_page(db, Credential, conditions, query)
    return CredentialListResult.ok(credentials=[credential_ro(c) for c in credentials], total=total)


@vault_operation(CredentialHistoryResult, "List credential history")
async def list_credential_history(
    db: AsyncSession, caller: Optional[Caller], credential_id: str
) -> CredentialHistoryResult:
    """Password rotations for one credential, newest first."""
    caller = require_caller(caller)
    if isinstance(caller, Failure):
        return CredentialHistoryResult.fail(caller)

    credential = await find_owned(db, Credential, credential_id, caller.id)
    if credential is None:
        return CredentialHistoryResult.fail(not_found("Credential"))

    conditions = (
        CredentialHistory.credential_id == credential.id,
        CredentialHistory.user_id == caller.id,
    )
    result = await db.execute(
        select(CredentialHistory)
        .where(*conditions)
        .order_by(CredentialHistory.changed_at.desc(), CredentialHistory.id.desc())
    )
    entries = list(result.scalars().all())
    total = await db.scalar(select(func.count()).select_from(CredentialHistory).where(*conditions))
    return CredentialHistoryResult.ok(
        history=[credential_history_ro(e) for e in entries], total=total or 0
    )


@vault_operation(RevealResult, "Reveal credential password")
async def reveal_credential_password(
    db: AsyncSession, caller: Optional[Caller], credential_id: str
) -> RevealResult:
    """Decrypt the password envelope for its owner and stamp last_viewed."""
    caller = require_caller(caller)
    if isinstance(caller, Failure):
        return RevealResult.fail(caller)

    credential = await find_owned(db, Credential, credential_id, caller.id)
    if credential is None:
        return RevealResult.fail(not_found("Credential"))

    password = open_record(credential.password_encryption)
    credential.last_viewed = utcnow()
    await db.commit()
    return RevealResult.ok(value=password)
