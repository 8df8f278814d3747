# lockbox/services/secret.py
"""
Secret vault operations.

Each operation: guard → validate → reference checks → envelope → owner-scoped
persistence → projection. Every exit path is a SecretResult.
"""
import logging
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from lockbox.core.config import settings
from lockbox.core.errors import Failure, not_found
from lockbox.db.base import utcnow
from lockbox.models import Secret
from lockbox.schemas.common import OperationResult
from lockbox.schemas.secret import (
    RevealResult,
    SecretCreate,
    SecretListQuery,
    SecretListResult,
    SecretResult,
    SecretUpdate,
)
from lockbox.schemas.user import Caller
from lockbox.services.envelopes import envelope_record, open_record
from lockbox.services.guard import ensure_owner, require_caller
from lockbox.services.operation import PageArg, page_query, parse_payload, vault_operation
from lockbox.services.projection import secret_ro
from lockbox.services.queries import check_references, fetch_page, find_owned

logger = logging.getLogger(__name__)

Payload = Union[Mapping[str, Any], BaseModel]

ENVELOPE_FIELDS = {"value", "encryption_key", "iv", "plaintext"}


@vault_operation(SecretResult, "Secret creation")
async def create_secret(db: AsyncSession, caller: Optional[Caller], payload: Payload) -> SecretResult:
    caller = require_caller(caller)
    if isinstance(caller, Failure):
        return SecretResult.fail(caller)

    data = parse_payload(SecretCreate, payload)
    if isinstance(data, Failure):
        return SecretResult.fail(data)

    failure = await check_references(db, caller.id, data.platform_id, data.container_id)
    if failure:
        return SecretResult.fail(failure)

    secret = Secret(
        name=data.name,
        value_encryption=envelope_record(data.value, data.encryption_key, data.iv, data.plaintext),
        description=data.description,
        type=data.type,
        status=data.status,
        expires_at=data.expires_at,
        platform_id=data.platform_id,
        user_id=caller.id,
    )
    # Omitted rather than null-inserted
    if data.container_id is not None:
        secret.container_id = data.container_id

    await ensure_owner(db, caller)
    db.add(secret)
    await db.commit()
    logger.info("Secret %s created for user %s", secret.id, caller.id)
    return SecretResult.ok(secret=secret_ro(secret))


@vault_operation(SecretResult, "Get secret")
async def get_secret_by_id(db: AsyncSession, caller: Optional[Caller], secret_id: str) -> SecretResult:
    caller = require_caller(caller)
    if isinstance(caller, Failure):
        return SecretResult.fail(caller)

    secret = await find_owned(db, Secret, secret_id, caller.id)
    if secret is None:
        return SecretResult.fail(not_found("Secret"))
    return SecretResult.ok(secret=secret_ro(secret))


@vault_operation(SecretResult, "Secret update")
async def update_secret(
    db: AsyncSession,
    caller: Optional[Caller],
    secret_id: str,
    payload: Payload,
) -> SecretResult:
    caller = require_caller(caller)
    if isinstance(caller, Failure):
        return SecretResult.fail(caller)

    secret = await find_owned(db, Secret, secret_id, caller.id)
    if secret is None:
        return SecretResult.fail(not_found("Secret"))

    data = parse_payload(SecretUpdate, payload)
    if isinstance(data, Failure):
        return SecretResult.fail(data)

    changes = data.model_dump(exclude_unset=True)
    failure = await check_references(
        db, caller.id, changes.get("platform_id"), changes.get("container_id")
    )
    if failure:
        return SecretResult.fail(failure)

    if changes.keys() & ENVELOPE_FIELDS:
        # Rotation: the old envelope is orphaned and removed with this commit
        secret.value_encryption = envelope_record(data.value, data.encryption_key, data.iv, data.plaintext)

    for key, value in changes.items():
        if key not in ENVELOPE_FIELDS:
            setattr(secret, key, value)
    secret.updated_at = utcnow()

    await db.commit()
    return SecretResult.ok(secret=secret_ro(secret))


@vault_operation(OperationResult, "Secret deletion")
async def delete_secret(db: AsyncSession, caller: Optional[Caller], secret_id: str) -> OperationResult:
    caller = require_caller(caller)
    if isinstance(caller, Failure):
        return OperationResult.fail(caller)

    secret = await find_owned(db, Secret, secret_id, caller.id)
    if secret is None:
        return OperationResult.fail(not_found("Secret"))

    # Cascades to the value envelope
    await db.delete(secret)
    await db.commit()
    logger.info("Secret %s deleted for user %s", secret_id, caller.id)
    return OperationResult.ok()


@vault_operation(SecretListResult, "List secrets")
async def list_secrets(
    db: AsyncSession,
    caller: Optional[Caller],
    page: PageArg = 1,
    limit: PageArg = settings.DEFAULT_PAGE_SIZE,
    container_id: Optional[str] = None,
    platform_id: Optional[str] = None,
    status: Optional[str] = None,
) -> SecretListResult:
    caller = require_caller(caller)
    if isinstance(caller, Failure):
        return SecretListResult.fail(caller)

    query = parse_payload(
        SecretListQuery,
        page_query(page, limit, container_id=container_id, platform_id=platform_id, status=status),
    )
    if isinstance(query, Failure):
        return SecretListResult.fail(query)

    conditions = [Secret.user_id == caller.id]
    if query.container_id:
        conditions.append(Secret.container_id == query.container_id)
    if query.platform_id:
        conditions.append(Secret.platform_id == query.platform_id)
    if query.status:
        conditions.append(Secret.status == query.status)

    secrets, total = await fetch_page(db, Secret, conditions, query)
    return SecretListResult.ok(secrets=[secret_ro(s) for s in secrets], total=total)


@vault_operation(RevealResult, "Reveal secret")
async def reveal_secret_value(db: AsyncSession, caller: Optional[Caller], secret_id: str) -> RevealResult:
    """Decrypt the stored envelope for its owner."""
    caller = require_caller(caller)
    if isinstance(caller, Failure):
        return RevealResult.fail(caller)

    secret = await find_owned(db, Secret, secret_id, caller.id)
    if secret is None:
        return RevealResult.fail(not_found("Secret"))
    return RevealResult.ok(value=open_record(secret.value_encryption))
