# lockbox/services/platform.py
"""
Platform operations.

Global platforms (user_id NULL) are readable by everyone but can only be
changed by whoever owns them, which no vault caller does.
"""
import logging
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from lockbox.core.config import settings
from lockbox.core.errors import Failure, not_found
from lockbox.db.base import utcnow
from lockbox.models import Platform
from lockbox.schemas.common import OperationResult
from lockbox.schemas.platform import (
    PlatformCreate,
    PlatformListQuery,
    PlatformListResult,
    PlatformResult,
    PlatformUpdate,
)
from lockbox.schemas.user import Caller
from lockbox.services.guard import ensure_owner, require_caller
from lockbox.services.operation import PageArg, page_query, parse_payload, vault_operation
from lockbox.services.projection import platform_ro
from lockbox.services.queries import fetch_page, find_owned, find_visible_platform, visible_platforms

logger = logging.getLogger(__name__)

Payload = Union[Mapping[str, Any], BaseModel]


@vault_operation(PlatformResult, "Platform creation")
async def create_platform(db: AsyncSession, caller: Optional[Caller], payload: Payload) -> PlatformResult:
    caller = require_caller(caller)
    if isinstance(caller, Failure):
        return PlatformResult.fail(caller)

    data = parse_payload(PlatformCreate, payload)
    if isinstance(data, Failure):
        return PlatformResult.fail(data)

    platform = Platform(
        name=data.name,
        logo=data.logo,
        login_url=data.login_url,
        status=data.status,
        user_id=caller.id,
    )
    await ensure_owner(db, caller)
    db.add(platform)
    await db.commit()
    logger.info("Platform %s created for user %s", platform.id, caller.id)
    return PlatformResult.ok(platform=platform_ro(platform))


@vault_operation(PlatformResult, "Get platform")
async def get_platform_by_id(db: AsyncSession, caller: Optional[Caller], platform_id: str) -> PlatformResult:
    caller = require_caller(caller)
    if isinstance(caller, Failure):
        return PlatformResult.fail(caller)

    platform = await find_visible_platform(db, platform_id, caller.id)
    if platform is None:
        return PlatformResult.fail(not_found("Platform"))
    return PlatformResult.ok(platform=platform_ro(platform))


@vault_operation(PlatformResult, "Platform update")
async def update_platform(
    db: AsyncSession,
    caller: Optional[Caller],
    platform_id: str,
    payload: Payload,
) -> PlatformResult:
    caller = require_caller(caller)
    if isinstance(caller, Failure):
        return PlatformResult.fail(caller)

    platform = await find_owned(db, Platform, platform_id, caller.id)
    if platform is None:
        return PlatformResult.fail(not_found("Platform"))

    data = parse_payload(PlatformUpdate, payload)
    if isinstance(data, Failure):
        return PlatformResult.fail(data)

    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(platform, key, value)
    platform.updated_at = utcnow()

    await db.commit()
    return PlatformResult.ok(platform=platform_ro(platform))


@vault_operation(OperationResult, "Platform deletion")
async def delete_platform(db: AsyncSession, caller: Optional[Caller], platform_id: str) -> OperationResult:
    """Fails as a persistence error while secrets or credentials still reference it."""
    caller = require_caller(caller)
    if isinstance(caller, Failure):
        return OperationResult.fail(caller)

    platform = await find_owned(db, Platform, platform_id, caller.id)
    if platform is None:
        return OperationResult.fail(not_found("Platform"))

    await db.delete(platform)
    await db.commit()
    logger.info("Platform %s deleted for user %s", platform_id, caller.id)
    return OperationResult.ok()


@vault_operation(PlatformListResult, "List platforms")
async def list_platforms(
    db: AsyncSession,
    caller: Optional[Caller],
    page: PageArg = 1,
    limit: PageArg = settings.DEFAULT_PAGE_SIZE,
    status: Optional[str] = None,
) -> PlatformListResult:
    caller = require_caller(caller)
    if isinstance(caller, Failure):
        return PlatformListResult.fail(caller)

    query = parse_payload(PlatformListQuery, page_query(page, limit, status=status))
    if isinstance(query, Failure):
        return PlatformListResult.fail(query)

    conditions = [visible_platforms(caller.id)]
    if query.status:
        conditions.append(Platform.status == query.status)

    platforms, total = await fetch_page(db, Platform, conditions, query)
    return PlatformListResult.ok(platforms=[platform_ro(p) for p in platforms], total=total)
