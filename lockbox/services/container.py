# lockbox/services/container.py
import logging
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from lockbox.core.config import settings
from lockbox.core.errors import Failure, not_found
from lockbox.db.base import utcnow
from lockbox.models import Container
from lockbox.schemas.common import OperationResult
from lockbox.schemas.container import (
    ContainerCreate,
    ContainerListQuery,
    ContainerListResult,
    ContainerResult,
    ContainerUpdate,
)
from lockbox.schemas.user import Caller
from lockbox.services.guard import ensure_owner, require_caller
from lockbox.services.operation import PageArg, page_query, parse_payload, vault_operation
from lockbox.services.projection import container_ro
from lockbox.services.queries import fetch_page, find_owned

logger = logging.getLogger(__name__)

Payload = Union[Mapping[str, Any], BaseModel]


@vault_operation(ContainerResult, "Container creation")
async def create_container(db: AsyncSession, caller: Optional[Caller], payload: Payload) -> ContainerResult:
    caller = require_caller(caller)
    if isinstance(caller, Failure):
        return ContainerResult.fail(caller)

    data = parse_payload(ContainerCreate, payload)
    if isinstance(data, Failure):
        return ContainerResult.fail(data)

    container = Container(
        name=data.name,
        icon=data.icon,
        description=data.description,
        type=data.type,
        user_id=caller.id,
    )
    await ensure_owner(db, caller)
    db.add(container)
    await db.commit()
    logger.info("Container %s created for user %s", container.id, caller.id)
    return ContainerResult.ok(container=container_ro(container))


@vault_operation(ContainerResult, "Get container")
async def get_container_by_id(db: AsyncSession, caller: Optional[Caller], container_id: str) -> ContainerResult:
    caller = require_caller(caller)
    if isinstance(caller, Failure):
        return ContainerResult.fail(caller)

    container = await find_owned(db, Container, container_id, caller.id)
    if container is None:
        return ContainerResult.fail(not_found("Container"))
    return ContainerResult.ok(container=container_ro(container))


@vault_operation(ContainerResult, "Container update")
async def update_container(
    db: AsyncSession,
    caller: Optional[Caller],
    container_id: str,
    payload: Payload,
) -> ContainerResult:
    caller = require_caller(caller)
    if isinstance(caller, Failure):
        return ContainerResult.fail(caller)

    container = await find_owned(db, Container, container_id, caller.id)
    if container is None:
        return ContainerResult.fail(not_found("Container"))

    data = parse_payload(ContainerUpdate, payload)
    if isinstance(data, Failure):
        return ContainerResult.fail(data)

    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(container, key, value)
    container.updated_at = utcnow()

    await db.commit()
    return ContainerResult.ok(container=container_ro(container))


@vault_operation(OperationResult, "Container deletion")
async def delete_container(db: AsyncSession, caller: Optional[Caller], container_id: str) -> OperationResult:
    """Members keep existing; their container_id is cleared by the foreign key."""
    caller = require_caller(caller)
    if isinstance(caller, Failure):
        return OperationResult.fail(caller)

    container = await find_owned(db, Container, container_id, caller.id)
    if container is None:
        return OperationResult.fail(not_found("Container"))

    await db.delete(container)
    await db.commit()
    logger.info("Container %s deleted for user %s", container_id, caller.id)
    return OperationResult.ok()


@vault_operation(ContainerListResult, "List containers")
async def list_containers(
    db: AsyncSession,
    caller: Optional[Caller],
    page: PageArg = 1,
    limit: PageArg = settings.DEFAULT_PAGE_SIZE,
    type: Optional[str] = None,
) -> ContainerListResult:
    caller = require_caller(caller)
    if isinstance(caller, Failure):
        return ContainerListResult.fail(caller)

    query = parse_payload(ContainerListQuery, page_query(page, limit, type=type))
    if isinstance(query, Failure):
        return ContainerListResult.fail(query)

    conditions = [Container.user_id == caller.id]
    if query.type:
        conditions.append(Container.type == query.type)

    containers, total = await fetch_page(db, Container, conditions, query)
    return ContainerListResult.ok(containers=[container_ro(c) for c in containers], total=total)
