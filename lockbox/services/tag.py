# lockbox/services/tag.py
import logging
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from lockbox.core.config import settings
from lockbox.core.errors import Failure, not_found
from lockbox.db.base import utcnow
from lockbox.models import Tag
from lockbox.schemas.common import OperationResult
from lockbox.schemas.tag import TagCreate, TagListQuery, TagListResult, TagResult, TagUpdate
from lockbox.schemas.user import Caller
from lockbox.services.guard import ensure_owner, require_caller
from lockbox.services.operation import PageArg, page_query, parse_payload, vault_operation
from lockbox.services.projection import tag_ro
from lockbox.services.queries import check_references, fetch_page, find_owned

logger = logging.getLogger(__name__)

Payload = Union[Mapping[str, Any], BaseModel]


@vault_operation(TagResult, "Tag creation")
async def create_tag(db: AsyncSession, caller: Optional[Caller], payload: Payload) -> TagResult:
    caller = require_caller(caller)
    if isinstance(caller, Failure):
        return TagResult.fail(caller)

    data = parse_payload(TagCreate, payload)
    if isinstance(data, Failure):
        return TagResult.fail(data)

    failure = await check_references(db, caller.id, container_id=data.container_id)
    if failure:
        return TagResult.fail(failure)

    tag = Tag(name=data.name, color=data.color, user_id=caller.id)
    if data.container_id is not None:
        tag.container_id = data.container_id

    await ensure_owner(db, caller)
    db.add(tag)
    await db.commit()
    return TagResult.ok(tag=tag_ro(tag))


@vault_operation(TagResult, "Get tag")
async def get_tag_by_id(db: AsyncSession, caller: Optional[Caller], tag_id: str) -> TagResult:
    caller = require_caller(caller)
    if isinstance(caller, Failure):
        return TagResult.fail(caller)

    tag = await find_owned(db, Tag, tag_id, caller.id)
    if tag is None:
        return TagResult.fail(not_found("Tag"))
    return TagResult.ok(tag=tag_ro(tag))


@vault_operation(TagResult, "Tag update")
async def update_tag(
    db: AsyncSession,
    caller: Optional[Caller],
    tag_id: str,
    payload: Payload,
) -> TagResult:
    caller = require_caller(caller)
    if isinstance(caller, Failure):
        return TagResult.fail(caller)

    tag = await find_owned(db, Tag, tag_id, caller.id)
    if tag is None:
        return TagResult.fail(not_found("Tag"))

    data = parse_payload(TagUpdate, payload)
    if isinstance(data, Failure):
        return TagResult.fail(data)

    changes = data.model_dump(exclude_unset=True)
    failure = await check_references(db, caller.id, container_id=changes.get("container_id"))
    if failure:
        return TagResult.fail(failure)

    for key, value in changes.items():
        setattr(tag, key, value)
    tag.updated_at = utcnow()

    await db.commit()
    return TagResult.ok(tag=tag_ro(tag))


@vault_operation(OperationResult, "Tag deletion")
async def delete_tag(db: AsyncSession, caller: Optional[Caller], tag_id: str) -> OperationResult:
    caller = require_caller(caller)
    if isinstance(caller, Failure):
        return OperationResult.fail(caller)

    tag = await find_owned(db, Tag, tag_id, caller.id)
    if tag is None:
        return OperationResult.fail(not_found("Tag"))

    await db.delete(tag)
    await db.commit()
    return OperationResult.ok()


@vault_operation(TagListResult, "List tags")
async def list_tags(
    db: AsyncSession,
    caller: Optional[Caller],
    page: PageArg = 1,
    limit: PageArg = settings.DEFAULT_PAGE_SIZE,
    container_id: Optional[str] = None,
) -> TagListResult:
    caller = require_caller(caller)
    if isinstance(caller, Failure):
        return TagListResult.fail(caller)

    query = parse_payload(TagListQuery, page_query(page, limit, container_id=container_id))
    if isinstance(query, Failure):
        return TagListResult.fail(query)

    conditions = [Tag.user_id == caller.id]
    if query.container_id:
        conditions.append(Tag.container_id == query.container_id)

    tags, total = await fetch_page(db, Tag, conditions, query)
    return TagListResult.ok(tags=[tag_ro(t) for t in tags], total=total)
