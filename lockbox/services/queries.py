# lockbox/services/queries.py
"""
Ownership-scoped query helpers used by every vault operation.

Ownership is always part of the WHERE clause, never a check applied after
loading, so a foreign record and a missing record look the same.
"""
from typing import Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from lockbox.core.errors import Failure, not_found
from lockbox.models import Container, Platform, Tag
from lockbox.schemas.common import PageParams


async def find_owned(db: AsyncSession, model, record_id: str, user_id: str):
    result = await db.execute(
        select(model).where(model.id == record_id, model.user_id == user_id)
    )
    return result.scalars().first()


def visible_platforms(user_id: str):
    """Global platforms (no owner) plus the caller's own."""
    return or_(Platform.user_id.is_(None), Platform.user_id == user_id)


async def find_visible_platform(db: AsyncSession, platform_id: str, user_id: str) -> Optional[Platform]:
    result = await db.execute(
        select(Platform).where(Platform.id == platform_id, visible_platforms(user_id))
    )
    return result.scalars().first()


async def find_owned_tags(db: AsyncSession, tag_ids: Iterable[str], user_id: str) -> List[Tag]:
    wanted = set(tag_ids)
    if not wanted:
        return []
    result = await db.execute(
        select(Tag).where(Tag.id.in_(wanted), Tag.user_id == user_id)
    )
    return list(result.scalars().all())


async def check_references(
    db: AsyncSession,
    user_id: str,
    platform_id: Optional[str] = None,
    container_id: Optional[str] = None,
) -> Optional[Failure]:
    """NotFound if a referenced platform/container is absent or not visible to the caller."""
    if platform_id is not None:
        if await find_visible_platform(db, platform_id, user_id) is None:
            return not_found("Platform")
    if container_id is not None:
        if await find_owned(db, Container, container_id, user_id) is None:
            return not_found("Container")
    return None


async def fetch_page(
    db: AsyncSession,
    model,
    conditions: Sequence,
    page: PageParams,
) -> Tuple[list, int]:
    """
    One page ordered by creation time (newest first) plus the total count.

    id breaks ties so consecutive pages never overlap.
    """
    result = await db.execute(
        select(model)
        .where(*conditions)
        .order_by(model.created_at.desc(), model.id.desc())
        .offset(page.skip)
        .limit(page.limit)
    )
    items = list(result.scalars().all())
    total = await db.scalar(select(func.count()).select_from(model).where(*conditions))
    return items, total or 0
