# lockbox/api/v1/endpoints/tags.py
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from lockbox.api.deps import get_current_caller
from lockbox.api.responses import to_response
from lockbox.db.base import get_db
from lockbox.schemas.user import Caller
from lockbox.services import tag as tag_service

router = APIRouter()


@router.get("/")
async def list_tags(
        page: Optional[str] = None,
        limit: Optional[str] = None,
        container_id: Optional[str] = None,
        db: AsyncSession = Depends(get_db),
        caller: Optional[Caller] = Depends(get_current_caller),
):
    result = await tag_service.list_tags(db, caller, page=page, limit=limit, container_id=container_id)
    return to_response(result)


@router.post("/")
async def create_tag(
        payload: Dict[str, Any] = Body(...),
        db: AsyncSession = Depends(get_db),
        caller: Optional[Caller] = Depends(get_current_caller),
):
    result = await tag_service.create_tag(db, caller, payload)
    return to_response(result, success_status=status.HTTP_201_CREATED)


@router.get("/{tag_id}")
async def get_tag(
        tag_id: str,
        db: AsyncSession = Depends(get_db),
        caller: Optional[Caller] = Depends(get_current_caller),
):
    return to_response(await tag_service.get_tag_by_id(db, caller, tag_id))


@router.patch("/{tag_id}")
async def update_tag(
        tag_id: str,
        payload: Dict[str, Any] = Body(...),
        db: AsyncSession = Depends(get_db),
        caller: Optional[Caller] = Depends(get_current_caller),
):
    return to_response(await tag_service.update_tag(db, caller, tag_id, payload))


@router.delete("/{tag_id}")
async def delete_tag(
        tag_id: str,
        db: AsyncSession = Depends(get_db),
        caller: Optional[Caller] = Depends(get_current_caller),
):
    return to_response(await tag_service.delete_tag(db, caller, tag_id))
