# lockbox/api/v1/endpoints/platforms.py
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from lockbox.api.deps import get_current_caller
from lockbox.api.responses import to_response
from lockbox.db.base import get_db
from lockbox.schemas.user import Caller
from lockbox.services import platform as platform_service

router = APIRouter()


@router.get("/")
async def list_platforms(
        page: Optional[str] = None,
        limit: Optional[str] = None,
        status_filter: Optional[str] = Query(None, alias="status"),
        db: AsyncSession = Depends(get_db),
        caller: Optional[Caller] = Depends(get_current_caller),
):
    result = await platform_service.list_platforms(db, caller, page=page, limit=limit, status=status_filter)
    return to_response(result)


@router.post("/")
async def create_platform(
        payload: Dict[str, Any] = Body(...),
        db: AsyncSession = Depends(get_db),
        caller: Optional[Caller] = Depends(get_current_caller),
):
    result = await platform_service.create_platform(db, caller, payload)
    return to_response(result, success_status=status.HTTP_201_CREATED)


@router.get("/{platform_id}")
async def get_platform(
        platform_id: str,
        db: AsyncSession = Depends(get_db),
        caller: Optional[Caller] = Depends(get_current_caller),
):
    return to_response(await platform_service.get_platform_by_id(db, caller, platform_id))


@router.patch("/{platform_id}")
async def update_platform(
        platform_id: str,
        payload: Dict[str, Any] = Body(...),
        db: AsyncSession = Depends(get_db),
        caller: Optional[Caller] = Depends(get_current_caller),
):
    return to_response(await platform_service.update_platform(db, caller, platform_id, payload))


@router.delete("/{platform_id}")
async def delete_platform(
        platform_id: str,
        db: AsyncSession = Depends(get_db),
        caller: Optional[Caller] = Depends(get_current_caller),
):
    return to_response(await platform_service.delete_platform(db, caller, platform_id))
