# lockbox/api/v1/endpoints/secrets.py
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from lockbox.api.deps import get_current_caller
from lockbox.api.responses import to_response
from lockbox.db.base import get_db
from lockbox.schemas.user import Caller
from lockbox.services import secret as secret_service

router = APIRouter()


@router.get("/")
async def list_secrets(
        page: Optional[str] = None,
        limit: Optional[str] = None,
        container_id: Optional[str] = None,
        platform_id: Optional[str] = None,
        status_filter: Optional[str] = Query(None, alias="status"),
        db: AsyncSession = Depends(get_db),
        caller: Optional[Caller] = Depends(get_current_caller),
):
    result = await secret_service.list_secrets(
        db, caller, page=page, limit=limit,
        container_id=container_id, platform_id=platform_id, status=status_filter,
    )
    return to_response(result)


@router.post("/")
async def create_secret(
        payload: Dict[str, Any] = Body(...),
        db: AsyncSession = Depends(get_db),
        caller: Optional[Caller] = Depends(get_current_caller),
):
    result = await secret_service.create_secret(db, caller, payload)
    return to_response(result, success_status=status.HTTP_201_CREATED)


@router.get("/{secret_id}")
async def get_secret(
        secret_id: str,
        db: AsyncSession = Depends(get_db),
        caller: Optional[Caller] = Depends(get_current_caller),
):
    return to_response(await secret_service.get_secret_by_id(db, caller, secret_id))


@router.patch("/{secret_id}")
async def update_secret(
        secret_id: str,
        payload: Dict[str, Any] = Body(...),
        db: AsyncSession = Depends(get_db),
        caller: Optional[Caller] = Depends(get_current_caller),
):
    return to_response(await secret_service.update_secret(db, caller, secret_id, payload))


@router.delete("/{secret_id}")
async def delete_secret(
        secret_id: str,
        db: AsyncSession = Depends(get_db),
        caller: Optional[Caller] = Depends(get_current_caller),
):
    return to_response(await secret_service.delete_secret(db, caller, secret_id))


@router.post("/{secret_id}/reveal")
async def reveal_secret(
        secret_id: str,
        db: AsyncSession = Depends(get_db),
        caller: Optional[Caller] = Depends(get_current_caller),
):
    return to_response(await secret_service.reveal_secret_value(db, caller, secret_id))
