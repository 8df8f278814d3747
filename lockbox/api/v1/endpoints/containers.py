# lockbox/api/v1/endpoints/containers.py
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from lockbox.api.deps import get_current_caller
from lockbox.api.responses import to_response
from lockbox.db.base import get_db
from lockbox.schemas.user import Caller
from lockbox.services import container as container_service

router = APIRouter()


@router.get("/")
async def list_containers(
        page: Optional[str] = None,
        limit: Optional[str] = None,
        container_type: Optional[str] = Query(None, alias="type"),
        db: AsyncSession = Depends(get_db),
        caller: Optional[Caller] = Depends(get_current_caller),
):
    result = await container_service.list_containers(db, caller, page=page, limit=limit, type=container_type)
    return to_response(result)


@router.post("/")
async def create_container(
        payload: Dict[str, Any] = Body(...),
        db: AsyncSession = Depends(get_db),
        caller: Optional[Caller] = Depends(get_current_caller),
):
    result = await container_service.create_container(db, caller, payload)
    return to_response(result, success_status=status.HTTP_201_CREATED)


@router.get("/{container_id}")
async def get_container(
        container_id: str,
        db: AsyncSession = Depends(get_db),
        caller: Optional[Caller] = Depends(get_current_caller),
):
    return to_response(await container_service.get_container_by_id(db, caller, container_id))


@router.patch("/{container_id}")
async def update_container(
        container_id: str,
        payload: Dict[str, Any] = Body(...),
        db: AsyncSession = Depends(get_db),
        caller: Optional[Caller] = Depends(get_current_caller),
):
    return to_response(await container_service.update_container(db, caller, container_id, payload))


@router.delete("/{container_id}")
async def delete_container(
        container_id: str,
        db: AsyncSession = Depends(get_db),
        caller: Optional[Caller] = Depends(get_current_caller),
):
    return to_response(await container_service.delete_container(db, caller, container_id))
