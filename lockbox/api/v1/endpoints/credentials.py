# lockbox/api/v1/endpoints/credentials.py
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from lockbox.api.deps import get_current_caller
from lockbox.api.responses import to_response
from lockbox.db.base import get_db
from lockbox.schemas.user import Caller
from lockbox.services import credential as credential_service

router = APIRouter()


@router.get("/")
async def list_credentials(
        page: Optional[str] = None,
        limit: Optional[str] = None,
        container_id: Optional[str] = None,
        platform_id: Optional[str] = None,
        status_filter: Optional[str] = Query(None, alias="status"),
        db: AsyncSession = Depends(get_db),
        caller: Optional[Caller] = Depends(get_current_caller),
):
    result = await credential_service.list_credentials(
        db, caller, page=page, limit=limit,
        container_id=container_id, platform_id=platform_id, status=status_filter,
    )
    return to_response(result)


@router.post("/")
async def create_credential(
        payload: Dict[str, Any] = Body(...),
        db: AsyncSession = Depends(get_db),
        caller: Optional[Caller] = Depends(get_current_caller),
):
    result = await credential_service.create_credential(db, caller, payload)
    return to_response(result, success_status=status.HTTP_201_CREATED)


@router.post("/with-metadata")
async def create_credential_with_metadata(
        credential: Dict[str, Any] = Body(...),
        metadata: Optional[Dict[str, Any]] = Body(None),
        db: AsyncSession = Depends(get_db),
        caller: Optional[Caller] = Depends(get_current_caller),
):
    result = await credential_service.create_credential_with_metadata(db, caller, credential, metadata)
    return to_response(result, success_status=status.HTTP_201_CREATED)


@router.get("/{credential_id}")
async def get_credential(
        credential_id: str,
        db: AsyncSession = Depends(get_db),
        caller: Optional[Caller] = Depends(get_current_caller),
):
    return to_response(await credential_service.get_credential_by_id(db, caller, credential_id))


@router.get("/{credential_id}/metadata")
async def get_credential_metadata(
        credential_id: str,
        db: AsyncSession = Depends(get_db),
        caller: Optional[Caller] = Depends(get_current_caller),
):
    return to_response(await credential_service.get_credential_metadata(db, caller, credential_id))


@router.get("/{credential_id}/history")
async def list_credential_history(
        credential_id: str,
        db: AsyncSession = Depends(get_db),
        caller: Optional[Caller] = Depends(get_current_caller),
):
    return to_response(await credential_service.list_credential_history(db, caller, credential_id))


@router.patch("/{credential_id}")
async def update_credential(
        credential_id: str,
        payload: Dict[str, Any] = Body(...),
        db: AsyncSession = Depends(get_db),
        caller: Optional[Caller] = Depends(get_current_caller),
):
    return to_response(await credential_service.update_credential(db, caller, credential_id, payload))


@router.delete("/{credential_id}")
async def delete_credential(
        credential_id: str,
        db: AsyncSession = Depends(get_db),
        caller: Optional[Caller] = Depends(get_current_caller),
):
    return to_response(await credential_service.delete_credential(db, caller, credential_id))


@router.post("/{credential_id}/reveal")
async def reveal_credential_password(
        credential_id: str,
        db: AsyncSession = Depends(get_db),
        caller: Optional[Caller] = Depends(get_current_caller),
):
    return to_response(await credential_service.reveal_credential_password(db, caller, credential_id))
