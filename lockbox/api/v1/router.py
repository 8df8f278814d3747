# lockbox/api/v1/router.py
from fastapi import APIRouter

from lockbox.api.v1.endpoints import containers, credentials, platforms, secrets, tags

api_router = APIRouter()
api_router.include_router(secrets.router, prefix="/secrets", tags=["secrets"])
api_router.include_router(credentials.router, prefix="/credentials", tags=["credentials"])
api_router.include_router(containers.router, prefix="/containers", tags=["containers"])
api_router.include_router(platforms.router, prefix="/platforms", tags=["platforms"])
api_router.include_router(tags.router, prefix="/tags", tags=["tags"])
