# lockbox/schemas/platform.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from lockbox.models.platform import PlatformStatus
from lockbox.schemas.common import OperationResult, PageParams, UrlStr, validate_with_rules


class PlatformCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    logo: Optional[str] = None
    login_url: Optional[UrlStr] = None
    status: PlatformStatus = PlatformStatus.PENDING


class PlatformUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    logo: Optional[str] = None
    login_url: Optional[UrlStr] = None
    status: Optional[PlatformStatus] = None

    @model_validator(mode="wrap")
    @classmethod
    def check_partial(cls, data, handler):
        return validate_with_rules(cls, data, handler, not_null=("name", "status"))


class PlatformRo(BaseModel):
    id: str
    name: str
    status: PlatformStatus
    logo: Optional[str]
    login_url: Optional[str]
    updated_at: datetime
    created_at: datetime
    # None for global platforms
    user_id: Optional[str]


class PlatformResult(OperationResult):
    platform: Optional[PlatformRo] = None


class PlatformListResult(OperationResult):
    platforms: Optional[List[PlatformRo]] = None
    total: Optional[int] = None


class PlatformListQuery(PageParams):
    status: Optional[PlatformStatus] = None
