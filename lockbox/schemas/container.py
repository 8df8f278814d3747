# lockbox/schemas/container.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from lockbox.models.container import ContainerType
from lockbox.schemas.common import OperationResult, PageParams, validate_with_rules


class ContainerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    icon: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    type: ContainerType = ContainerType.MIXED


class ContainerUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    icon: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    type: Optional[ContainerType] = None

    @model_validator(mode="wrap")
    @classmethod
    def check_partial(cls, data, handler):
        return validate_with_rules(cls, data, handler, not_null=("name", "icon", "type"))


class ContainerRo(BaseModel):
    id: str
    name: str
    icon: str
    description: Optional[str]
    type: ContainerType
    updated_at: datetime
    created_at: datetime
    user_id: str


class ContainerResult(OperationResult):
    container: Optional[ContainerRo] = None


class ContainerListResult(OperationResult):
    containers: Optional[List[ContainerRo]] = None
    total: Optional[int] = None


class ContainerListQuery(PageParams):
    type: Optional[ContainerType] = None
