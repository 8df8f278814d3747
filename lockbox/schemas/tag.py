# lockbox/schemas/tag.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from lockbox.schemas.common import OperationResult, PageParams, validate_with_rules


class TagCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    color: Optional[str] = Field(None, max_length=20)
    container_id: Optional[str] = None


class TagUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    color: Optional[str] = Field(None, max_length=20)
    container_id: Optional[str] = None

    @model_validator(mode="wrap")
    @classmethod
    def check_partial(cls, data, handler):
        return validate_with_rules(cls, data, handler, not_null=("name",))


class TagRo(BaseModel):
    id: str
    name: str
    color: Optional[str]
    user_id: Optional[str]
    container_id: Optional[str]
    created_at: datetime
    updated_at: datetime


class TagResult(OperationResult):
    tag: Optional[TagRo] = None


class TagListResult(OperationResult):
    tags: Optional[List[TagRo]] = None
    total: Optional[int] = None


class TagListQuery(PageParams):
    container_id: Optional[str] = None
