# lockbox/schemas/secret.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from lockbox.models.secret import SecretStatus, SecretType
from lockbox.schemas.common import OperationResult, PageParams, UtcDatetime, validate_with_rules


class SecretCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)

    # Pre-encrypted envelope (client-side encryption)...
    value: Optional[str] = Field(None, min_length=1)
    encryption_key: Optional[str] = Field(None, min_length=1)
    iv: Optional[str] = Field(None, min_length=1)
    # ...or plaintext sealed on the server. Never stored, never returned.
    plaintext: Optional[str] = Field(None, min_length=1)

    description: Optional[str] = None
    type: SecretType = SecretType.API_KEY
    status: SecretStatus = SecretStatus.ACTIVE
    expires_at: Optional[UtcDatetime] = None
    platform_id: str = Field(..., min_length=1)
    container_id: Optional[str] = None

    @model_validator(mode="wrap")
    @classmethod
    def check_value_envelope(cls, data, handler):
        return validate_with_rules(cls, data, handler, envelope=("value", "plaintext", True))


class SecretUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    value: Optional[str] = Field(None, min_length=1)
    encryption_key: Optional[str] = Field(None, min_length=1)
    iv: Optional[str] = Field(None, min_length=1)
    plaintext: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    type: Optional[SecretType] = None
    status: Optional[SecretStatus] = None
    expires_at: Optional[UtcDatetime] = None
    platform_id: Optional[str] = Field(None, min_length=1)
    container_id: Optional[str] = None

    @model_validator(mode="wrap")
    @classmethod
    def check_partial(cls, data, handler):
        return validate_with_rules(
            cls, data, handler,
            not_null=("name", "value", "encryption_key", "iv", "plaintext", "type", "status", "platform_id"),
            envelope=("value", "plaintext", False),
        )


class SecretRo(BaseModel):
    id: str
    name: str
    value: str
    encryption_key: str
    iv: str
    description: Optional[str]
    type: SecretType
    status: SecretStatus
    expires_at: Optional[datetime]
    platform_id: str
    container_id: Optional[str]
    user_id: str
    created_at: datetime
    updated_at: datetime


class SecretResult(OperationResult):
    secret: Optional[SecretRo] = None


class SecretListResult(OperationResult):
    secrets: Optional[List[SecretRo]] = None
    total: Optional[int] = None


class RevealResult(OperationResult):
    value: Optional[str] = None


class SecretListQuery(PageParams):
    container_id: Optional[str] = None
    platform_id: Optional[str] = None
    status: Optional[SecretStatus] = None
