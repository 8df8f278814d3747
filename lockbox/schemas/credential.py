# lockbox/schemas/credential.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, model_validator

from lockbox.models.credential import AccountStatus
from lockbox.schemas.common import OperationResult, PageParams, UrlStr, validate_with_rules


class CredentialCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=255)

    # Encrypted password envelope, or plaintext_password sealed on the server
    password: Optional[str] = Field(None, min_length=1)
    encryption_key: Optional[str] = Field(None, min_length=1)
    iv: Optional[str] = Field(None, min_length=1)
    plaintext_password: Optional[str] = Field(None, min_length=1)

    status: AccountStatus = AccountStatus.ACTIVE
    description: Optional[str] = None
    login_url: Optional[UrlStr] = None
    platform_id: str = Field(..., min_length=1)
    container_id: Optional[str] = None
    tag_ids: List[str] = []

    @model_validator(mode="wrap")
    @classmethod
    def check_password_envelope(cls, data, handler):
        return validate_with_rules(
            cls, data, handler, envelope=("password", "plaintext_password", True)
        )


class CredentialUpdate(BaseModel):
    username: Optional[str] = Field(None, min_length=1, max_length=255)
    password: Optional[str] = Field(None, min_length=1)
    encryption_key: Optional[str] = Field(None, min_length=1)
    iv: Optional[str] = Field(None, min_length=1)
    plaintext_password: Optional[str] = Field(None, min_length=1)
    status: Optional[AccountStatus] = None
    description: Optional[str] = None
    login_url: Optional[UrlStr] = None
    platform_id: Optional[str] = Field(None, min_length=1)
    container_id: Optional[str] = None
    tag_ids: Optional[List[str]] = None

    @model_validator(mode="wrap")
    @classmethod
    def check_partial(cls, data, handler):
        return validate_with_rules(
            cls, data, handler,
            not_null=(
                "username", "password", "encryption_key", "iv",
                "plaintext_password", "status", "platform_id", "tag_ids",
            ),
            envelope=("password", "plaintext_password", False),
        )


class CredentialRo(BaseModel):
    id: str
    username: str
    password: str
    encryption_key: str
    iv: str
    status: AccountStatus
    description: Optional[str]
    login_url: Optional[str]
    last_viewed: Optional[datetime]
    created_at: datetime
    updated_at: datetime
    platform_id: str
    user_id: str
    container_id: Optional[str]
    tag_ids: List[str]


class CredentialMetadataCreate(BaseModel):
    recovery_email: Optional[EmailStr] = None
    account_id: Optional[str] = None
    iban: Optional[str] = Field(None, max_length=64)
    bank_name: Optional[str] = None
    other_info: Optional[str] = None
    has_2fa: bool = False


class CredentialMetadataRo(BaseModel):
    id: str
    recovery_email: Optional[str]
    account_id: Optional[str]
    iban: Optional[str]
    bank_name: Optional[str]
    other_info: Optional[str]
    has_2fa: bool
    credential_id: str


class CredentialHistoryRo(BaseModel):
    id: str
    old_password: str
    old_encryption_key: str
    old_iv: str
    new_password: str
    new_encryption_key: str
    new_iv: str
    changed_at: datetime
    user_id: str
    credential_id: str


class CredentialResult(OperationResult):
    credential: Optional[CredentialRo] = None


class CredentialListResult(OperationResult):
    credentials: Optional[List[CredentialRo]] = None
    total: Optional[int] = None


class CredentialWithMetadataResult(OperationResult):
    credential: Optional[CredentialRo] = None
    metadata: Optional[CredentialMetadataRo] = None


class CredentialMetadataResult(OperationResult):
    metadata: Optional[CredentialMetadataRo] = None


class CredentialHistoryResult(OperationResult):
    history: Optional[List[CredentialHistoryRo]] = None
    total: Optional[int] = None


class CredentialListQuery(PageParams):
    container_id: Optional[str] = None
    platform_id: Optional[str] = None
    status: Optional[AccountStatus] = None
