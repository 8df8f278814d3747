# lockbox/core/errors.py
"""
Error taxonomy shared by every vault operation.

Leaf collaborators (crypto envelope, session verifier) raise exceptions.
Vault operations never raise: they return a result carrying a Failure.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Sequence, Tuple, Union

from pydantic import ValidationError

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."


class ErrorKind(str, Enum):
    UNAUTHENTICATED = "UNAUTHENTICATED"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    NOT_FOUND = "NOT_FOUND"
    PERSISTENCE_ERROR = "PERSISTENCE_ERROR"
    ENCRYPTION_ERROR = "ENCRYPTION_ERROR"


class NotAuthenticated(Exception):
    """Raised by the session verifier when no valid session exists."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class EncryptionError(Exception):
    """Raised when a cryptographic operation on an envelope fails."""


@dataclass(frozen=True)
class Issue:
    path: Tuple[Union[str, int], ...]
    message: str


@dataclass(frozen=True)
class Failure:
    kind: ErrorKind
    message: str
    issues: Tuple[Issue, ...] = field(default_factory=tuple)


def unauthenticated() -> Failure:
    return Failure(ErrorKind.UNAUTHENTICATED, "Not authenticated")


def not_found(entity: str) -> Failure:
    return Failure(ErrorKind.NOT_FOUND, f"{entity} not found")


def validation_failed(issues: Sequence[Issue]) -> Failure:
    return Failure(ErrorKind.VALIDATION_FAILED, "Validation failed", tuple(issues))


def persistence_error() -> Failure:
    return Failure(ErrorKind.PERSISTENCE_ERROR, GENERIC_ERROR_MESSAGE)


def encryption_error() -> Failure:
    # Same outward message as a persistence error; the kind keeps them apart.
    return Failure(ErrorKind.ENCRYPTION_ERROR, GENERIC_ERROR_MESSAGE)


def issues_from_validation_error(exc: ValidationError) -> List[Issue]:
    """One Issue per violated field, in the order pydantic reports them."""
    issues = []
    for error in exc.errors():
        message = error["msg"]
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        # Cross-field errors name the offending fields in their context
        fields = (error.get("ctx") or {}).get("fields")
        if not error["loc"] and fields:
            issues.extend(Issue(path=(name,), message=message) for name in fields)
        else:
            issues.append(Issue(path=tuple(error["loc"]), message=message))
    return issues
