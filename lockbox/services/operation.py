# lockbox/services/operation.py
"""
Boundary shared by every vault operation.

- Payloads are parsed into write schemas here; failures become a
  VALIDATION_FAILED result carrying one issue per offending field.
- vault_operation() wraps an operation so nothing escapes it: encryption
  failures and unexpected storage failures roll back the unit of work, are
  logged internally, and surface as a generic message.
"""
import functools
import logging
from typing import Any, Dict, Mapping, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from lockbox.core.errors import (
    EncryptionError,
    Failure,
    encryption_error,
    issues_from_validation_error,
    persistence_error,
    validation_failed,
)
from lockbox.schemas.common import OperationResult

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)

# Raw paging input (query strings included), validated by the list schemas
PageArg = Union[int, str, None]


def parse_payload(
    schema: Type[SchemaT],
    payload: Union[Mapping[str, Any], BaseModel, None],
) -> Union[SchemaT, Failure]:
    """Validate a caller payload. Unset fields stay unset for partial updates."""
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(exclude_unset=True)
    try:
        return schema.model_validate(payload)
    except ValidationError as e:
        return validation_failed(issues_from_validation_error(e))


def page_query(page: Any, limit: Any, **filters: Any) -> Dict[str, Any]:
    """List input for a *ListQuery schema; paging left unset falls back to its defaults."""
    query = dict(filters)
    if page is not None:
        query["page"] = page
    if limit is not None:
        query["limit"] = limit
    return query


async def _rollback(db: AsyncSession) -> None:
    try:
        await db.rollback()
    except Exception as e:
        logger.warning("Rollback failed (non-fatal): %s", e)


def vault_operation(result_cls: Type[OperationResult], action: str):
    """
    Decorate an async operation taking the AsyncSession as first argument.

    Args:
        result_cls: Result model returned on failure.
        action: Human readable name used in log lines ("Secret creation").
    """

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(db: AsyncSession, *args, **kwargs):
            try:
                return await func(db, *args, **kwargs)
            except EncryptionError as e:
                await _rollback(db)
                logger.error("%s aborted: envelope encryption failed: %s", action, e)
                return result_cls.fail(encryption_error())
            except Exception:
                await _rollback(db)
                logger.exception("%s error", action)
                return result_cls.fail(persistence_error())

        return wrapper

    return decorator
