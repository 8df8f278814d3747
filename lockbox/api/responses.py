from fastapi.responses import JSONResponse

from lockbox.core.errors import ErrorKind
from lockbox.schemas.common import OperationResult

STATUS_BY_KIND = {
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.VALIDATION_FAILED: 422,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.PERSISTENCE_ERROR: 500,
    ErrorKind.ENCRYPTION_ERROR: 500,
}


def to_response(result: OperationResult, success_status: int = 200) -> JSONResponse:
    """Serialize a vault result; top-level fields that are None are left out."""
    if result.success:
        status_code = success_status
    else:
        status_code = STATUS_BY_KIND.get(result.error_kind, 500)
    body = {key: value for key, value in result.model_dump(mode="json").items() if value is not None}
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(status_code=status_code, content=body, headers=headers)
