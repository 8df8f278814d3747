# lockbox/schemas/common.py
"""
Shapes shared by every vault operation: pagination input, result envelope,
and the cross-field checks used by the write schemas.
"""
from datetime import datetime
from typing import Annotated, Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from pydantic import AfterValidator, AnyUrl, BaseModel, Field, TypeAdapter, ValidationError
from pydantic_core import PydanticCustomError

from lockbox.core.config import settings
from lockbox.core.errors import ErrorKind, Failure
from lockbox.db.base import as_utc

_URL_ADAPTER = TypeAdapter(AnyUrl)


class IssueOut(BaseModel):
    path: List[Union[str, int]]
    message: str


class OperationResult(BaseModel):
    """
    Every vault operation returns one of these, never raises.

    Success: {"success": true, <entity>: ...}
    Failure: {"success": false, "error": "...", "issues": [...]}  (issues only for validation)
    """
    success: bool
    error: Optional[str] = None
    issues: Optional[List[IssueOut]] = None
    # Internal classification, not part of the response body
    error_kind: Optional[ErrorKind] = Field(default=None, exclude=True)

    @classmethod
    def ok(cls, **payload):
        return cls(success=True, **payload)

    @classmethod
    def fail(cls, failure: Failure):
        issues = None
        if failure.kind == ErrorKind.VALIDATION_FAILED:
            issues = [IssueOut(path=list(i.path), message=i.message) for i in failure.issues]
        return cls(success=False, error=failure.message, issues=issues, error_kind=failure.kind)


class PageParams(BaseModel):
    page: int = Field(1, ge=1)
    limit: int = Field(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE)

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


def field_error(message: str, fields: Iterable[str]) -> PydanticCustomError:
    """Model-level error that still names the offending fields."""
    return PydanticCustomError("field_error", message, {"fields": list(fields)})


def validate_url(value: Optional[str]) -> Optional[str]:
    """Check URL syntax but keep the string exactly as supplied."""
    if value is None:
        return value
    try:
        _URL_ADAPTER.validate_python(value)
    except ValidationError:
        raise ValueError("Invalid url")
    return value


def null_errors(supplied: Mapping[str, Any], fields: Iterable[str]) -> List[PydanticCustomError]:
    """Partial updates may omit non-nullable fields but never set them to null."""
    nulls = [name for name in fields if name in supplied and supplied[name] is None]
    if nulls:
        return [field_error("Field cannot be null", nulls)]
    return []


def envelope_errors(
    supplied: Mapping[str, Any],
    ciphertext_field: str,
    plaintext_field: str,
    required: bool,
) -> List[PydanticCustomError]:
    """
    Envelope fields travel as a unit.

    Either the pre-encrypted triple (ciphertext, encryption_key, iv) is
    supplied in full, or plaintext is supplied for sealing on the server.
    On create one of the two is required; on update both may be absent.
    """
    triple = (ciphertext_field, "encryption_key", "iv")
    present = [name for name in triple if supplied.get(name) is not None]
    has_plaintext = supplied.get(plaintext_field) is not None

    if has_plaintext and present:
        return [field_error(
            "Provide either an encrypted value or plaintext, not both",
            [plaintext_field],
        )]
    if present and len(present) != len(triple):
        return [field_error(
            f"{ciphertext_field}, encryption_key and iv must be supplied together",
            [name for name in triple if name not in present],
        )]
    if required and not present and not has_plaintext:
        return [field_error(f"{ciphertext_field} is required", [ciphertext_field])]
    return []


def _line_error(error: Dict[str, Any]) -> Dict[str, Any]:
    ctx = error.get("ctx") if error["type"] == "field_error" else None
    return {
        "type": PydanticCustomError(error["type"], error["msg"], ctx),
        "loc": error["loc"],
        "input": error.get("input"),
    }


def validate_with_rules(
    cls,
    data: Any,
    handler,
    not_null: Iterable[str] = (),
    envelope: Optional[Tuple[str, str, bool]] = None,
):
    """
    Body of a wrap validator: field validation plus the cross-field rules.

    The rules are judged on the raw input, so they are reported together
    with any field errors instead of only once every field is valid.

    Args:
        not_null: Fields that may be omitted but not sent as null.
        envelope: (ciphertext_field, plaintext_field, required) for
            secret-bearing schemas.
    """
    model, field_failure = None, None
    try:
        model = handler(data)
    except ValidationError as e:
        field_failure = e

    if isinstance(data, Mapping):
        supplied = data
    elif model is not None:
        supplied = {name: getattr(model, name) for name in model.model_fields_set}
    else:
        raise field_failure

    rule_errors = null_errors(supplied, not_null)
    if envelope is not None:
        rule_errors += envelope_errors(supplied, *envelope)

    if not rule_errors:
        if field_failure is not None:
            raise field_failure
        return model

    line_errors = [_line_error(error) for error in field_failure.errors()] if field_failure else []
    line_errors += [{"type": error, "loc": (), "input": data} for error in rule_errors]
    raise ValidationError.from_exception_data(cls.__name__, line_errors)


UrlStr = Annotated[str, AfterValidator(validate_url)]
UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]
