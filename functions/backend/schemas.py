"""
Pydantic schemas for the post handlers.
"""

from __future__ import annotations

from typing import Annotated, Iterable, Type, TypeVar

from pydantic import AfterValidator, BaseModel, Field, ValidationError

from shared.constants import DOCUMENT_ID_MAX_LENGTH
from shared.types import ErrorReason

_MODEL = TypeVar("_MODEL", bound=BaseModel)

_MALFORMED_JSON_ERROR_TYPES = {"json_invalid", "json_type", "model_type", "model_attributes_type"}
_MISSING_FIELD_ERROR_TYPES = {"missing", "string_too_short"}


def _check_document_id(value: str) -> str:
    if "/" in value:
        raise ValueError("must not contain '/'")
    if value in (".", ".."):
        raise ValueError("must not be '.' or '..'")
    if value.startswith("__") and value.endswith("__"):
        raise ValueError("must not match __.*__")
    if len(value.encode("utf-8")) > DOCUMENT_ID_MAX_LENGTH:
        raise ValueError("is too long")
    return value


DocumentId = Annotated[str, Field(min_length=1), AfterValidator(_check_document_id)]


class PublishPostRequest(BaseModel):
    draft_id: DocumentId = Field(..., alias="draftID")


class SoftDeleteRequest(BaseModel):
    post_id: DocumentId = Field(..., alias="postID")


class StatusResponse(BaseModel):
    status: int = 200


class RequestBodyError(Exception):
    """Raised when a request body fails to parse or validate."""

    def __init__(self, reason: ErrorReason, message: str):
        self.reason = reason
        self.message = message
        super().__init__(message)


def classify_validation_errors(errors: Iterable[dict]) -> ErrorReason:
    """Picks the reason reported to the client for a list of pydantic errors."""
    error_types = {error.get("type") for error in errors}
    if error_types & _MALFORMED_JSON_ERROR_TYPES:
        return ErrorReason.MALFORMED_JSON
    if error_types & _MISSING_FIELD_ERROR_TYPES:
        return ErrorReason.MISSING_FIELD
    return ErrorReason.INVALID_FIELD


def describe_validation_errors(errors: Iterable[dict]) -> str:
    parts = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts)


def parse_request_body(model: Type[_MODEL], body: bytes | str) -> _MODEL:
    """
    Parses a raw JSON request body into `model`.

    Raises:
        RequestBodyError: the body is not a JSON object, or a field is missing
            or invalid.
    """
    try:
        return model.model_validate_json(body or b"")
    except ValidationError as e:
        errors = e.errors()
        raise RequestBodyError(
            classify_validation_errors(errors), describe_validation_errors(errors)
        ) from e
