"""
Error types raised by the data layer and the HTTP error envelope.

Every handler funnels failures through `format_error`, which classifies them
into four tiers:

- schema validation (pydantic)      -> 400, per-field details
- known data-store errors           -> 400, code / message / meta
- any other exception               -> 500, exception name + message
- anything that is not an exception -> 500, "Unknown error"
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import ValidationError

logger = logging.getLogger(__name__)

# Short names for the SQLSTATEs the API is expected to hit.
SQLSTATE_CODES = {
    "23502": "not_null_violation",
    "23503": "foreign_key_violation",
    "23505": "unique_violation",
    "23514": "check_violation",
    "22001": "value_too_long",
    "22P02": "invalid_text_representation",
    "22007": "invalid_datetime_format",
    "22008": "datetime_field_overflow",
}


# Store failures are explicit and separable from other runtime errors.
class StoreKnownError(RuntimeError):
    def __init__(self, code: str, message: str, meta: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.meta = meta or {}

    @classmethod
    def from_postgres(cls, exc: Exception, *, model: str) -> "StoreKnownError":
        sqlstate = str(getattr(exc, "sqlstate", "") or "")
        meta: dict[str, Any] = {"model": model, "sqlstate": sqlstate}
        for attr, key in (
            ("table_name", "table"),
            ("column_name", "column"),
            ("constraint_name", "constraint"),
            ("detail", "detail"),
        ):
            value = getattr(exc, attr, None)
            if value:
                meta[key] = value
        code = SQLSTATE_CODES.get(sqlstate, sqlstate or "store_error")
        return cls(code, str(exc) or code, meta)


class QueryError(StoreKnownError):
    """
    The query object references unknown fields/operators or is malformed.
    """

    def __init__(self, message: str, meta: dict[str, Any] | None = None) -> None:
        super().__init__("invalid_query", message, meta)


class RecordNotFoundError(StoreKnownError):
    def __init__(self, model: str, operation: str) -> None:
        super().__init__(
            "record_not_found",
            f"Record to {operation} not found.",
            {"model": model, "operation": operation},
        )


def _validation_details(error: ValidationError) -> list[dict[str, Any]]:
    # `errors()` may carry exception objects in `ctx`; pydantic's JSON dump
    # already knows how to stringify them.
    return json.loads(error.json(include_url=False))


def format_error(error: object) -> tuple[int, dict[str, Any]]:
    if isinstance(error, ValidationError):
        return 400, {
            "error": "Validation error",
            "details": _validation_details(error),
        }
    if isinstance(error, StoreKnownError):
        return 400, {
            "error": "Store error",
            "code": error.code,
            "message": error.message,
            "meta": jsonable_encoder(error.meta),
        }
    # Request bodies that are not JSON, or not UTF-8.
    if isinstance(error, (json.JSONDecodeError, UnicodeDecodeError)):
        return 400, {
            "error": "Invalid JSON body",
            "message": str(error),
        }
    if isinstance(error, Exception):
        return 500, {
            "error": type(error).__name__ or "Error",
            "message": str(error),
        }
    return 500, {
        "error": "Unknown error",
        "details": repr(error),
    }


def error_response(error: object) -> JSONResponse:
    status, body = format_error(error)
    if status >= 500:
        if isinstance(error, BaseException):
            logger.error("request_failed status=%s", status, exc_info=error)
        else:
            logger.error("request_failed status=%s details=%r", status, error)
    else:
        logger.info("request_rejected status=%s error=%s", status, body.get("error"))
    return JSONResponse(body, status_code=status)
