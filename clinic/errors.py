"""
Domain exceptions and the single translator that turns any failure into an
HTTP status plus the `{message, code, details}` error body.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, NoResultFound, SQLAlchemyError

logger = logging.getLogger(__name__)


class ClinicError(Exception):
    """Base class for errors the API knows how to report."""

    status_code = 500
    code = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details


class UnauthorizedError(ClinicError):
    status_code = 401
    code = "UNAUTHORIZED"

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class ValidationFailedError(ClinicError):
    """Field-level validation failure; `field_errors` maps field path -> message."""

    status_code = 400
    code = "VALIDATION_ERROR"

    def __init__(self, field_errors: dict[str, str]):
        super().__init__("Validation failed", {"fieldErrors": field_errors})
        self.field_errors = field_errors


class NotFoundError(ClinicError):
    status_code = 404
    code = "NOT_FOUND"


class ConstraintViolationError(ClinicError):
    status_code = 400
    code = "CONSTRAINT_VIOLATION"


@dataclass(frozen=True)
class ApiError:
    message: str
    code: str
    details: dict[str, Any] | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "code": self.code, "details": self.details}


# =========================
# Validation errors
# =========================
def _clean_message(msg: str) -> str:
    # pydantic prefixes messages raised from plain ValueError
    return msg.removeprefix("Value error, ")


def field_errors_from(errors: list[dict[str, Any]]) -> dict[str, str]:
    """
    Collapse pydantic error entries into `{dotted.path: message}`.

    The leading location part added by FastAPI ("body", "query", "path") is
    dropped; the first message per path wins.
    """
    result: dict[str, str] = {}
    for err in errors:
        loc = [str(p) for p in err.get("loc", ())]
        if loc and loc[0] in ("body", "query", "path") and len(loc) > 1:
            loc = loc[1:]
        path = ".".join(loc) or "body"
        result.setdefault(path, _clean_message(err.get("msg", "Invalid value")))
    return result


# =========================
# Database errors
# =========================
def _integrity_error(exc: IntegrityError) -> ApiError:
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    text = str(orig).lower()

    if sqlstate == "23505" or "unique" in text:
        return ApiError("A record with this information already exists", "DUPLICATE_RECORD")
    if sqlstate == "23503" or "foreign key" in text:
        return ApiError("Related record not found", "FOREIGN_KEY_CONSTRAINT")
    return ApiError("Invalid data provided", "INVALID_DATA")


def translate_exception(exc: BaseException) -> tuple[int, ApiError]:
    """
    Map an exception to `(status, ApiError)`.

    Known domain errors keep their message; database errors are reported with
    generic messages; everything else is an internal error.
    """
    if isinstance(exc, ClinicError):
        status, error = exc.status_code, ApiError(exc.message, exc.code, exc.details)
    elif isinstance(exc, (RequestValidationError, ValidationError)):
        err = ValidationFailedError(field_errors_from(list(exc.errors())))
        status, error = err.status_code, ApiError(err.message, err.code, err.details)
    elif isinstance(exc, IntegrityError):
        error = _integrity_error(exc)
        status = 409 if error.code == "DUPLICATE_RECORD" else 400
    elif isinstance(exc, NoResultFound):
        status, error = 404, ApiError("Record not found", "RECORD_NOT_FOUND")
    elif isinstance(exc, SQLAlchemyError):
        status, error = 500, ApiError("Database operation failed", "DATABASE_ERROR")
    else:
        status, error = 500, ApiError("An unexpected error occurred", "INTERNAL_SERVER_ERROR")

    if status >= 500:
        logger.error("API error: %s", exc, exc_info=exc)
    else:
        logger.warning("API error %s %s: %s", status, error.code, error.message)
    return status, error
