"""
core/errors.py -- Domain error taxonomy for DevConnector.

Route handlers and guards raise these; api/main.py owns the single exception
handler that maps each ErrorKind to its HTTP status. Handlers never pick
status codes themselves, so not-found, bad input and ownership failures can
no longer collapse onto the same status.

Body shapes:
  {"msg": "..."}                       -- default domain error
  {"errors": [{"msg": "..."}, ...]}    -- when field-level errors are attached

Anything that is not an AppError is an unexpected failure and becomes a
plain-text 500.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    invalid_input = "invalid_input"
    unauthorized = "unauthorized"
    forbidden = "forbidden"
    not_found = "not_found"
    conflict = "conflict"


STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.invalid_input: 400,
    ErrorKind.unauthorized: 401,
    ErrorKind.forbidden: 403,
    ErrorKind.not_found: 404,
    ErrorKind.conflict: 409,
}


class AppError(Exception):
    """Base class for expected, client-facing failures."""

    kind: ErrorKind = ErrorKind.invalid_input

    def __init__(self, msg: str, errors: Optional[list[dict]] = None) -> None:
        super().__init__(msg)
        self.msg = msg
        self.errors = errors

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]

    def to_content(self) -> dict:
        if self.errors is not None:
            return {"errors": self.errors}
        return {"msg": self.msg}


class InvalidInput(AppError):
    kind = ErrorKind.invalid_input

    @classmethod
    def field_errors(cls, *messages: str) -> "InvalidInput":
        """Build an error rendered with the {"errors": [...]} envelope."""
        return cls(messages[0], errors=[{"msg": m} for m in messages])


class Unauthorized(AppError):
    kind = ErrorKind.unauthorized


class Forbidden(AppError):
    kind = ErrorKind.forbidden


class NotFound(AppError):
    kind = ErrorKind.not_found


class Conflict(AppError):
    """A compare-and-swap write lost against a concurrent writer."""

    kind = ErrorKind.conflict
