"""Error taxonomy shared by the check-in services and the HTTP layer."""
from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    VALIDATION_FAILED = "validation_failed"
    ANALYSIS_UNAVAILABLE = "analysis_unavailable"
    STORAGE_FAILURE = "storage_failure"
    INTERNAL = "internal"


# HTTP status used by the API layer for each kind
HTTP_STATUS = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.VALIDATION_FAILED: 400,
    ErrorKind.ANALYSIS_UNAVAILABLE: 502,
    ErrorKind.STORAGE_FAILURE: 500,
    ErrorKind.INTERNAL: 500,
}


class CheckInError(Exception):
    """A failure tagged with its ErrorKind."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    @property
    def status_code(self) -> int:
        return HTTP_STATUS[self.kind]

    def __repr__(self) -> str:
        return f"CheckInError({self.kind.value!r}, {self.message!r})"

    # shorthand constructors

    @classmethod
    def not_found(cls, message: str) -> "CheckInError":
        return cls(ErrorKind.NOT_FOUND, message)

    @classmethod
    def forbidden(cls, message: str = "Unauthorized access") -> "CheckInError":
        return cls(ErrorKind.FORBIDDEN, message)

    @classmethod
    def unauthorized(cls, message: str = "Invalid or expired token") -> "CheckInError":
        return cls(ErrorKind.UNAUTHORIZED, message)

    @classmethod
    def validation(cls, message: str) -> "CheckInError":
        return cls(ErrorKind.VALIDATION_FAILED, message)

    @classmethod
    def analysis_unavailable(cls, message: str = "Failed to generate AI analysis") -> "CheckInError":
        return cls(ErrorKind.ANALYSIS_UNAVAILABLE, message)

    @classmethod
    def storage(cls, message: str) -> "CheckInError":
        return cls(ErrorKind.STORAGE_FAILURE, message)

    @classmethod
    def internal(cls, message: str) -> "CheckInError":
        return cls(ErrorKind.INTERNAL, message)
