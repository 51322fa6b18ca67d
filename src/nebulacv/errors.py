from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    MISSING_INPUT = "MISSING_INPUT"
    RATE_LIMIT = "RATE_LIMIT"
    PARSE_ERROR = "PARSE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    NOT_FOUND = "NOT_FOUND"
    INVALID_SIGNATURE = "INVALID_SIGNATURE"


STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.MISSING_INPUT: 400,
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INVALID_SIGNATURE: 400,
    ErrorKind.RATE_LIMIT: 429,
    ErrorKind.PARSE_ERROR: 500,
    ErrorKind.INTERNAL_ERROR: 500,
}


class NebulaError(Exception):
    """Base for every failure that is reported to clients as ``{error, message}``."""

    kind: ErrorKind = ErrorKind.INTERNAL_ERROR

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.kind.value}
        if self.message:
            payload["message"] = self.message
        return payload


class MissingInput(NebulaError):
    kind = ErrorKind.MISSING_INPUT


class RateLimited(NebulaError):
    kind = ErrorKind.RATE_LIMIT


class ParseFailure(NebulaError):
    kind = ErrorKind.PARSE_ERROR


class InternalFailure(NebulaError):
    kind = ErrorKind.INTERNAL_ERROR


class Unauthenticated(NebulaError):
    kind = ErrorKind.UNAUTHENTICATED


class NotFound(NebulaError):
    kind = ErrorKind.NOT_FOUND


class BodyMissing(MissingInput):
    """A section edit was attempted before any resume body exists."""

    def __init__(self, message: str = "Complete the interview or import a resume first."):
        super().__init__(message)


class InvalidSignature(NebulaError):
    kind = ErrorKind.INVALID_SIGNATURE

    def to_payload(self) -> dict[str, Any]:
        # Webhook replies carry the plain message as the error.
        return {"error": self.message or "Invalid signature"}
