"""Error taxonomy shared by every pipeline stage."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class ErrorType(str, Enum):
    AUTHENTICATION = "authentication"
    RATE_LIMIT = "rate_limit"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


STATUS_CODES: Dict[ErrorType, int] = {
    ErrorType.AUTHENTICATION: 401,
    ErrorType.RATE_LIMIT: 429,
    ErrorType.TIMEOUT: 504,
    ErrorType.UNKNOWN: 500,
}


def error_type_for_status(status: int) -> ErrorType:
    """Maps a non-2xx HTTP status from a provider onto the taxonomy."""
    if status in (401, 403):
        return ErrorType.AUTHENTICATION
    if status == 429:
        return ErrorType.RATE_LIMIT
    return ErrorType.UNKNOWN


class GenerationError(RuntimeError):
    """A pipeline failure, optionally already tagged with its error type."""

    def __init__(
        self,
        message: str,
        error_type: ErrorType | None = None,
        http_status: int | None = None,
        body: str | None = None,
        provider: str | None = None,
    ) -> None:
        super().__init__(message)
        self.error_type = error_type
        self.http_status = http_status
        self.body = body
        self.provider = provider


class CredentialError(GenerationError):
    """No usable provider credential is configured."""

    def __init__(self, message: str) -> None:
        super().__init__(message, error_type=ErrorType.AUTHENTICATION)


@dataclass
class ClassifiedError:
    error_type: ErrorType
    message: str
    status_code: int
    provider: str | None = None
    credential: str | None = None
    format_valid: bool | None = None
    stage: str | None = None
    http_status: int | None = None

    def diagnostics(self) -> Dict[str, Any]:
        return {
            "provider": self.provider,
            "credential": self.credential,
            "formatValid": self.format_valid,
            "stage": self.stage,
            "httpStatus": self.http_status,
        }

    def to_response(self) -> Dict[str, Any]:
        return {
            "ok": False,
            "errorType": self.error_type.value,
            "message": self.message,
            "statusCode": self.status_code,
            "diagnostics": self.diagnostics(),
        }
