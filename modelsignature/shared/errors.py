"""
Shared error handling for the ModelSignature SDK.
"""

from typing import Dict, Any, Optional, Sequence, Tuple
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error shape, suitable for returning from an API layer."""

    code: str
    message: str
    status_code: Optional[int] = None
    details: Dict[str, Any] = {}


class ModelSignatureError(Exception):
    """Base exception for the ModelSignature SDK."""

    def __init__(self, message: str, code: str = "MODELSIGNATURE_ERROR",
                 status_code: Optional[int] = None,
                 details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            status_code=self.status_code,
            details=self.details
        )


class InvalidFormatError(ModelSignatureError):
    """Token is not a three-part compact token; no request was made."""

    def __init__(self, message: str = "Invalid token format", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "INVALID_FORMAT", details=details)


class InvalidResponseError(ModelSignatureError):
    """Malformed call arguments, e.g. empty response text."""

    def __init__(self, message: str = "Response text must be a non-empty string",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "INVALID_RESPONSE", details=details)


class HTTPError(ModelSignatureError):
    """Non-2xx answer from the verification authority."""

    def __init__(self, message: str, status_code: int, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "HTTP_ERROR", status_code=status_code, details=details)

    @property
    def retryable(self) -> bool:
        return self.status_code >= 500


class RequestFailedError(ModelSignatureError):
    """All request attempts failed."""

    def __init__(self, attempts: int, last_message: str, details: Optional[Dict[str, Any]] = None):
        self.attempts = attempts
        self.last_message = last_message
        super().__init__(
            f"Request failed after {attempts} attempts: {last_message}",
            "REQUEST_FAILED",
            details=details
        )


class MalformedPayloadError(ModelSignatureError):
    """A 2xx body that does not match the expected response model."""

    def __init__(self, message: str = "Malformed response payload", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "MALFORMED_PAYLOAD", details=details)


class PolicyViolationError(ModelSignatureError):
    """Raised by fail-closed enforcers when a token breaks the policy."""

    def __init__(self, violations: Sequence[str], details: Optional[Dict[str, Any]] = None):
        self.violations: Tuple[str, ...] = tuple(violations)
        super().__init__(
            f"Policy violation: {', '.join(self.violations)}",
            "POLICY_VIOLATION",
            details=details
        )
