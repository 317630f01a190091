"""Shop estimator error handling.

Custom exceptions and error codes for the estimation backend.
"""

from typing import Optional, Dict, Any


# Error Codes
class ErrorCode:
    """Error code constants."""

    # Validation Errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    MISSING_FIELD = "MISSING_FIELD"
    INVALID_PATTERN = "INVALID_PATTERN"
    INVALID_JSON = "INVALID_JSON"

    # Configuration Errors
    CONFIG_WRITE_FAILED = "CONFIG_WRITE_FAILED"
    CONFIG_INVALID = "CONFIG_INVALID"

    # External model Errors
    LLM_ERROR = "LLM_ERROR"
    LLM_TIMEOUT = "LLM_TIMEOUT"
    LLM_RATE_LIMIT = "LLM_RATE_LIMIT"
    LLM_INVALID_RESPONSE = "LLM_INVALID_RESPONSE"

    # HTTP surface
    NOT_FOUND = "NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class EstimatorError(Exception):
    """Base exception for estimator errors.

    Provides structured error information for API responses.

    Attributes:
        code: Error code from ErrorCode constants
        message: Human-readable error message
        details: Additional error context
    """

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for API response."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }

    def __repr__(self) -> str:
        return f"EstimatorError(code={self.code!r}, message={self.message!r})"


class ValidationError(EstimatorError):
    """Validation-specific error (client error, HTTP 400)."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict] = None,
        code: str = ErrorCode.VALIDATION_ERROR
    ):
        super().__init__(
            code=code,
            message=message,
            details={**(details or {}), "field": field} if field else details
        )
        self.field = field


class ConfigWriteError(EstimatorError):
    """Raised when a runtime override could not be persisted."""

    def __init__(self, message: str, path: str, details: Optional[Dict] = None):
        super().__init__(
            code=ErrorCode.CONFIG_WRITE_FAILED,
            message=message,
            details={**(details or {}), "path": path}
        )
        self.path = path


class ExternalModelError(EstimatorError):
    """External language-model call failed.

    Raised by the LLM service and absorbed by the external estimator;
    never surfaced to HTTP callers.
    """

    def __init__(
        self,
        code: str,
        message: str,
        model: Optional[str] = None,
        details: Optional[Dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            details={**(details or {}), "model": model}
        )
        self.model = model
