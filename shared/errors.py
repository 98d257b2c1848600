"""
Shared error handling for the JSSDK Access Layer.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class JSSDKException(Exception):
    """Base exception for JSSDK services."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self, request_id: Optional[str] = None) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=request_id,
            code=self.code,
            message=self.message,
            details=self.details
        )


class ConfigurationError(JSSDKException):
    """Invalid or unusable configuration."""

    def __init__(self, message: str = "Invalid configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, details)


class BackendUnavailable(JSSDKException):
    """Persistence backend could not be read or written."""

    def __init__(self, backend: str, message: str = "Backend unavailable", details: Optional[Dict[str, Any]] = None):
        self.backend = backend
        super().__init__("BACKEND_UNAVAILABLE", f"{backend}: {message}", details)


class IssuerError(JSSDKException):
    """Credential issuer returned an error or could not be reached."""

    def __init__(self, message: str = "Issuer error", details: Optional[Dict[str, Any]] = None):
        super().__init__("ISSUER_ERROR", message, details)


class MalformedResponse(JSSDKException):
    """Credential issuer returned a payload that cannot be interpreted."""

    def __init__(self, message: str = "Malformed issuer response", details: Optional[Dict[str, Any]] = None):
        super().__init__("MALFORMED_RESPONSE", message, details)
