"""Typed resource errors shared by the self-service and SMS endpoints."""
from __future__ import annotations
from typing import Optional


class ResourceError(Exception):
    """Resource operation failure with HTTP status and optional cause.

    Attributes:
        status: HTTP status code
        message: Human-readable error description
        cause: Original exception, kept for diagnostics
    """

    status = 500
    reason = "Internal Server Error"

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.message = message
        self.cause = cause
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to JSON error response format."""
        return {
            "code": self.status,
            "reason": self.reason,
            "message": self.message,
        }


class BadRequestError(ResourceError):
    """Malformed input, e.g. mismatched identifiers."""
    status = 400
    reason = "Bad Request"


class NotFoundError(ResourceError):
    """Referenced configuration entity does not exist."""
    status = 404
    reason = "Not Found"


class InternalServerError(ResourceError):
    """Unexpected failure; the original exception is kept as cause."""
    status = 500
    reason = "Internal Server Error"


class NotSupportedError(ResourceError):
    """Service disabled for the realm, or unsupported operation shape."""
    status = 501
    reason = "Not Implemented"
