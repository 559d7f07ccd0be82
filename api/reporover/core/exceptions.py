"""
Custom exceptions for the application.

Every exception carries a human readable message and a stable machine code;
the handlers in ``reporover.main`` render them as ``{"error": ..., "code": ...}``.
"""
from typing import Optional


class RepoRoverException(Exception):
    """Base exception for all RepoRover application exceptions."""
    status_code = 500
    default_code = "INTERNAL_ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code


class ValidationError(RepoRoverException):
    """Raised when validation fails."""
    status_code = 400
    default_code = "INVALID_INPUT"


class AuthenticationError(RepoRoverException):
    """Raised when authentication fails."""
    status_code = 401
    default_code = "AUTH_REQUIRED"


class AuthorizationError(RepoRoverException):
    """Raised when authorization fails."""
    status_code = 403
    default_code = "UNAUTHORIZED_ACCESS"


class NotFoundError(RepoRoverException):
    """Raised when a requested resource is not found."""
    status_code = 404
    default_code = "NOT_FOUND"


class ConflictError(RepoRoverException):
    """Raised when there's a conflict (e.g., duplicate entry)."""
    status_code = 409
    default_code = "CONFLICT"


class MethodNotAllowedError(RepoRoverException):
    """Raised when an operation is not permitted on a resource at all."""
    status_code = 405
    default_code = "METHOD_NOT_ALLOWED"


class UpstreamError(RepoRoverException):
    """Raised when an external service (GitHub, Gemini) fails.

    ``status_code`` is the upstream status when one was received, 502 otherwise.
    """
    default_code = "UPSTREAM_ERROR"

    def __init__(self, message: str, code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message, code)
        self.status_code = status_code or 502


class GenerationFailedError(RepoRoverException):
    """Raised when the AI provider returns output that cannot be used."""
    status_code = 502
    default_code = "GENERATION_FAILED"


class ConfigurationError(RepoRoverException):
    """Raised when a required external service is not configured."""
    status_code = 503
    default_code = "NOT_CONFIGURED"
