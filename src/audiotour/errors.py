"""API error taxonomy.

Each error carries the HTTP status and the envelope fields it is rendered with by
``audiotour.middleware.error_handler``.
"""

from __future__ import annotations

from typing import Any


class ApiError(Exception):
    """Base class for errors that map onto a JSON error envelope."""

    status_code: int = 500
    error: str = "Internal server error"
    message: str | None = None

    def __init__(
        self,
        error: str | None = None,
        message: str | None = None,
        details: list[dict[str, Any]] | None = None,
    ) -> None:
        if error is not None:
            self.error = error
        if message is not None:
            self.message = message
        self.details = details
        super().__init__(self.message or self.error)

    def to_envelope(self) -> dict[str, Any]:
        body: dict[str, Any] = {"success": False, "error": self.error}
        if self.message:
            body["message"] = self.message
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(ApiError):
    status_code = 400
    error = "Validation failed"


class AuthRequiredError(ApiError):
    """No bearer token on a route that requires one."""

    status_code = 401
    error = "Access token required"
    message = "Please provide a valid access token"


class InvalidCredentialsError(ApiError):
    status_code = 401
    error = "Invalid credentials"
    message = "Email or password is incorrect"


class TokenError(ApiError):
    """Common parent of the three token verification outcomes."""

    status_code = 403
    error = "Token verification failed"
    message = "Unable to verify the provided token"


class TokenExpiredError(TokenError):
    """Signature is valid but the token is past its expiry. Client should log in again."""

    status_code = 401
    error = "Token expired"
    message = "Your session has expired. Please login again."


class TokenInvalidError(TokenError):
    """Token is malformed, tampered with, or signed with another secret."""

    status_code = 403
    error = "Invalid token"
    message = "The provided token is invalid"


class TokenVerificationError(TokenError):
    """Any other verification failure (not yet valid, unusable claims)."""


class ForbiddenError(ApiError):
    status_code = 403
    error = "Admin access required"
    message = "This action requires admin privileges"


class NotFoundError(ApiError):
    status_code = 404
    error = "Not found"


class ConflictError(ApiError):
    status_code = 409
    error = "Conflict"
