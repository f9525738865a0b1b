"""
core/errors.py -- Domain error taxonomy.

Every failure the API reports to a client is one of these. Stores and services
raise them; api/main.py owns the single exception handler that turns them into
the {success: false, code, message} envelope.

status_code and code are class attributes so handlers never need to branch on
the concrete type.

Layer rule: stdlib only. Imported by every other package.
"""

from __future__ import annotations


class AppError(Exception):
    """Base class for errors that map to a client-facing HTTP status."""

    status_code: int = 500
    code: str = "internal_error"

    def __init__(self, message: str, *, detail: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        # Internal detail, only rendered to clients when DEBUG=true.
        self.detail = detail


class ValidationError(AppError):
    """Missing or malformed input field."""

    status_code = 400
    code = "validation_error"


class AuthenticationError(AppError):
    """No credentials presented, or credentials that do not match."""

    status_code = 401
    code = "unauthenticated"


class InvalidTokenError(AuthenticationError):
    """A token was presented but failed signature, structure, or expiry checks.

    Reported as 403 rather than 401 so clients can tell "log in first" apart
    from "your token is no good".
    """

    status_code = 403
    code = "invalid_token"


class PermissionDeniedError(AppError):
    """Authenticated, but the principal's role does not allow the operation."""

    status_code = 403
    code = "forbidden"


class NotFoundError(AppError):
    status_code = 404
    code = "not_found"


class DuplicateError(AppError):
    """A uniqueness constraint was violated by the storage layer."""

    status_code = 409
    code = "duplicate"


class PayloadTooLargeError(AppError):
    status_code = 413
    code = "payload_too_large"


class StorageError(AppError):
    """The underlying store is unavailable or failed. Never retried."""

    status_code = 500
    code = "storage_error"
