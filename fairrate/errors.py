"""Error taxonomy for the fairrate backend.

Services raise these; ``fairrate.main`` maps them to HTTP responses so that
routers never build error bodies for the common cases.

Example:
    from fairrate.errors import ValidationError

    if not my_location:
        raise ValidationError("Missing required fields")
"""
from __future__ import annotations


class FairRateError(Exception):
    """Base class for all errors raised by the service layer."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(FairRateError):
    """400 - missing or malformed input."""

    status_code = 400
    default_message = "Invalid input"


class AuthenticationError(FairRateError):
    """401 - the admin password did not match."""

    status_code = 401
    default_message = "Invalid credentials"


class AuthorizationError(FairRateError):
    """403 - missing, unknown or expired session token on an admin route.

    The message never reveals which of those cases applied.
    """

    status_code = 403
    default_message = "Unauthorized"


class DependencyError(FairRateError):
    """500 - a backing dependency on a critical path is unavailable."""

    status_code = 500
    default_message = "Service dependency unavailable"


__all__ = [
    "FairRateError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "DependencyError",
]
