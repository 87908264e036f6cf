"""Error taxonomy shared by the cohort management services.

Every failure that leaves the service layer is one of these classes. The
``code`` is stable and machine readable; ``reason`` narrows it down
(``cannot-delete-default``, ``cross-department-forbidden``...). The HTTP
layer maps ``status_code`` straight onto the response.
"""

from __future__ import annotations

from typing import Optional


class CoreError(RuntimeError):
    """Base class for failures reported to callers of the core."""

    code = "core-error"
    status_code = 500

    def __init__(self, message: str, *, reason: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.reason = reason


class NotFoundError(CoreError):
    """Referenced student or group does not exist."""

    code = "not-found"
    status_code = 404


class ForbiddenError(CoreError):
    """Authorization denied."""

    code = "forbidden"
    status_code = 403


class InvalidRequestError(CoreError):
    """Malformed input or an operation the data model never allows."""

    code = "invalid-request"
    status_code = 422


class ConflictError(CoreError):
    """Structural conflict with concurrent changes."""

    code = "conflict"
    status_code = 409


class StoreUnavailableError(CoreError):
    """The underlying persistence layer failed."""

    code = "store-unavailable"
    status_code = 503


__all__ = [
    "CoreError",
    "NotFoundError",
    "ForbiddenError",
    "InvalidRequestError",
    "ConflictError",
    "StoreUnavailableError",
]
