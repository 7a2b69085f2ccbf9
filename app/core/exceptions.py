"""Typed application errors.

Every user-facing failure of a job mutation is one of these.  The handler in
``app.main`` renders them as ``{"success": false, "errors": [...]}`` with the
status code carried by the exception.
"""

from typing import Any


class AppException(Exception):
    """Base class for errors surfaced to API callers."""

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        error_code: str = "BUSINESS_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)


class Unauthenticated(AppException):
    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(
            message=message,
            status_code=401,
            error_code="UNAUTHENTICATED",
        )


class Unauthorized(AppException):
    def __init__(self, message: str = "Not authorized") -> None:
        super().__init__(
            message=message,
            status_code=403,
            error_code="UNAUTHORIZED",
        )


class ValidationError(AppException):
    """Input rejected before anything was persisted.

    ``fields`` names every offending field so the UI can highlight them all.
    """

    def __init__(self, fields: list[str], message: str | None = None) -> None:
        self.fields = list(fields)
        if message is None:
            message = f"Invalid or missing fields: {', '.join(self.fields)}"
        super().__init__(
            message=message,
            status_code=422,
            error_code="VALIDATION_ERROR",
            details={"fields": self.fields},
        )


class PersistenceError(AppException):
    def __init__(self, message: str = "Failed to save job. Please try again.") -> None:
        super().__init__(
            message=message,
            status_code=500,
            error_code="PERSISTENCE_ERROR",
        )


class InvalidUrlError(ValueError):
    """Raised by the strict URL intake check."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"Not a valid absolute URL: {url!r}")


class ConfigurationError(RuntimeError):
    """An outbound integration is missing the settings it needs."""
