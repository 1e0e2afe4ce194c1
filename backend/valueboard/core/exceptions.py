"""Custom exceptions for the Valueboard application."""

from __future__ import annotations


class ValueboardError(Exception):
    """Base exception for all Valueboard errors."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFoundError(ValueboardError):
    """Raised when a collection or record lookup misses."""

    pass


class PersistenceError(ValueboardError):
    """Raised when the storage backend fails to create, save or delete."""

    pass


class ValidationError(PersistenceError):
    """Raised when a record or collection is rejected by host validation."""

    pass


class MigrationError(ValueboardError):
    """Raised when a migration step fails.

    The failing step is named in ``details["step"]`` and the underlying
    error is chained as ``__cause__``.
    """

    pass


class AccessDeniedError(ValueboardError):
    """Raised when a collection access rule denies the request."""

    pass
