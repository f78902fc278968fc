"""Error taxonomy shared by the directory service and its HTTP layer."""
from __future__ import annotations


class DirectoryError(Exception):
    """Base class for failures reported to API callers."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(DirectoryError):
    """Raised when a payload is missing fields or is malformed."""

    status_code = 400


class ConflictError(DirectoryError):
    """Raised when a uniqueness constraint would be violated."""

    status_code = 409


class NotFoundError(DirectoryError):
    """Raised when no row matches the requested id."""

    status_code = 404


class StorageError(DirectoryError):
    """Raised for store failures unrelated to validation."""

    status_code = 500


__all__ = [
    "ConflictError",
    "DirectoryError",
    "NotFoundError",
    "StorageError",
    "ValidationError",
]
