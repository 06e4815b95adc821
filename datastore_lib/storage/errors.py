"""Error types raised by datastore implementations.

Every error carries a stable `code` string so callers can branch on the
kind of failure without matching class names. The original exception is
kept as `__cause__` (callers raise these with ``raise ... from err``).
"""
from __future__ import annotations
from typing import Optional


class DatastoreError(Exception):
    code = "ERR_DATASTORE"

    def __init__(self, message: str = "", cause: Optional[BaseException] = None) -> None:
        if not message and cause is not None:
            message = str(cause)
        super().__init__(message or self.code)
        self.cause = cause

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0]) if self.args else self.code


class NotFoundError(DatastoreError, KeyError):
    """Key (or datastore root) does not exist or cannot be read.

    Subclasses `KeyError` so code written against the plain storage
    backends (`except KeyError`) keeps working.
    """

    code = "ERR_NOT_FOUND"


class DBOpenFailedError(DatastoreError):
    code = "ERR_DB_OPEN_FAILED"


class WriteFailedError(DatastoreError):
    code = "ERR_DB_WRITE_FAILED"


class DeleteFailedError(DatastoreError):
    code = "ERR_DB_DELETE_FAILED"


class InvalidEncodingError(DatastoreError, ValueError):
    """A file path could not be mapped back to a key."""

    code = "ERR_INVALID_ENCODING"


__all__ = [
    "DatastoreError",
    "NotFoundError",
    "DBOpenFailedError",
    "WriteFailedError",
    "DeleteFailedError",
    "InvalidEncodingError",
]
