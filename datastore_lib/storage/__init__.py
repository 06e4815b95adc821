"""Datastore abstraction package."""

from .base import Batch, Datastore
from .errors import (
    DatastoreError,
    DBOpenFailedError,
    DeleteFailedError,
    InvalidEncodingError,
    NotFoundError,
    WriteFailedError,
)
from .file_backend import FileDatastore
from .key import Key
from .memory_backend import MemoryDatastore
from .query import Entry, Query

__all__ = [
    "Batch",
    "Datastore",
    "DatastoreError",
    "DBOpenFailedError",
    "DeleteFailedError",
    "Entry",
    "FileDatastore",
    "InvalidEncodingError",
    "Key",
    "MemoryDatastore",
    "NotFoundError",
    "Query",
    "WriteFailedError",
]
