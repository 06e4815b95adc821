"""File system backed key-value datastore."""

from datastore_lib.config import DatastoreConfig, DatastoreOptions
from datastore_lib.storage import FileDatastore, Key, MemoryDatastore, Query

__version__ = "0.1.0"

__all__ = ["DatastoreConfig", "DatastoreOptions", "FileDatastore", "Key", "MemoryDatastore", "Query"]
