"""File system backed datastore.

Each key is stored as one file: ``<root>/<parent path>/<leaf><extension>``.
The directory tree mirrors the key hierarchy and is the only index; there
is no manifest or in-memory cache.

Keys are used verbatim as paths, so they need to be sanitized before use.
"""
from __future__ import annotations
import glob
import logging
import os
from typing import Any, AsyncIterator, List, Optional, Tuple

import aiofiles
import aiofiles.os

from datastore_lib.config import DatastoreOptions, merge_options
from .atomic import mkdirp, write_atomic
from .base import Datastore, KeyLike
from .errors import (
    DBOpenFailedError,
    DeleteFailedError,
    InvalidEncodingError,
    NotFoundError,
    WriteFailedError,
)
from .key import PATH_SEP, Key, to_key
from .query import Entry, Query, QueryIterator

logger = logging.getLogger(__name__)


class FileDatastore(Datastore):
    def __init__(self, location: str | os.PathLike, options: Optional[DatastoreOptions] = None, **overrides: Any) -> None:
        self.path = os.path.abspath(os.fspath(location))
        opts = options or DatastoreOptions()
        if overrides:
            opts = merge_options(opts, **overrides)
        self.options = opts

    @property
    def extension(self) -> str:
        return self.options.extension

    def __repr__(self) -> str:
        return f"FileDatastore({self.path!r})"

    async def open(self) -> None:
        if await aiofiles.os.path.exists(self.path):
            if self.options.error_if_exists:
                raise DBOpenFailedError(f"Datastore directory: {self.path} already exists")
            return
        if not self.options.create_if_missing:
            raise NotFoundError(f"Datastore directory: {self.path} does not exist")
        await mkdirp(self.path)
        logger.info("Created datastore directory %s", self.path)

    def _encode(self, key: Key) -> Tuple[str, str]:
        """Return the directory and file path for `key`."""
        parent = str(key.parent())
        dir_ = os.path.join(self.path, *parent.split(PATH_SEP)[1:]) if parent != PATH_SEP else self.path
        name = str(key)[len(parent):].lstrip(PATH_SEP)
        file = os.path.join(dir_, name + self.extension)
        return dir_, file

    def _decode(self, file: str) -> Key:
        """Map a file path produced by `_encode` back to its key."""
        ext = self.extension
        actual = os.path.splitext(file)[1]
        if actual != ext:
            raise InvalidEncodingError(f"Invalid extension: {actual}")
        keyname = file[len(self.path):len(file) - len(ext)]
        return Key(PATH_SEP.join(keyname.split(os.sep)))

    def _raw_file(self, key: Key) -> Tuple[str, str]:
        dir_, file = self._encode(key)
        return dir_, file[: -len(self.extension)]

    async def put(self, key: KeyLike, value: bytes) -> None:
        _, file = self._encode(to_key(key))
        await self._write(file, value)

    async def put_raw(self, key: KeyLike, value: bytes) -> None:
        """Like `put` but writes to the key path without the extension."""
        _, file = self._raw_file(to_key(key))
        await self._write(file, value)

    async def _write(self, file: str, value: bytes) -> None:
        try:
            await write_atomic(file, value)
        except Exception as err:
            raise WriteFailedError(cause=err) from err

    async def get(self, key: KeyLike) -> bytes:
        _, file = self._encode(to_key(key))
        return await self._read(file)

    async def get_raw(self, key: KeyLike) -> bytes:
        """Like `get` but reads the key path without the extension."""
        _, file = self._raw_file(to_key(key))
        return await self._read(file)

    async def _read(self, file: str) -> bytes:
        try:
            async with aiofiles.open(file, "rb") as f:
                data = await f.read()
        except (OSError, ValueError) as err:
            raise NotFoundError(cause=err) from err
        logger.debug("Read %d bytes from %s", len(data), file)
        return data

    async def has(self, key: KeyLike) -> bool:
        # any access problem reads as "not present"
        try:
            _, file = self._encode(to_key(key))
            return await aiofiles.os.access(file, os.F_OK)
        except (OSError, ValueError):
            return False

    async def delete(self, key: KeyLike) -> None:
        _, file = self._encode(to_key(key))
        try:
            await aiofiles.os.remove(file)
        except FileNotFoundError:
            return
        except (OSError, ValueError) as err:
            raise DeleteFailedError(cause=err) from err
        logger.debug("Deleted %s", file)

    def _pattern(self, prefix: Optional[str]) -> str:
        # glob works on POSIX style paths; escape everything except the wildcards
        parts = [glob.escape(self.path)]
        if prefix:
            stripped = prefix.strip(PATH_SEP)
            if stripped:
                parts.append(glob.escape(stripped))
        parts.append("**")
        parts.append("*" + glob.escape(self.extension))
        return "/".join(p.replace(os.sep, "/") for p in parts)

    def _files(self, prefix: Optional[str]) -> List[str]:
        pattern = self._pattern(prefix)
        files = [os.path.normpath(f) for f in glob.glob(pattern, recursive=True)]
        logger.debug("Query pattern %s matched %d files", pattern, len(files))
        return [f for f in files if os.path.isfile(f)]

    def _all(self, q: Query) -> AsyncIterator[Entry]:
        files = self._files(q.prefix)

        if q.keys_only:
            async def to_entry(f: str) -> Entry:
                return Entry(self._decode(f))
        else:
            async def to_entry(f: str) -> Entry:
                key = self._decode(f)
                return Entry(key, await self._read(f))

        return QueryIterator(files, to_entry)
