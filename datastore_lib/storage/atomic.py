"""Crash-safe single file writes.

Data is written to a temporary sibling of the target, flushed and fsynced,
then moved into place with `os.replace`. Readers therefore see either the
previous content or the new content, never a partial file.
"""
from __future__ import annotations
import itertools
import logging
import os

import aiofiles
import aiofiles.os

from datastore_lib.config import TMP_SUFFIX

logger = logging.getLogger(__name__)

_counter = itertools.count()
_fsync = aiofiles.os.wrap(os.fsync)


async def mkdirp(path: str) -> None:
    """Create `path` and any missing parents. Existing directories are fine."""
    await aiofiles.os.makedirs(path, exist_ok=True)


def is_rename_collision(err: BaseException) -> bool:
    """True when a rename failed because the destination is already there.

    Windows refuses to replace a file another writer has just created (or
    still has open) and reports it as access denied; POSIX never raises this
    for `os.replace`. Callers treat it as "someone else already wrote it".
    """
    return isinstance(err, (PermissionError, FileExistsError))


def _tmp_path(path: str) -> str:
    return f"{path}.{os.getpid()}.{next(_counter)}{TMP_SUFFIX}"


async def _discard(tmp: str) -> None:
    try:
        await aiofiles.os.remove(tmp)
    except FileNotFoundError:
        pass
    except OSError:
        logger.debug("Could not remove temporary file %s", tmp, exc_info=True)


async def write_atomic(path: str, data: bytes) -> None:
    """Atomically replace the content of `path` with `data`.

    Parent directories are created as needed. When the final rename loses
    a race against a concurrent writer of the same path, the write counts
    as done as long as the destination exists and is writable.
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError(f"value must be bytes-like, not {type(data).__name__}")
    payload = bytes(data)
    await mkdirp(os.path.dirname(path))
    tmp = _tmp_path(path)
    try:
        async with aiofiles.open(tmp, "xb") as f:
            await f.write(payload)
            await f.flush()
            await _fsync(f.fileno())
    except BaseException:
        await _discard(tmp)
        raise

    try:
        await aiofiles.os.replace(tmp, path)
    except OSError as err:
        await _discard(tmp)
        if is_rename_collision(err) and await aiofiles.os.access(path, os.F_OK | os.W_OK):
            logger.warning("Rename onto %s collided with a concurrent write; keeping existing file", path)
            return
        raise
    except BaseException:
        await _discard(tmp)
        raise
    logger.debug("Wrote %d bytes to %s", len(payload), path)
