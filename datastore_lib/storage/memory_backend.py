"""Simple memory-backed datastore

This backend keeps values in a dict keyed by the key string. It shares the
query pipeline with the file backend and is handy for tests.
"""
from threading import RLock
from typing import AsyncIterator, Dict

from .base import Datastore, KeyLike
from .errors import NotFoundError
from .key import Key, to_key
from .query import Entry, Query, QueryIterator


class MemoryDatastore(Datastore):
    def __init__(self) -> None:
        self._lock = RLock()
        self._store: Dict[str, bytes] = {}

    async def put(self, key: KeyLike, value: bytes) -> None:
        with self._lock:
            self._store[str(to_key(key))] = bytes(value)

    async def get(self, key: KeyLike) -> bytes:
        k = str(to_key(key))
        with self._lock:
            if k not in self._store:
                raise NotFoundError(f"No value stored for key {k}")
            return self._store[k]

    async def has(self, key: KeyLike) -> bool:
        with self._lock:
            return str(to_key(key)) in self._store

    async def delete(self, key: KeyLike) -> None:
        with self._lock:
            self._store.pop(str(to_key(key)), None)

    def _all(self, q: Query) -> AsyncIterator[Entry]:
        with self._lock:
            items = list(self._store.items())

        async def to_entry(item) -> Entry:
            k, v = item
            return Entry(Key(k), None if q.keys_only else v)

        return QueryIterator(items, to_entry)
