"""Datastore interface definitions.

Defines the `Datastore` abstract class shared by every backend. Concrete
backends implement the primitive operations (`put`, `get`, `has`, `delete`
and the raw entry stream `_all`); bulk operations, batches and the query
pipeline are derived here so all backends behave the same way.
"""
from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from typing import Any, AsyncIterable, AsyncIterator, Iterable, List, Tuple, Union

from .key import Key, to_key
from .query import (
    Entry,
    Query,
    aiter_of,
    drain,
    filter_entries,
    order_entries,
    prefix_filter,
    skip,
    take,
)

logger = logging.getLogger(__name__)

KeyLike = Union[Key, str]
PairLike = Union[Entry, Tuple[KeyLike, bytes]]


class Datastore(ABC):
    """Abstract async key-value datastore.

    Implementations keep no cache; every call goes to the backing store.
    """

    async def open(self) -> None:
        """Prepare the datastore for use. No-op by default."""

    async def close(self) -> None:
        """Release resources. No-op by default."""

    async def __aenter__(self):
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @abstractmethod
    async def put(self, key: KeyLike, value: bytes) -> None:
        """Store `value` under `key`, replacing any previous value."""

    @abstractmethod
    async def get(self, key: KeyLike) -> bytes:
        """Return the value for `key`. Raise `NotFoundError` if missing."""

    @abstractmethod
    async def has(self, key: KeyLike) -> bool:
        """Return True if `key` exists. Never raises."""

    @abstractmethod
    async def delete(self, key: KeyLike) -> None:
        """Remove `key`. Removing a missing key is not an error."""

    @abstractmethod
    def _all(self, q: Query) -> AsyncIterator[Entry]:
        """Return the raw, unfiltered entry stream for `q`.

        Backends may use `q.prefix` and `q.keys_only` to narrow the work;
        the remaining query stages are applied by `query`.
        """

    async def put_many(self, source: Union[Iterable[PairLike], AsyncIterable[PairLike]]) -> AsyncIterator[Entry]:
        async for pair in aiter_of(source):
            key, value = pair
            entry = Entry(to_key(key), value)
            await self.put(entry.key, value)
            yield entry

    async def get_many(self, source: Union[Iterable[KeyLike], AsyncIterable[KeyLike]]) -> AsyncIterator[bytes]:
        async for key in aiter_of(source):
            yield await self.get(key)

    async def delete_many(self, source: Union[Iterable[KeyLike], AsyncIterable[KeyLike]]) -> AsyncIterator[Key]:
        async for key in aiter_of(source):
            key = to_key(key)
            await self.delete(key)
            yield key

    def batch(self) -> "Batch":
        return Batch(self)

    def query(self, q: Query | None = None, **kwargs: Any) -> AsyncIterator[Entry]:
        """Return an async iterator of entries matching `q`.

        Accepts a `Query` or its fields as keyword arguments, e.g.
        ``store.query(prefix="/a", keys_only=True)``.
        """
        if q is None:
            q = Query(**kwargs)
        elif kwargs:
            raise TypeError("pass either a Query or keyword arguments, not both")

        it: AsyncIterator[Entry] = self._all(q)
        if q.prefix is not None:
            it = filter_entries(it, prefix_filter(q.prefix))
        for f in q.filters:
            it = filter_entries(it, f)
        for order in q.orders:
            it = order_entries(it, order)
        if q.offset is not None:
            it = skip(it, q.offset)
        if q.limit is not None:
            it = take(it, q.limit)
        return it


class Batch:
    """Collects puts and deletes and applies them on `commit`.

    Puts are applied before deletes. There is no atomicity across keys:
    a failure part-way leaves the earlier operations applied.
    """

    def __init__(self, store: Datastore) -> None:
        self._store = store
        self._puts: List[Entry] = []
        self._deletes: List[Key] = []

    def put(self, key: KeyLike, value: bytes) -> None:
        self._puts.append(Entry(to_key(key), value))

    def delete(self, key: KeyLike) -> None:
        self._deletes.append(to_key(key))

    def __len__(self) -> int:
        return len(self._puts) + len(self._deletes)

    async def commit(self) -> None:
        logger.debug("Committing batch: %d puts, %d deletes", len(self._puts), len(self._deletes))
        await drain(self._store.put_many(self._puts))
        self._puts = []
        await drain(self._store.delete_many(self._deletes))
        self._deletes = []
