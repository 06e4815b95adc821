"""Query types and the async iteration helpers used by every datastore.

`Datastore.query()` builds a pipeline on top of a backend's raw entry
stream: prefix -> filters -> orders -> offset -> limit. The helpers here
implement those stages over async iterables.
"""
from __future__ import annotations
import inspect
from dataclasses import dataclass, field
from typing import (
    Any,
    AsyncIterable,
    AsyncIterator,
    Awaitable,
    Callable,
    Generic,
    Iterable,
    List,
    Optional,
    Sequence,
    TypeVar,
    Union,
)

from .key import Key

T = TypeVar("T")

Filter = Callable[["Entry"], Union[bool, Awaitable[bool]]]
Order = Callable[[List["Entry"]], Union[List["Entry"], Awaitable[List["Entry"]]]]


@dataclass(frozen=True)
class Entry:
    key: Key
    value: Optional[bytes] = None

    def __iter__(self):
        # allows ``key, value = entry``
        return iter((self.key, self.value))


@dataclass
class Query:
    prefix: Optional[str] = None
    keys_only: bool = False
    filters: Sequence[Filter] = field(default_factory=tuple)
    orders: Sequence[Order] = field(default_factory=tuple)
    offset: Optional[int] = None
    limit: Optional[int] = None


class QueryIterator(Generic[T]):
    """Single-pass async iterator over a pre-resolved snapshot.

    `items` is fixed when the iterator is created. Each step converts one
    item with `to_entry`, so at most one read happens per advancement and
    nothing is held open between steps. Stopping early needs no cleanup.
    """

    def __init__(self, items: Sequence[T], to_entry: Callable[[T], Awaitable[Entry]]) -> None:
        self._items = list(items)
        self._to_entry = to_entry
        self._pos = 0

    def __len__(self) -> int:
        return len(self._items)

    def __aiter__(self) -> "QueryIterator[T]":
        return self

    async def __anext__(self) -> Entry:
        if self._pos >= len(self._items):
            raise StopAsyncIteration
        item = self._items[self._pos]
        self._pos += 1
        return await self._to_entry(item)


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


async def aiter_of(source: Union[Iterable[T], AsyncIterable[T]]) -> AsyncIterator[T]:
    """Iterate a sync or async iterable asynchronously."""
    if hasattr(source, "__aiter__"):
        async for item in source:  # type: ignore[union-attr]
            yield item
    else:
        for item in source:  # type: ignore[union-attr]
            yield item


async def filter_entries(source: AsyncIterable[Entry], predicate: Filter) -> AsyncIterator[Entry]:
    async for entry in source:
        if await _maybe_await(predicate(entry)):
            yield entry


async def order_entries(source: AsyncIterable[Entry], order: Order) -> AsyncIterator[Entry]:
    # ordering needs the whole stream
    entries = [entry async for entry in source]
    for entry in await _maybe_await(order(entries)):
        yield entry


async def skip(source: AsyncIterable[T], count: int) -> AsyncIterator[T]:
    seen = 0
    async for item in source:
        if seen >= count:
            yield item
        seen += 1


async def take(source: AsyncIterable[T], limit: int) -> AsyncIterator[T]:
    if limit <= 0:
        return
    taken = 0
    async for item in source:
        yield item
        taken += 1
        if taken >= limit:
            return


def prefix_filter(prefix: str) -> Filter:
    def _match(entry: Entry) -> bool:
        return str(entry.key).startswith(prefix)
    return _match


def sort_by_key(descending: bool = False) -> Order:
    """Order entries by key segments."""
    def _sort(entries: List[Entry]) -> List[Entry]:
        return sorted(entries, key=lambda e: e.key, reverse=descending)
    return _sort


def sort_by_value(descending: bool = False) -> Order:
    def _sort(entries: List[Entry]) -> List[Entry]:
        return sorted(entries, key=lambda e: e.value or b"", reverse=descending)
    return _sort


async def collect(source: Union[Iterable[T], AsyncIterable[T]]) -> List[T]:
    return [item async for item in aiter_of(source)]


async def drain(source: AsyncIterable[Any]) -> None:
    async for _ in source:
        pass
