from typing import Any, AsyncIterator, Protocol, runtime_checkable

from .key import Key
from .query import Entry


@runtime_checkable
class DatastoreProtocol(Protocol):
    """Datastore protocol mirroring `datastore_lib.storage.base.Datastore`.

    Implementations should follow the semantics documented on the abstract
    base class (NotFoundError for missing keys, idempotent delete, `has`
    never raising, etc.).
    """

    async def open(self) -> None: ...

    async def close(self) -> None: ...

    async def put(self, key: Key, value: bytes) -> None: ...

    async def get(self, key: Key) -> bytes: ...

    async def has(self, key: Key) -> bool: ...

    async def delete(self, key: Key) -> None: ...

    def query(self, q: Any = None, **kwargs: Any) -> AsyncIterator[Entry]: ...
