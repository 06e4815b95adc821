import asyncio

import pytest

from datastore_lib.storage import Key, MemoryDatastore, Query
from datastore_lib.storage.query import (
    Entry,
    QueryIterator,
    collect,
    skip,
    sort_by_key,
    sort_by_value,
    take,
)


async def _seed(store, keys):
    for k in keys:
        await store.put(k, k.encode())


def test_query_iterator_is_single_pass_and_lazy():
    calls = []

    async def to_entry(item):
        calls.append(item)
        return Entry(Key(item))

    async def scenario():
        it = QueryIterator(['/a', '/b', '/c'], to_entry)
        assert len(it) == 3
        assert calls == []
        first = await it.__anext__()
        assert first.key == Key('/a')
        assert calls == ['/a']
        rest = [e async for e in it]
        assert [str(e.key) for e in rest] == ['/b', '/c']
        # exhausted iterators stay exhausted
        assert [e async for e in it] == []

    asyncio.run(scenario())


def test_entry_unpacks_as_pair():
    key, value = Entry(Key('/a'), b'1')
    assert key == Key('/a')
    assert value == b'1'


def test_orders_offset_limit():
    async def scenario():
        store = MemoryDatastore()
        await _seed(store, ['/c', '/a', '/d', '/b'])
        q = Query(orders=(sort_by_key(),), offset=1, limit=2)
        got = [str(e.key) for e in await collect(store.query(q))]
        assert got == ['/b', '/c']

        desc = [str(e.key) for e in await collect(store.query(orders=(sort_by_key(descending=True),)))]
        assert desc == ['/d', '/c', '/b', '/a']

        by_value = [e.value for e in await collect(store.query(orders=(sort_by_value(),)))]
        assert by_value == [b'/a', b'/b', b'/c', b'/d']

    asyncio.run(scenario())


def test_sync_and_async_filters():
    async def is_not_b(entry):
        return entry.key != Key('/b')

    async def scenario():
        store = MemoryDatastore()
        await _seed(store, ['/a', '/b', '/c'])
        q = Query(filters=(lambda e: e.key != Key('/a'), is_not_b))
        assert [str(e.key) for e in await collect(store.query(q))] == ['/c']

    asyncio.run(scenario())


def test_query_rejects_mixed_arguments():
    store = MemoryDatastore()
    with pytest.raises(TypeError):
        store.query(Query(), prefix='/a')


def test_skip_and_take_helpers():
    async def numbers():
        for i in range(5):
            yield i

    async def scenario():
        assert await collect(skip(numbers(), 3)) == [3, 4]
        assert await collect(take(numbers(), 2)) == [0, 1]
        assert await collect(take(numbers(), 0)) == []

    asyncio.run(scenario())


def test_bulk_operations_and_batch():
    async def scenario():
        store = MemoryDatastore()
        stored = await collect(store.put_many([('/a', b'1'), Entry(Key('/b'), b'2')]))
        assert [str(e.key) for e in stored] == ['/a', '/b']
        assert await collect(store.get_many(['/a', '/b'])) == [b'1', b'2']

        deleted = await collect(store.delete_many(['/a']))
        assert deleted == [Key('/a')]
        assert await store.has('/a') is False

        b = store.batch()
        b.put('/x', b'x')
        b.put('/y', b'y')
        b.delete('/b')
        assert len(b) == 3
        await b.commit()
        assert len(b) == 0
        assert await store.has('/x') and await store.has('/y')
        assert await store.has('/b') is False

    asyncio.run(scenario())


def test_async_context_manager():
    async def scenario():
        async with MemoryDatastore() as store:
            await store.put('/k', b'v')
            assert await store.get('/k') == b'v'

    asyncio.run(scenario())
