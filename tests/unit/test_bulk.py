"""Tests for the chunked bulk indexing pipeline."""

from __future__ import annotations

import asyncio

import pytest

from esodm.bulk import BULK_ITEMS_COUNT_MAX, BulkPipeline, BulkState, iterate_documents
from esodm.config import CoreOptions
from esodm.declarations import field, index


@pytest.fixture
def User(store):
    @index(store=store)
    class User:
        user_id = field("keyword", primary=True)
        age = field("integer")

    return User


def _pipeline(es, User, store, **kwargs):
    return BulkPipeline(es, CoreOptions(), User, store=store, **kwargs)


def _chunk_sizes(es) -> list[int]:
    # operations are (action, document) pairs
    return [len(call.kwargs["operations"]) // 2 for call in es.bulk.await_args_list]


def _collect(iterator) -> list:
    async def drain():
        return [item async for item in iterator]

    return asyncio.run(drain())


# ------------------------------------------------------------------
# Chunking
# ------------------------------------------------------------------


def test_small_list_single_chunk(es, User, store):
    docs = [{"user_id": "1", "age": 13}, {"user_id": "2", "age": 14}]
    sent = asyncio.run(_pipeline(es, User, store).run(docs))

    assert sent == 2
    es.bulk.assert_awaited_once_with(
        operations=[
            {"index": {"_index": "user", "_id": "1"}},
            {"user_id": "1", "age": 13},
            {"index": {"_index": "user", "_id": "2"}},
            {"user_id": "2", "age": 14},
        ]
    )


def test_paginates_in_order(es, User, store):
    docs = [{"age": i} for i in range(2 * BULK_ITEMS_COUNT_MAX + 1)]
    pipeline = _pipeline(es, User, store)
    asyncio.run(pipeline.run(docs))

    assert _chunk_sizes(es) == [1000, 1000, 1]
    firsts = [call.kwargs["operations"][1]["age"] for call in es.bulk.await_args_list]
    assert firsts == [0, 1000, 2000]
    assert pipeline.state is BulkState.DONE
    assert pipeline.chunks_sent == 3


def test_exact_chunk_size_sends_one_request(es, User, store):
    docs = [{"age": i} for i in range(BULK_ITEMS_COUNT_MAX)]
    asyncio.run(_pipeline(es, User, store).run(docs))
    assert _chunk_sizes(es) == [1000]


def test_empty_source_sends_nothing(es, User, store):
    assert asyncio.run(_pipeline(es, User, store).run([])) == 0
    es.bulk.assert_not_awaited()


def test_custom_chunk_size(es, User, store):
    asyncio.run(_pipeline(es, User, store, chunk_size=2).run([{"age": i} for i in range(5)]))
    assert _chunk_sizes(es) == [2, 2, 1]


def test_invalid_chunk_size(es, User, store):
    with pytest.raises(ValueError):
        _pipeline(es, User, store, chunk_size=0)


def test_async_source(es, User, store):
    async def source():
        for i in range(3):
            yield {"age": i}

    assert asyncio.run(_pipeline(es, User, store).run(source())) == 3
    assert _chunk_sizes(es) == [3]


def test_item_errors_in_response_are_not_raised(es, User, store):
    es.bulk.return_value = {"errors": True, "items": [{"index": {"error": {"type": "mapper_parsing_exception"}}}]}
    assert asyncio.run(_pipeline(es, User, store).run([{"age": "x"}])) == 1


# ------------------------------------------------------------------
# Backpressure
# ------------------------------------------------------------------


def test_source_not_pulled_while_chunk_in_flight(es, User, store):
    events: list[tuple[str, int]] = []

    async def source():
        for i in range(BULK_ITEMS_COUNT_MAX + 5):
            events.append(("pull", i))
            yield {"age": i}

    async def bulk(operations):
        events.append(("bulk-start", len(operations) // 2))
        await asyncio.sleep(0)
        events.append(("bulk-end", len(operations) // 2))
        return {"errors": False}

    es.bulk.side_effect = bulk
    asyncio.run(_pipeline(es, User, store).run(source()))

    first_end = events.index(("bulk-end", 1000))
    assert events.index(("bulk-start", 1000)) == first_end - 1
    assert events.index(("pull", 1000)) > first_end
    assert events[-1] == ("bulk-end", 5)


# ------------------------------------------------------------------
# Failures
# ------------------------------------------------------------------


def test_failed_chunk_stops_pipeline(es, User, store):
    es.bulk.side_effect = [{"errors": False}, RuntimeError("boom"), {"errors": False}]
    docs = [{"age": i} for i in range(3 * BULK_ITEMS_COUNT_MAX)]
    pipeline = _pipeline(es, User, store)

    with pytest.raises(RuntimeError, match="boom"):
        asyncio.run(pipeline.run(docs))

    assert es.bulk.await_count == 2
    assert pipeline.state is BulkState.ERROR
    assert pipeline.documents_sent == BULK_ITEMS_COUNT_MAX


def test_source_error_rejects_without_flushing(es, User, store):
    async def source():
        for i in range(5):
            yield {"age": i}
        raise OSError("stream broken")

    pipeline = _pipeline(es, User, store)
    with pytest.raises(OSError, match="stream broken"):
        asyncio.run(pipeline.run(source()))

    es.bulk.assert_not_awaited()
    assert pipeline.state is BulkState.ERROR


def test_source_closed_on_failure(es, User, store):
    state = {"pulled": 0, "closed": False}

    async def source():
        try:
            for i in range(5 * BULK_ITEMS_COUNT_MAX):
                state["pulled"] += 1
                yield {"age": i}
        finally:
            state["closed"] = True

    es.bulk.side_effect = RuntimeError("boom")
    with pytest.raises(RuntimeError):
        asyncio.run(_pipeline(es, User, store).run(source()))

    assert state["closed"]
    assert state["pulled"] == BULK_ITEMS_COUNT_MAX


def test_sync_generator_source_closed_on_failure(es, User, store):
    state = {"closed": False}

    def source():
        try:
            for i in range(5 * BULK_ITEMS_COUNT_MAX):
                yield {"age": i}
        finally:
            state["closed"] = True

    es.bulk.side_effect = RuntimeError("boom")
    with pytest.raises(RuntimeError):
        asyncio.run(_pipeline(es, User, store).run(source()))

    assert state["closed"]


def test_build_error_is_propagated(es, store):
    class Unindexed:
        pass

    with pytest.raises(LookupError):
        asyncio.run(BulkPipeline(es, CoreOptions(), Unindexed, store=store).run([{"a": 1}]))
    es.bulk.assert_not_awaited()


# ------------------------------------------------------------------
# iterate_documents
# ------------------------------------------------------------------


def test_iterate_documents_copies_list():
    docs = [1, 2]
    iterator = iterate_documents(docs)
    docs.append(3)
    docs[0] = 99
    assert _collect(iterator) == [1, 2]


def test_iterate_documents_generator():
    assert _collect(iterate_documents(i for i in range(3))) == [0, 1, 2]
