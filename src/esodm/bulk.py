"""청크 단위 bulk 색인 파이프라인.

소스(리스트 또는 async iterable)에서 문서를 읽어 BULK_ITEMS_COUNT_MAX개씩 모아 전송합니다.

보장 사항:
    - 전송 중인 청크는 항상 최대 1개 (청크 전송이 끝나야 소스를 다시 읽음)
    - 청크 순서 보존 (k번째 전송 완료 전에는 k+1번째를 만들지 않음)
    - 첫 오류에서 중단: 이후 문서는 읽지도 보내지도 않고 오류를 그대로 전파
    - 종료 경로와 무관하게 소스 iterator를 닫음

Usage:
    >>> pipeline = BulkPipeline(es, CoreOptions(), User)
    >>> await pipeline.run(users)            # list
    >>> await pipeline.run(read_users())     # async generator
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterable, AsyncIterator, Iterable, Sequence
from enum import Enum
from typing import Any

from elasticsearch import AsyncElasticsearch

from .config import CoreOptions
from .query import build_bulk_query
from .registry import MetadataStore, metadata_store

logger = logging.getLogger(__name__)

BULK_ITEMS_COUNT_MAX = 1000

DocumentSource = Iterable[Any] | AsyncIterable[Any]


class BulkState(str, Enum):
    STREAMING = "streaming"
    FLUSHING = "flushing"
    DONE = "done"
    ERROR = "error"


async def _iterate(items: Iterable[Any]) -> AsyncIterator[Any]:
    iterator = iter(items)
    try:
        for item in iterator:
            yield item
    finally:
        # aclose() 시 동기 generator 소스도 함께 닫음
        close = getattr(iterator, "close", None)
        if close is not None:
            close()


def iterate_documents(documents: Iterable[Any]) -> AsyncIterator[Any]:
    """동기 iterable을 async iterator로 변환.

    Sequence는 즉시 복사하므로, 변환 이후 호출자의 리스트를 수정해도 영향이 없습니다.
    """
    items = list(documents) if isinstance(documents, Sequence) else documents
    return _iterate(items)


def _as_async_iterator(source: DocumentSource) -> AsyncIterator[Any]:
    if isinstance(source, AsyncIterable):
        return aiter(source)
    return iterate_documents(source)


async def _close(stream: AsyncIterator[Any]) -> None:
    aclose = getattr(stream, "aclose", None)
    if aclose is not None:
        await aclose()


class BulkPipeline:
    """단일 클래스 문서를 청크 단위로 bulk 전송."""

    def __init__(
        self,
        es: AsyncElasticsearch,
        options: CoreOptions,
        cls: type,
        *,
        action: str = "index",
        chunk_size: int = BULK_ITEMS_COUNT_MAX,
        store: MetadataStore = metadata_store,
    ):
        if chunk_size < 1:
            raise ValueError(f"chunk_size는 1 이상이어야 합니다: {chunk_size}")
        self.es = es
        self.options = options
        self.cls = cls
        self.action = action
        self.chunk_size = chunk_size
        self.store = store

        self.state = BulkState.STREAMING
        self.chunks_sent = 0
        self.documents_sent = 0

    async def _flush(self, items: list[Any]) -> None:
        """버퍼를 비우고 하나의 bulk 요청으로 전송. 빈 버퍼면 아무것도 보내지 않음."""
        if not items:
            return

        self.state = BulkState.FLUSHING
        chunk = items[:]
        items.clear()

        operations = build_bulk_query(self.options, self.action, self.cls, chunk, self.store)
        resp = await self.es.bulk(operations=operations)
        if resp.get("errors"):
            failed = sum(1 for item in resp.get("items", []) if item.get(self.action, {}).get("error"))
            logger.warning(
                f"bulk 청크 #{self.chunks_sent + 1}: {failed}/{len(chunk)}건 실패 ({self.cls.__name__})"
            )

        self.chunks_sent += 1
        self.documents_sent += len(chunk)
        logger.debug(f"bulk 청크 #{self.chunks_sent} 전송 완료: {len(chunk)}건 ({self.cls.__name__})")
        self.state = BulkState.STREAMING

    async def run(self, source: DocumentSource) -> int:
        """소스를 끝까지 읽어 전송. 전송한 문서 수 반환.

        Raises:
            소스 또는 bulk 전송에서 발생한 첫 번째 예외를 그대로 전파.
        """
        stream = _as_async_iterator(source)
        items: list[Any] = []
        self.state = BulkState.STREAMING

        try:
            async for item in stream:
                items.append(item)
                if len(items) >= self.chunk_size:
                    await self._flush(items)
            await self._flush(items)
        except BaseException:
            self.state = BulkState.ERROR
            raise
        finally:
            await _close(stream)

        self.state = BulkState.DONE
        return self.documents_sent
