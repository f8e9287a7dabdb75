"""인덱스 관리 연산 (생성/삭제/매핑)."""

from __future__ import annotations

import logging
from typing import Any

from elasticsearch import AsyncElasticsearch

from .config import CoreOptions
from .registry import IndexDescriptor, MetadataStore, metadata_store
from .schema import mapping_body

logger = logging.getLogger(__name__)


class Indices:
    """인덱스 클래스 단위의 인덱스 관리."""

    def __init__(
        self,
        es: AsyncElasticsearch,
        options: CoreOptions | None = None,
        store: MetadataStore = metadata_store,
    ):
        self.es = es
        self.options = options or CoreOptions()
        self.store = store

    def _descriptor(self, cls: type) -> IndexDescriptor:
        return self.store.get_index_descriptor(cls, index_prefix=self.options.index_prefix)

    async def create(self, cls: type) -> Any:
        """인덱스 생성 (선언된 settings 적용)."""
        descriptor = self._descriptor(cls)
        params: dict[str, Any] = {"index": descriptor.index}
        if descriptor.settings is not None:
            params["settings"] = descriptor.settings
        resp = await self.es.indices.create(**params)
        logger.info(f"인덱스 생성: {descriptor.index}")
        return resp

    async def delete(self, cls: type) -> Any:
        descriptor = self._descriptor(cls)
        resp = await self.es.indices.delete(index=descriptor.index)
        logger.info(f"인덱스 삭제: {descriptor.index}")
        return resp

    async def exists(self, cls: type) -> bool:
        return bool(await self.es.indices.exists(index=self._descriptor(cls).index))

    async def flush(self, cls: type, **params: Any) -> Any:
        return await self.es.indices.flush(index=self._descriptor(cls).index, **params)

    async def put_mapping(self, cls: type) -> Any:
        """클래스에 선언된 필드로 매핑 등록 (dynamic: strict)."""
        descriptor = self._descriptor(cls)
        resp = await self.es.indices.put_mapping(
            index=descriptor.index, **mapping_body(cls, self.store)
        )
        logger.info(f"매핑 등록: {descriptor.index}")
        return resp

    async def refresh(self, cls: type) -> Any:
        return await self.es.indices.refresh(index=self._descriptor(cls).index)
