"""도메인 클래스 기반 Elasticsearch 문서 연산.

각 연산은 QueryStructure로 요청을 정규화한 뒤 AsyncElasticsearch에 그대로 위임합니다.
조회 결과의 `_source`는 DocumentMapper로 도메인 객체로 변환합니다.

Usage:
    >>> core = Core(es, CoreOptions(index_prefix="dev_"))
    >>> await core.index(user)
    >>> await core.index(User, "id", {"name": "Bob"})
    >>> resp, user = await core.get(User, "id")
    >>> resp, users = await core.search(User, query={"match_all": {}})
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from elasticsearch import AsyncElasticsearch

from .bulk import BulkPipeline, DocumentSource
from .config import CoreOptions
from .errors import DocumentMissingError, IdMissingError
from .mapper import dump, reconstruct
from .query import QueryStructure, resolve_query_structure
from .registry import MetadataStore, metadata_store


class Core:
    """인덱스 클래스 단위의 문서 CRUD/검색."""

    def __init__(
        self,
        es: AsyncElasticsearch,
        options: CoreOptions | None = None,
        store: MetadataStore = metadata_store,
    ):
        self.es = es
        self.options = options or CoreOptions()
        self.store = store

    def _resolve(self, doc_or_class: Any, doc_or_id: Any = None, doc: Any = None) -> QueryStructure:
        return resolve_query_structure(self.options, doc_or_class, doc_or_id, doc, self.store)

    def _require_document(self, params: QueryStructure) -> dict[str, Any]:
        if params.document is None:
            raise DocumentMissingError(f"Document is missing for {params.cls.__name__}")
        return dump(params.cls, params.document, self.store)

    def _index_name(self, cls: type) -> str:
        return self.store.get_index_descriptor(cls, index_prefix=self.options.index_prefix).index

    async def close(self) -> None:
        """연결 종료."""
        await self.es.close()

    async def bulk_index(self, cls: type, documents_or_stream: DocumentSource) -> int:
        """여러 문서를 청크 단위로 bulk 색인. 전송한 문서 수 반환."""
        pipeline = BulkPipeline(self.es, self.options, cls, store=self.store)
        return await pipeline.run(documents_or_stream)

    async def count(self, cls_or_params: type | Mapping[str, Any] | None = None, **params: Any) -> Any:
        """문서 수 조회. 클래스를 주면 해당 인덱스로 한정하고, dict를 주면 요청 파라미터로 사용."""
        if isinstance(cls_or_params, Mapping):
            params = {**cls_or_params, **params}
        elif cls_or_params is not None:
            params = {"index": self._index_name(cls_or_params), **params}
        return await self.es.count(**params)

    async def create(self, doc_or_class: Any, doc_or_id: Any = None, doc: Any = None) -> Any:
        """새 문서 생성. 같은 id의 문서가 있으면 ES가 conflict 오류를 반환합니다.

        Usage:
            create(user)
            create(user, "id")
            create(User, {"id": "id", "name": "Bob"})
            create(User, "id", {"name": "Bob"})
        """
        params = self._resolve(doc_or_class, doc_or_id, doc)
        document = self._require_document(params)
        return await self.es.create(index=params.index, id=params.id, document=document)

    async def delete(self, doc_or_class: Any, doc_id: str | None = None) -> Any:
        """id 기준 문서 삭제."""
        params = self._resolve(doc_or_class, doc_id)
        if not params.id:
            raise IdMissingError(f"ID is missing when deleting a {params.cls.__name__}")
        return await self.es.delete(index=params.index, id=params.id)

    async def get(self, cls: type, id_or_params: str | Mapping[str, Any]) -> tuple[Any, Any]:
        """id로 단일 문서 조회.

        Returns:
            (ES 응답, 재구성된 인스턴스)
        """
        params: dict[str, Any] = {"index": self._index_name(cls)}
        if isinstance(id_or_params, str):
            params["id"] = id_or_params
        else:
            params.update(id_or_params)
        resp = await self.es.get(**params)
        return resp, reconstruct(cls, resp.get("_source"), self.store)

    def get_indices(self) -> list[type]:
        """인덱스가 선언된 모든 클래스."""
        return self.store.indexed_classes()

    async def index(self, doc_or_class: Any, doc_or_id: Any = None, doc: Any = None) -> Any:
        """문서 색인 (upsert). id가 없으면 ES가 생성합니다."""
        params = self._resolve(doc_or_class, doc_or_id, doc)
        document = self._require_document(params)
        return await self.es.index(index=params.index, id=params.id or None, document=document)

    def _documents(self, cls: type, resp: Any) -> list[Any]:
        return [reconstruct(cls, hit.get("_source"), self.store) for hit in resp["hits"]["hits"]]

    async def scroll(self, cls: type, **params: Any) -> tuple[Any, list[Any]]:
        """search(scroll=...) 이후 다음 결과 묶음 조회."""
        resp = await self.es.scroll(**params)
        return resp, self._documents(cls, resp)

    async def search(self, cls: type, **params: Any) -> tuple[Any, list[Any]]:
        """검색 후 hit들을 인스턴스로 변환."""
        resp = await self.es.search(index=self._index_name(cls), **params)
        return resp, self._documents(cls, resp)

    async def update(self, doc_or_class: Any, doc_or_id: Any = None, doc: Any = None) -> Any:
        """부분 문서 업데이트. id 필수.

        Usage:
            update(user)
            update(User, {"id": "id", "name": "Bob"})
            update(user, "id")
            update(User, "id", {"name": "Bob"})
        """
        params = self._resolve(doc_or_class, doc_or_id, doc)
        document = self._require_document(params)
        if not params.id:
            raise IdMissingError(f"ID is missing when updating a {params.cls.__name__}")
        return await self.es.update(index=params.index, id=params.id, doc=document)
