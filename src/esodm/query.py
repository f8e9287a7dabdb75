"""호출 형태별 요청 구조(QueryStructure) 해석과 bulk 본문 생성.

지원하는 호출 형태:
    from_instance(options, user)                     # 인스턴스
    from_instance(options, user, "id")               # 인스턴스 + id
    from_class_and_document(options, User, {...})    # 클래스 + 문서(부분 문서)
    from_class_and_id(options, User, "id", {...})    # 클래스 + id (+ 부분 문서)
    from_class(options, User)                        # 클래스만

resolve_query_structure는 위 형태를 인자 타입으로 판별하는 디스패처입니다.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from .config import CoreOptions
from .errors import MissingPrimaryKeyDefinitionError
from .mapper import dump
from .registry import IndexDescriptor, MetadataStore, metadata_store


@dataclass(frozen=True)
class QueryStructure:
    """정규화된 요청 구조. id는 항상 문자열(없으면 빈 문자열)."""

    cls: type
    id: str
    index: str
    type: str
    document: Any = None


def _descriptor(options: CoreOptions, cls: type, store: MetadataStore) -> IndexDescriptor:
    return store.get_index_descriptor(cls, index_prefix=options.index_prefix)


def _read_field(document: Any, name: str) -> Any:
    if isinstance(document, Mapping):
        return document.get(name)
    return getattr(document, name, None)


def get_id(
    options: CoreOptions,
    cls: type,
    document: Any,
    store: MetadataStore = metadata_store,
) -> Any:
    """primary 필드 값 반환.

    Raises:
        MissingPrimaryKeyDefinitionError: cls에 primary 필드가 없는 경우.
    """
    descriptor = _descriptor(options, cls, store)
    if not descriptor.primary:
        raise MissingPrimaryKeyDefinitionError(f"Primary not defined for class {cls.__name__}")
    return _read_field(document, descriptor.primary)


def _build(
    options: CoreOptions,
    cls: type,
    doc_id: str | None,
    document: Any,
    store: MetadataStore,
) -> QueryStructure:
    descriptor = _descriptor(options, cls, store)

    if not doc_id and document is not None and descriptor.primary:
        doc_id = get_id(options, cls, document, store)

    return QueryStructure(
        cls=cls,
        id=str(doc_id) if doc_id else "",
        index=descriptor.index,
        type=descriptor.type,
        document=document,
    )


def from_instance(
    options: CoreOptions,
    instance: Any,
    doc_id: str | None = None,
    store: MetadataStore = metadata_store,
) -> QueryStructure:
    return _build(options, type(instance), doc_id, instance, store)


def from_class_and_id(
    options: CoreOptions,
    cls: type,
    doc_id: str,
    document: Any = None,
    store: MetadataStore = metadata_store,
) -> QueryStructure:
    return _build(options, cls, doc_id, document, store)


def from_class_and_document(
    options: CoreOptions,
    cls: type,
    document: Any,
    store: MetadataStore = metadata_store,
) -> QueryStructure:
    return _build(options, cls, None, document, store)


def from_class(
    options: CoreOptions,
    cls: type,
    store: MetadataStore = metadata_store,
) -> QueryStructure:
    return _build(options, cls, None, None, store)


def resolve_query_structure(
    options: CoreOptions,
    doc_or_class: Any,
    doc_or_id: Any = None,
    doc: Any = None,
    store: MetadataStore = metadata_store,
) -> QueryStructure:
    """인자 타입으로 호출 형태를 판별해 QueryStructure 생성.

    판별 순서:
        1. doc_or_id가 문자열이면 id, 그 외 값이면 문서
        2. doc_or_class가 클래스면 cls, 아니면 doc_or_class 자체가 문서(1의 문서보다 우선)
        3. id가 없고 문서와 primary가 있으면 문서의 primary 필드에서 id 추출
    """
    doc_id: str | None = None
    document = doc

    if isinstance(doc_or_id, str):
        doc_id = doc_or_id
    elif doc_or_id is not None:
        document = doc_or_id

    if isinstance(doc_or_class, type):
        if doc_id:
            return from_class_and_id(options, doc_or_class, doc_id, document, store)
        if document is not None:
            return from_class_and_document(options, doc_or_class, document, store)
        return from_class(options, doc_or_class, store)

    return from_instance(options, doc_or_class, doc_id, store)


def build_bulk_query(
    options: CoreOptions,
    action: str,
    cls: type,
    documents: Iterable[Any],
    store: MetadataStore = metadata_store,
) -> list[dict[str, Any]]:
    """bulk 요청 본문 생성.

    문서마다 `{action: {"_index": ..., "_id": ...}}`와 문서 본문을 순서대로 추가합니다.
    `_id`는 primary가 선언되어 있고 문서에 값이 있을 때만 포함합니다.

    Returns:
        bulk API의 operations 리스트
    """
    descriptor = _descriptor(options, cls, store)
    body: list[dict[str, Any]] = []

    for document in documents:
        description: dict[str, Any] = {"_index": descriptor.index}
        if options.include_type:
            description["_type"] = descriptor.type
        if descriptor.primary:
            doc_id = _read_field(document, descriptor.primary)
            if doc_id:
                description["_id"] = doc_id
        body.append({action: description})
        body.append(dump(cls, document, store))

    return body
