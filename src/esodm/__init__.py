"""Elasticsearch 객체-문서 매퍼.

클래스에 선언한 필드로 인덱스 매핑을 만들고, 조회 결과를 객체로 재구성하며,
다양한 호출 형태를 정규화된 요청으로 변환합니다.

주요 컴포넌트:
    - Declarations: index, embedded, field (스키마 선언)
    - MetadataStore: 클래스별 인덱스/필드 레지스트리
    - compile_mapping / reconstruct / dump: 매핑 생성과 문서 변환
    - ODM: 문서 연산 + 인덱스 관리
    - BulkPipeline: 청크 단위 bulk 색인

Usage:
    >>> from esodm import ODM, field, index
    >>>
    >>> @index("twitter/user")
    ... class User:
    ...     user_id = field("keyword", primary=True)
    ...     name = field("text")
    >>>
    >>> odm = ODM()
    >>> await odm.index(User, {"user_id": "007", "name": "Bob"})
"""

from esodm.bulk import BULK_ITEMS_COUNT_MAX, BulkPipeline, BulkState, iterate_documents
from esodm.client import check_connection, client_kwargs, create_es_client
from esodm.config import CoreOptions, ESConfig
from esodm.core import Core
from esodm.declarations import Field, embedded, field, index
from esodm.errors import (
    DocumentMissingError,
    DuplicateFieldError,
    DuplicatePrimaryError,
    IdMissingError,
    IndexUndefinedError,
    MissingIndexError,
    MissingPrimaryKeyDefinitionError,
    MissingPropertiesError,
    ODMError,
    RegistryFrozenError,
)
from esodm.indices import Indices
from esodm.mapper import dump, reconstruct
from esodm.odm import ODM
from esodm.query import (
    QueryStructure,
    build_bulk_query,
    from_class,
    from_class_and_document,
    from_class_and_id,
    from_instance,
    get_id,
    resolve_query_structure,
)
from esodm.registry import (
    FieldKind,
    IndexDescriptor,
    MetadataStore,
    PropertyDescriptor,
    metadata_store,
)
from esodm.schema import compile_mapping, mapping_body

__all__ = [
    # Declarations
    "index",
    "embedded",
    "field",
    "Field",
    # Registry
    "MetadataStore",
    "metadata_store",
    "IndexDescriptor",
    "PropertyDescriptor",
    "FieldKind",
    # Schema / Mapper
    "compile_mapping",
    "mapping_body",
    "reconstruct",
    "dump",
    # Query
    "QueryStructure",
    "resolve_query_structure",
    "from_instance",
    "from_class_and_id",
    "from_class_and_document",
    "from_class",
    "get_id",
    "build_bulk_query",
    # Bulk
    "BULK_ITEMS_COUNT_MAX",
    "BulkPipeline",
    "BulkState",
    "iterate_documents",
    # Config / Client
    "ESConfig",
    "CoreOptions",
    "create_es_client",
    "client_kwargs",
    "check_connection",
    # Operations
    "Core",
    "Indices",
    "ODM",
    # Errors
    "ODMError",
    "IndexUndefinedError",
    "DuplicateFieldError",
    "DuplicatePrimaryError",
    "MissingIndexError",
    "MissingPropertiesError",
    "MissingPrimaryKeyDefinitionError",
    "DocumentMissingError",
    "IdMissingError",
    "RegistryFrozenError",
]
