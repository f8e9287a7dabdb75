"""esodm 진입점.

Usage:
    >>> odm = ODM()                                  # 환경변수 기반 설정
    >>> odm = ODM(ESConfig(index_prefix="dev_"))     # 명시적 설정
    >>> odm = ODM(es, options=CoreOptions())         # 기존 클라이언트 재사용
    >>> await odm.indices.create(User)
    >>> await odm.indices.put_mapping(User)
    >>> await odm.bulk_index(User, users)
"""

from __future__ import annotations

from elasticsearch import AsyncElasticsearch

from .client import create_es_client
from .config import CoreOptions, ESConfig
from .core import Core
from .indices import Indices
from .registry import MetadataStore, metadata_store


class ODM(Core):
    """Core 연산 + Indices 관리."""

    def __init__(
        self,
        client_or_config: AsyncElasticsearch | ESConfig | None = None,
        *,
        options: CoreOptions | None = None,
        store: MetadataStore = metadata_store,
    ):
        if isinstance(client_or_config, AsyncElasticsearch):
            es = client_or_config
        else:
            cfg = client_or_config or ESConfig()
            es = create_es_client(cfg)
            options = options or cfg.core_options()

        super().__init__(es, options, store)
        self.indices = Indices(es, self.options, store)
