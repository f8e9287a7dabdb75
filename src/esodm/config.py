"""Elasticsearch 설정 관리.

환경변수로 설정을 관리합니다 (.env 파일 지원).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass(frozen=True)
class CoreOptions:
    """쿼리 빌드 시 적용되는 옵션.

    Attributes:
        index_prefix: 모든 인덱스명 앞에 붙일 prefix (읽는 시점에 적용)
        include_type: 요청에 `_type`을 포함할지 여부 (매핑 타입을 쓰는 구버전 클러스터용)
    """

    index_prefix: str = ""
    include_type: bool = False


@dataclass(frozen=True)
class ESConfig:
    """Elasticsearch 연결 설정.

    Attributes:
        es_url: Elasticsearch 서버 URL (예: http://localhost:9200)
        es_username: HTTP Basic Auth 사용자명 (선택)
        es_password: HTTP Basic Auth 비밀번호 (선택)
        es_api_key: API key 인증 (설정 시 Basic Auth보다 우선)
        verify_certs: SSL 인증서 검증 여부
        request_timeout_s: 요청 타임아웃 (초)
        max_retries: 연결 오류/타임아웃 시 재시도 횟수
        index_prefix: 인덱스명 prefix (예: 환경별 "dev_", "prod_")
        include_type: 요청에 `_type` 포함 여부
    """

    # Connection
    es_url: str = field(default_factory=lambda: os.getenv("ES_URL", "http://localhost:9200"))
    es_username: str | None = field(default_factory=lambda: os.getenv("ES_USERNAME"))
    es_password: str | None = field(default_factory=lambda: os.getenv("ES_PASSWORD"))
    es_api_key: str | None = field(default_factory=lambda: os.getenv("ES_API_KEY"))

    verify_certs: bool = field(default_factory=lambda: _env_flag("ES_VERIFY_CERTS", "true"))
    request_timeout_s: int = field(
        default_factory=lambda: int(os.getenv("ES_REQUEST_TIMEOUT_S", "30"))
    )
    max_retries: int = field(default_factory=lambda: int(os.getenv("ES_MAX_RETRIES", "3")))

    # Query building
    index_prefix: str = field(default_factory=lambda: os.getenv("ES_INDEX_PREFIX", ""))
    include_type: bool = field(default_factory=lambda: _env_flag("ES_INCLUDE_TYPE", "false"))

    def core_options(self) -> CoreOptions:
        return CoreOptions(index_prefix=self.index_prefix, include_type=self.include_type)
