"""ODM용 AsyncElasticsearch 클라이언트 구성."""

from __future__ import annotations

import logging
from typing import Any

from elasticsearch import AsyncElasticsearch

from .config import ESConfig

logger = logging.getLogger(__name__)


def client_kwargs(cfg: ESConfig) -> dict[str, Any]:
    """ESConfig를 AsyncElasticsearch 생성자 인자로 변환.

    인증은 API key > Basic Auth > 없음 순으로 하나만 선택합니다.

    Raises:
        ValueError: ES_URL이 비어 있거나, 사용자명/비밀번호 중 하나만 설정된 경우.
    """
    if not cfg.es_url:
        raise ValueError("ES_URL 환경변수를 설정하세요.")

    kwargs: dict[str, Any] = {
        "hosts": [cfg.es_url],
        "verify_certs": cfg.verify_certs,
        "request_timeout": cfg.request_timeout_s,
        "max_retries": cfg.max_retries,
        "retry_on_timeout": cfg.max_retries > 0,
    }

    if cfg.es_api_key:
        kwargs["api_key"] = cfg.es_api_key
    elif cfg.es_username and cfg.es_password:
        kwargs["basic_auth"] = (cfg.es_username, cfg.es_password)
    elif cfg.es_username or cfg.es_password:
        raise ValueError("ES_USERNAME과 ES_PASSWORD는 함께 설정해야 합니다.")
    return kwargs


def create_es_client(cfg: ESConfig | None = None) -> AsyncElasticsearch:
    """AsyncElasticsearch 클라이언트 생성. cfg가 None이면 환경변수 기반 설정 사용."""
    cfg = cfg or ESConfig()
    kwargs = client_kwargs(cfg)
    auth = "api_key" if "api_key" in kwargs else "basic" if "basic_auth" in kwargs else "none"
    logger.debug(f"AsyncElasticsearch 생성: {cfg.es_url} (auth={auth})")
    return AsyncElasticsearch(**kwargs)


async def check_connection(es: AsyncElasticsearch) -> bool:
    """ES 연결 상태 확인."""
    try:
        return bool(await es.ping())
    except Exception as e:
        logger.warning(f"Elasticsearch ping 실패: {e}")
        return False
