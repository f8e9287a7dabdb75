"""Shared pytest fixtures."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from elasticsearch import AsyncElasticsearch

from esodm.registry import MetadataStore

CLIENT_VERBS = ("bulk", "get", "search", "scroll", "count", "create", "index", "update", "delete", "close", "ping")
INDICES_VERBS = ("create", "delete", "exists", "flush", "put_mapping", "refresh", "stats")


@pytest.fixture
def store():
    """Empty registry, isolated from the module-level default."""
    return MetadataStore()


@pytest.fixture
def es():
    """AsyncElasticsearch stand-in whose verbs are AsyncMocks."""
    client = MagicMock(spec=AsyncElasticsearch)
    for verb in CLIENT_VERBS:
        setattr(client, verb, AsyncMock())
    client.bulk.return_value = {"errors": False, "items": []}

    client.indices = MagicMock()
    for verb in INDICES_VERBS:
        setattr(client.indices, verb, AsyncMock())
    return client
