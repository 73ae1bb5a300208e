"""Tests for CacheService with a mocked Redis client."""

import json
from unittest.mock import AsyncMock

import pytest
import redis.asyncio as redis

from auditflow.infrastructure.cache.redis_cache import CacheService


class _Pipeline:
    def __init__(self, sink: list[list[str]]):
        self.sink = sink
        self.pending: list[str] = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    def unlink(self, *keys: str) -> None:
        self.pending = list(keys)

    async def execute(self) -> list[int]:
        self.sink.append(self.pending)
        return [len(self.pending)]


class _ScanClient:
    """Just enough of redis.Redis for delete_pattern."""

    def __init__(self, keys: list[str]):
        self.keys = keys
        self.unlinked: list[list[str]] = []

    async def scan_iter(self, match: str):
        prefix = match.rstrip("*")
        for key in self.keys:
            if key.startswith(prefix):
                yield key

    def pipeline(self, transaction: bool = True) -> _Pipeline:
        return _Pipeline(self.unlinked)


async def test_get_decodes_json() -> None:
    client = AsyncMock()
    client.get.return_value = json.dumps(True)
    cache = CacheService(client)

    assert cache.is_available()
    assert await cache.get("capability:t1:u1:document:read") is True


async def test_get_miss_returns_none() -> None:
    client = AsyncMock()
    client.get.return_value = None

    assert await CacheService(client).get("missing") is None


async def test_set_uses_setex_with_ttl() -> None:
    client = AsyncMock()

    assert await CacheService(client).set("k", False, ttl=120) is True
    client.setex.assert_awaited_once_with("k", 120, "false")


async def test_redis_error_degrades_to_miss() -> None:
    client = AsyncMock()
    client.get.side_effect = redis.ResponseError("WRONGTYPE")

    assert await CacheService(client).get("k") is None


async def test_unavailable_cache_is_noop() -> None:
    cache = CacheService()

    assert cache.is_available() is False
    assert await cache.get("k") is None
    assert await cache.set("k", True) is False
    assert await cache.delete_pattern("capability:*") == 0


async def test_delete_pattern_unlinks_matching_keys() -> None:
    client = _ScanClient(
        [
            "capability:t1:u1:document:read",
            "capability:t1:u1:document:approve",
            "capability:t1:u2:document:read",
        ]
    )
    cache = CacheService(client)

    deleted = await cache.delete_pattern("capability:t1:u1:*")

    assert deleted == 2
    assert client.unlinked == [
        ["capability:t1:u1:document:read", "capability:t1:u1:document:approve"]
    ]


@pytest.mark.parametrize("ttl", [1, 300])
async def test_set_serializes_before_calling_redis(ttl: int) -> None:
    client = AsyncMock()

    await CacheService(client).set("k", {"allowed": True}, ttl=ttl)

    client.setex.assert_awaited_once_with("k", ttl, '{"allowed": true}')
