"""
tests.test_cache

Read-through Redis cache.
"""

from __future__ import annotations

import json
from typing import Any

from commerce_cms.cache.redis_cache import RedisCache


class FakeAsyncRedis:
    def __init__(self) -> None:
        self.values: dict[str, str] = {}
        self.ttls: dict[str, int | None] = {}
        self.closed = False

    async def get(self, key: str) -> str | None:
        return self.values.get(key)

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        self.values[key] = value
        self.ttls[key] = ex
        return True

    async def aclose(self) -> None:
        self.closed = True


class CountingLoader:
    def __init__(self, value: Any) -> None:
        self.value = value
        self.calls = 0

    async def __call__(self) -> Any:
        self.calls += 1
        return self.value


async def test_miss_loads_and_stores_with_ttl() -> None:
    client = FakeAsyncRedis()
    cache = RedisCache(client, ttl_seconds=300)
    loader = CountingLoader({"posts": [1, 2]})

    assert await cache.get_or_set("posts:list:page=1:limit=5", loader) == {"posts": [1, 2]}

    assert loader.calls == 1
    assert json.loads(client.values["posts:list:page=1:limit=5"]) == {"posts": [1, 2]}
    assert client.ttls["posts:list:page=1:limit=5"] == 300


async def test_hit_skips_loader() -> None:
    client = FakeAsyncRedis()
    client.values["posts:detail:1"] = json.dumps({"post": {"id": 1}})
    cache = RedisCache(client, ttl_seconds=60)
    loader = CountingLoader({"post": {"id": 2}})

    assert await cache.get_or_set("posts:detail:1", loader) == {"post": {"id": 1}}
    assert loader.calls == 0


async def test_missing_row_is_cached_as_null() -> None:
    client = FakeAsyncRedis()
    cache = RedisCache(client, ttl_seconds=60)
    loader = CountingLoader(None)

    assert await cache.get_or_set("products:detail:9", loader) is None
    assert await cache.get_or_set("products:detail:9", loader) is None
    assert loader.calls == 1


async def test_close_releases_client() -> None:
    client = FakeAsyncRedis()

    await RedisCache(client, ttl_seconds=60).close()

    assert client.closed is True
