"""
commerce_cms.cache.redis_cache

Read-through JSON cache on Redis.

Responsibilities:
- Serve cached read responses keyed by `<resource>:<view>:<args>`.
- Populate misses with a TTL; invalidation is done by the cache jobs.
"""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable
from typing import Any

import redis.asyncio as aioredis

from commerce_cms.observability.logging import get_logger

log = get_logger(__name__)


class RedisCache:
    def __init__(self, client: aioredis.Redis, *, ttl_seconds: int) -> None:
        self._client = client
        self._ttl = ttl_seconds

    @classmethod
    def from_url(cls, url: str, *, ttl_seconds: int) -> RedisCache:
        return cls(aioredis.from_url(url, decode_responses=True), ttl_seconds=ttl_seconds)

    async def get_or_set(self, key: str, loader: Callable[[], Awaitable[Any]]) -> Any:
        cached = await self._client.get(key)
        if cached is not None:
            log.debug("cache_hit", key=key)
            return json.loads(cached)

        log.debug("cache_miss", key=key)
        value = await loader()
        await self._client.set(key, json.dumps(value), ex=self._ttl)
        return value

    async def close(self) -> None:
        await self._client.aclose()


# --- Module Notes -----------------------------------------------------------
# Loader results must already be JSON-safe (pydantic `model_dump(mode="json")`).
