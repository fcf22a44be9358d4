from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from typing import Any, Protocol

from redis.asyncio import Redis
from redis.exceptions import RedisError

from ..core.config import get_settings

settings = get_settings()
logger = logging.getLogger("cache")

redis = Redis.from_url(settings.redis_url, encoding="utf-8", decode_responses=True)


class KeyValueCache(Protocol):
    async def get(self, name: str) -> Any:
        ...

    async def set(self, name: str, value: Any, ex: int | None = None) -> Any:
        ...


async def get_redis() -> AsyncIterator[Redis]:
    # shared client; its pool is closed on application shutdown
    yield redis


async def get_json(cache: KeyValueCache | None, key: str) -> Any | None:
    """Read a JSON value; a cache outage reads as a miss."""
    if cache is None:
        return None
    try:
        raw = await cache.get(key)
    except RedisError as exc:
        logger.warning("Cache read failed for %s: %s", key, exc)
        return None
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        return None


async def set_json(cache: KeyValueCache | None, key: str, value: Any, *, ttl: int) -> None:
    if cache is None:
        return
    try:
        await cache.set(key, json.dumps(value), ex=ttl)
    except RedisError as exc:
        logger.warning("Cache write failed for %s: %s", key, exc)
