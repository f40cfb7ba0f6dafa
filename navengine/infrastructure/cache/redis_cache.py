"""
Redis key-value wrapper for the shared position document.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

import redis.asyncio as redis

from navengine.infrastructure.cache.errors import StoreUnavailableError

logger = logging.getLogger(__name__)


class RedisCache:
    def __init__(self, url: str, prefix: str = "navengine:", client: Optional[Any] = None):
        self._client = client if client is not None else redis.Redis.from_url(url, decode_responses=True)
        self._prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def get_str(self, key: str) -> Optional[str]:
        try:
            return await self._client.get(self._key(key))
        except redis.RedisError as exc:
            logger.warning("Redis get failed for %s: %s", key, exc)
            raise StoreUnavailableError(f"redis get {key}") from exc

    async def set_str(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        try:
            await self._client.set(self._key(key), value, ex=ttl_seconds)
        except redis.RedisError as exc:
            logger.warning("Redis set failed for %s: %s", key, exc)
            raise StoreUnavailableError(f"redis set {key}") from exc

    async def delete(self, key: str) -> None:
        try:
            await self._client.delete(self._key(key))
        except redis.RedisError as exc:
            logger.warning("Redis delete failed for %s: %s", key, exc)
            raise StoreUnavailableError(f"redis delete {key}") from exc

    async def get_json(self, key: str) -> Optional[Any]:
        raw = await self.get_str(key)
        if raw is None:
            return None
        return json.loads(raw)

    async def set_json(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        await self.set_str(key, json.dumps(value), ttl_seconds)

    async def close(self) -> None:
        try:
            await self._client.aclose()
        except redis.RedisError as exc:
            logger.debug("Redis close failed: %s", exc)
