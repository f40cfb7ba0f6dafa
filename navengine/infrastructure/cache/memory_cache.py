"""
In-process key-value store with the same async surface as RedisCache.
Each instance owns its own dict, so services and tests never share state.
"""

from __future__ import annotations

import json
import time
from typing import Any, Dict, Optional, Tuple


class MemoryCache:
    def __init__(self) -> None:
        self._data: Dict[str, Tuple[Optional[float], str]] = {}

    async def get_str(self, key: str) -> Optional[str]:
        entry = self._data.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if expires_at is not None and time.monotonic() >= expires_at:
            self._data.pop(key, None)
            return None
        return value

    async def set_str(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        expires_at = time.monotonic() + ttl_seconds if ttl_seconds else None
        self._data[key] = (expires_at, value)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def get_json(self, key: str) -> Optional[Any]:
        raw = await self.get_str(key)
        if raw is None:
            return None
        return json.loads(raw)

    async def set_json(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        await self.set_str(key, json.dumps(value), ttl_seconds)

    async def close(self) -> None:
        return None

    def clear(self) -> None:
        self._data.clear()
