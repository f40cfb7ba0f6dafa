"""
Shared plumbing for HTTP exchange-rate providers: TTL cache + JSON GET.
"""

from __future__ import annotations

import logging
import math
import time
from typing import Dict, Optional

import httpx

logger = logging.getLogger(__name__)


class CachedHttpRateProvider:
    name = "http"

    def __init__(self, api_base_url: str, timeout_seconds: float = 5.0, cache_ttl_seconds: int = 60):
        self.api_base_url = api_base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.cache_ttl_seconds = cache_ttl_seconds
        self._cache: Optional[tuple[float, float]] = None

    def _cache_get(self) -> Optional[float]:
        if not self._cache:
            return None
        ts, value = self._cache
        if time.time() - ts > self.cache_ttl_seconds:
            return None
        return value

    def _cache_set(self, value: float) -> None:
        self._cache = (time.time(), value)

    def _headers(self) -> Dict[str, str]:
        return {"Accept": "application/json"}

    async def _request_json(self, url: str, params: Optional[dict] = None) -> Optional[dict]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.get(url, headers=self._headers(), params=params)
                if response.status_code != 200:
                    logger.debug("%s API %s: %s", self.name, response.status_code, response.text[:200])
                    return None
                return response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.debug("%s API request failed: %s", self.name, exc)
            return None

    @staticmethod
    def _valid_rate(value: object) -> Optional[float]:
        try:
            rate = float(value)
        except (TypeError, ValueError):
            return None
        if not math.isfinite(rate) or rate <= 0:
            return None
        return rate

    @staticmethod
    def _nested(payload: object, *keys: str) -> object:
        for key in keys:
            if not isinstance(payload, dict):
                return None
            payload = payload.get(key)
        return payload
