"""
CoinGecko BTC/USD provider (simple price endpoint).
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

from navengine.infrastructure.market_data.http_provider import CachedHttpRateProvider

logger = logging.getLogger(__name__)


class CoinGeckoProvider(CachedHttpRateProvider):
    name = "coingecko"

    def __init__(
        self,
        api_base_url: str = "https://api.coingecko.com/api/v3",
        api_key: Optional[str] = None,
        timeout_seconds: float = 5.0,
        cache_ttl_seconds: int = 60,
    ):
        super().__init__(api_base_url, timeout_seconds, cache_ttl_seconds)
        self.api_key = (api_key or "").strip() or None

    def _headers(self) -> Dict[str, str]:
        headers = super()._headers()
        if self.api_key:
            headers["x-cg-demo-api-key"] = self.api_key
        return headers

    async def get_btc_usd(self) -> Optional[float]:
        cached = self._cache_get()
        if cached is not None:
            return cached

        url = f"{self.api_base_url}/simple/price"
        payload = await self._request_json(url, params={"ids": "bitcoin", "vs_currencies": "usd"})
        if not isinstance(payload, dict):
            return None

        rate = self._valid_rate(self._nested(payload, "bitcoin", "usd"))
        if rate is None:
            logger.debug("CoinGecko response missing bitcoin.usd: %s", payload)
            return None

        self._cache_set(rate)
        return rate
