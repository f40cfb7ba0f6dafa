"""
Coinbase BTC/USD spot provider.
"""

from __future__ import annotations

from typing import Optional

from navengine.infrastructure.market_data.http_provider import CachedHttpRateProvider


class CoinbaseProvider(CachedHttpRateProvider):
    name = "coinbase"

    def __init__(
        self,
        api_base_url: str = "https://api.coinbase.com/v2",
        timeout_seconds: float = 5.0,
        cache_ttl_seconds: int = 60,
    ):
        super().__init__(api_base_url, timeout_seconds, cache_ttl_seconds)

    async def get_btc_usd(self) -> Optional[float]:
        cached = self._cache_get()
        if cached is not None:
            return cached

        payload = await self._request_json(f"{self.api_base_url}/prices/BTC-USD/spot")
        if not isinstance(payload, dict):
            return None

        rate = self._valid_rate(self._nested(payload, "data", "amount"))
        if rate is None:
            return None

        self._cache_set(rate)
        return rate
