"""
Exchange-rate provider protocol for type hints.
"""

from __future__ import annotations

from typing import Optional, Protocol


class ExchangeRateProvider(Protocol):
    async def get_btc_usd(self) -> Optional[float]:
        """USD per BTC, or None when unavailable"""
        ...
