"""
Provider chain - try primary, then fallbacks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from navengine.infrastructure.market_data.types import ExchangeRateProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NamedProvider:
    name: str
    provider: ExchangeRateProvider


class TrackedExchangeRateProvider:
    def __init__(self, provider: ExchangeRateProvider, name: str):
        self.provider = provider
        self.name = name
        self.last_source: Optional[str] = None

    async def get_btc_usd(self) -> Optional[float]:
        value = await self.provider.get_btc_usd()
        if value is not None:
            self.last_source = self.name
        return value


class ChainedExchangeRateProvider:
    def __init__(self, providers: List[NamedProvider]):
        self.providers = providers
        self.last_source: Optional[str] = None

    async def get_btc_usd(self) -> Optional[float]:
        for named in self.providers:
            try:
                value = await named.provider.get_btc_usd()
            except Exception as exc:
                # Skip to the next provider
                logger.debug("Rate provider %s raised: %s", named.name, exc)
                continue
            if value is not None:
                self.last_source = named.name
                return value
        return None
