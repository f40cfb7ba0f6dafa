"""
Exchange-rate provider factory (settings-driven).
"""

from __future__ import annotations

from typing import List, Optional

from navengine.config import Settings, settings as default_settings
from navengine.infrastructure.market_data.coinbase_provider import CoinbaseProvider
from navengine.infrastructure.market_data.coingecko_provider import CoinGeckoProvider
from navengine.infrastructure.market_data.provider_chain import (
    ChainedExchangeRateProvider,
    NamedProvider,
    TrackedExchangeRateProvider,
)
from navengine.infrastructure.market_data.types import ExchangeRateProvider


def _build_provider(name: str, cfg: Settings) -> ExchangeRateProvider:
    name = (name or "").strip().lower()
    if name == "coingecko":
        return CoinGeckoProvider(
            api_base_url=cfg.COINGECKO_API_URL,
            api_key=cfg.COINGECKO_API_KEY,
            timeout_seconds=cfg.EXCHANGE_RATE_TIMEOUT_SECONDS,
            cache_ttl_seconds=cfg.EXCHANGE_RATE_CACHE_TTL,
        )
    if name == "coinbase":
        return CoinbaseProvider(
            api_base_url=cfg.COINBASE_API_URL,
            timeout_seconds=cfg.EXCHANGE_RATE_TIMEOUT_SECONDS,
            cache_ttl_seconds=cfg.EXCHANGE_RATE_CACHE_TTL,
        )
    raise ValueError(f"Unknown exchange rate provider '{name}'")


def get_exchange_rate_provider(cfg: Optional[Settings] = None) -> ExchangeRateProvider:
    cfg = cfg or default_settings
    provider_name = (cfg.EXCHANGE_RATE_PROVIDER or "coingecko").strip().lower()
    fallback_names = [n.strip().lower() for n in (cfg.EXCHANGE_RATE_FALLBACK_PROVIDERS or "").split(",")]

    providers: List[NamedProvider] = [NamedProvider(provider_name, _build_provider(provider_name, cfg))]
    for fallback in fallback_names:
        if fallback and fallback != provider_name:
            providers.append(NamedProvider(fallback, _build_provider(fallback, cfg)))

    if len(providers) == 1:
        only = providers[0]
        return TrackedExchangeRateProvider(only.provider, only.name)
    return ChainedExchangeRateProvider(providers)
