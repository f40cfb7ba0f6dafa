"""
Valuation service factory (settings-driven).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from navengine.config import Settings, settings as default_settings
from navengine.domain.services.currency_formatter import coerce_mode
from navengine.domain.services.data_source_policy import DataSourcePolicy
from navengine.domain.services.portfolio_simulator import PortfolioSimulator
from navengine.domain.services.random_source import RandomSource
from navengine.domain.services.spike_engine import sanitize_probability
from navengine.infrastructure.cache.memory_cache import MemoryCache
from navengine.infrastructure.cache.redis_cache import RedisCache
from navengine.infrastructure.cache.types import KeyValueStore
from navengine.infrastructure.market_data.provider_factory import get_exchange_rate_provider
from navengine.infrastructure.portfolio_source.real_portfolio_source import RealPortfolioSource
from navengine.infrastructure.repositories.position_repository import PositionRepository
from navengine.services.valuation_service import ValuationService

logger = logging.getLogger(__name__)


def build_store(cfg: Settings) -> KeyValueStore:
    backend = (cfg.STORE_BACKEND or "memory").strip().lower()
    if backend == "redis":
        return RedisCache(cfg.REDIS_URL, prefix=cfg.REDIS_PREFIX)
    if backend == "memory":
        return MemoryCache()
    raise ValueError(f"Unknown store backend '{backend}'")


def build_valuation_service(
    cfg: Optional[Settings] = None,
    random_source: Optional[RandomSource] = None,
    store: Optional[KeyValueStore] = None,
) -> ValuationService:
    cfg = cfg or default_settings

    positions_file = Path(cfg.DEFAULT_POSITIONS_FILE) if cfg.DEFAULT_POSITIONS_FILE else None
    repository = PositionRepository(store or build_store(cfg), positions_file=positions_file)
    simulator = PortfolioSimulator.from_random_source(
        random_source, max_spike_probability=sanitize_probability(cfg.SPIKE_MAX_PROBABILITY)
    )

    policy = DataSourcePolicy.from_settings(cfg)
    real_source = None
    if cfg.REAL_DATA_URL:
        real_source = RealPortfolioSource(
            cfg.REAL_DATA_URL,
            api_key=cfg.REAL_DATA_API_KEY,
            timeout_seconds=cfg.REAL_DATA_TIMEOUT_SECONDS,
        )
    logger.info("Data sources: %s", policy.describe())

    return ValuationService(
        repository=repository,
        simulator=simulator,
        rate_provider=get_exchange_rate_provider(cfg),
        real_source=real_source,
        policy=policy,
        token_supply=cfg.TOKEN_SUPPLY,
        positive_bias=cfg.POSITIVE_BIAS,
        default_currency=coerce_mode(cfg.DEFAULT_CURRENCY),
        rate_timeout_seconds=cfg.EXCHANGE_RATE_TIMEOUT_SECONDS,
        real_timeout_seconds=cfg.REAL_DATA_TIMEOUT_SECONDS,
    )
