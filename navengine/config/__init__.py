"""
Application Settings
Load from environment variables
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Engine settings from environment"""

    # ======================
    # Application
    # ======================
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # ======================
    # Simulation
    # ======================
    SIMULATION_TICK_SECONDS: int = 60
    MICRO_TICK_SECONDS: int = 0
    POSITIVE_BIAS: bool = True
    SPIKE_MAX_PROBABILITY: float = 0.20
    TOKEN_SUPPLY: int = 2_100_000
    TIMEZONE: str = "UTC"

    # ======================
    # Exchange rate (BTC/USD)
    # ======================
    EXCHANGE_RATE_PROVIDER: str = "coingecko"
    EXCHANGE_RATE_FALLBACK_PROVIDERS: str = "coinbase"
    EXCHANGE_RATE_POLL_SECONDS: int = 300
    EXCHANGE_RATE_TIMEOUT_SECONDS: float = 5.0
    EXCHANGE_RATE_CACHE_TTL: int = 60
    COINGECKO_API_URL: str = "https://api.coingecko.com/api/v3"
    COINGECKO_API_KEY: Optional[str] = None
    COINBASE_API_URL: str = "https://api.coinbase.com/v2"
    DEFAULT_CURRENCY: str = "btc"

    # ======================
    # Position store
    # ======================
    STORE_BACKEND: str = "memory"
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_PREFIX: str = "navengine:"
    DEFAULT_POSITIONS_FILE: Optional[str] = None

    # ======================
    # Data sources (hybrid mode)
    # ======================
    DATA_MODE: str = "mock"
    HYBRID_MODE_SERVICES: str = "all"
    FORCE_MOCK: bool = False
    REAL_DATA_URL: Optional[str] = None
    REAL_DATA_API_KEY: Optional[str] = None
    REAL_DATA_TIMEOUT_SECONDS: float = 10.0

    # ======================
    # Pydantic v2 config
    # ======================
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


settings = Settings()
