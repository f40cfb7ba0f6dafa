"""
Domain Models - Entities
Pure domain objects with no infrastructure dependencies
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple

from navengine.utils.numbers import round_half_up

DEFAULT_TOKEN_SUPPLY = 2_100_000


class CurrencyMode(str, Enum):
    """Display currency for NAV values"""
    NATIVE = "btc"
    FIAT = "usd"


class DataProvenance(str, Enum):
    """Where the positions behind a snapshot came from"""
    SIMULATED = "simulated"
    REAL = "real"
    FALLBACK_AFTER_ERROR = "fallback-after-error"


class DataCategory(str, Enum):
    """Data categories that can be served from simulation or a real backend"""
    POSITIONS = "positions"
    TRANSACTIONS = "transactions"
    TRADING = "trading"
    SUPPLY = "supply"


@dataclass(frozen=True)
class Position:
    """
    One simulated investment - Immutable

    Monetary values are integer sats. `change_percent` and `price_per_token`
    are derived from `current_value` so they can never drift from it.
    """
    name: str
    initial_value: int
    current_value: int
    token_amount: int
    last_spike_day: int = 0
    description: str = ""
    address: Optional[str] = None
    transaction_id: Optional[str] = None

    def __post_init__(self):
        if not self.name:
            raise ValueError("Position name cannot be empty")
        if self.initial_value < 1:
            raise ValueError("Initial value must be at least 1 sat")
        if self.current_value < 1:
            raise ValueError("Current value must be at least 1 sat")
        if self.token_amount < 1:
            raise ValueError("Token amount must be at least 1")
        if self.last_spike_day < 0:
            raise ValueError("Last spike day cannot be negative")

    @classmethod
    def create(
        cls,
        name: str,
        initial_value: int,
        token_amount: int,
        description: str = "",
        address: Optional[str] = None,
        transaction_id: Optional[str] = None,
    ) -> "Position":
        """New position valued at its initial investment."""
        return cls(
            name=name,
            initial_value=initial_value,
            current_value=initial_value,
            token_amount=token_amount,
            description=description,
            address=address,
            transaction_id=transaction_id,
        )

    @property
    def change_percent(self) -> float:
        """Total return since inception, in percent (2 dp)"""
        change = (self.current_value - self.initial_value) / self.initial_value * 100
        return round(change, 2)

    @property
    def price_per_token(self) -> int:
        """Current value per backing token in sats, never below 1"""
        return max(1, round_half_up(self.current_value / self.token_amount))


@dataclass(frozen=True)
class NAVSnapshot:
    """
    Fund-level valuation - Immutable

    Recreated wholesale on every tick. The aggregate fields come from the
    NAV engine; the display fields are filled in by the currency formatter.
    """
    total_current_value: int
    total_initial_value: int
    change_percentage: float
    positions: Tuple[Position, ...] = ()
    price_per_token: int = 0
    token_supply: int = DEFAULT_TOKEN_SUPPLY
    day_number: int = 0
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # Display
    currency: CurrencyMode = CurrencyMode.NATIVE
    display_value: str = ""
    formatted_native: str = ""
    formatted_fiat: Optional[str] = None
    exchange_rate: Optional[float] = None
    price_per_token_usd: Optional[float] = None

    # Data quality
    provenance: DataProvenance = DataProvenance.SIMULATED

    @property
    def position_count(self) -> int:
        return len(self.positions)

    @property
    def is_fallback(self) -> bool:
        return self.provenance == DataProvenance.FALLBACK_AFTER_ERROR
