"""
VALUATION SERVICE
Stateful driver of the valuation engine

RESPONSIBILITIES:
- Own the canonical position set (through the repository) and the last snapshot
- Advance positions on the scheduler tick, aggregate, render, publish
- Serve real positions when configured, degrading to simulation on failure
- Track the selected display currency and the latest exchange rate

RULES:
✅ Single writer: every read-modify-write of the position document holds one lock
✅ Snapshots are replaced wholesale, never patched
✅ Store / network failures are logged and absorbed; ticks keep running
"""

import asyncio
import dataclasses
import logging
from datetime import datetime
from typing import Any, Callable, List, Optional, Tuple

from navengine.domain.models import (
    DEFAULT_TOKEN_SUPPLY,
    CurrencyMode,
    DataCategory,
    DataProvenance,
    NAVSnapshot,
    Position,
)
from navengine.domain.services.currency_formatter import coerce_mode, render_snapshot, usable_rate
from navengine.domain.services.data_source_policy import DataSourcePolicy
from navengine.domain.services.nav_engine import aggregate
from navengine.domain.services.portfolio_simulator import PortfolioSimulator
from navengine.infrastructure.cache.errors import StoreUnavailableError
from navengine.infrastructure.market_data.types import ExchangeRateProvider
from navengine.infrastructure.portfolio_source.real_portfolio_source import (
    PortfolioSourceError,
    RealPortfolioSource,
)
from navengine.infrastructure.repositories.position_repository import PositionRepository
from navengine.realtime.subscriber_registry import (
    TOPIC_CURRENCY,
    TOPIC_POSITIONS,
    TOPIC_SNAPSHOT,
    SubscriberRegistry,
)
from navengine.scheduler.scheduler import ValuationScheduler
from navengine.utils.time import day_number, utc_now

logger = logging.getLogger(__name__)


class ValuationService:
    """
    Valuation Service
    One instance per process; UI surfaces subscribe instead of re-deriving state
    """

    def __init__(
        self,
        repository: PositionRepository,
        simulator: PortfolioSimulator,
        rate_provider: Optional[ExchangeRateProvider] = None,
        real_source: Optional[RealPortfolioSource] = None,
        policy: Optional[DataSourcePolicy] = None,
        registry: Optional[SubscriberRegistry] = None,
        token_supply: int = DEFAULT_TOKEN_SUPPLY,
        positive_bias: bool = True,
        default_currency: CurrencyMode = CurrencyMode.NATIVE,
        rate_timeout_seconds: float = 5.0,
        real_timeout_seconds: float = 10.0,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.repository = repository
        self.simulator = simulator
        self.rate_provider = rate_provider
        self.real_source = real_source
        self.policy = policy or DataSourcePolicy()
        self.registry = registry or SubscriberRegistry()
        self.token_supply = token_supply
        self.positive_bias = positive_bias
        self.rate_timeout_seconds = rate_timeout_seconds
        self.real_timeout_seconds = real_timeout_seconds
        self._clock = clock

        self._lock = asyncio.Lock()
        self._currency = coerce_mode(default_currency)
        self._exchange_rate: Optional[float] = None
        self._simulated_positions: List[Position] = []
        self._last_real_positions: Optional[List[Position]] = None
        self._scheduler: Optional[ValuationScheduler] = None
        self._initialized = False
        self.last_error: Optional[str] = None

        self._snapshot = self._build_snapshot([], DataProvenance.SIMULATED)

        if self.policy.use_real(DataCategory.POSITIONS) and self.real_source is None:
            logger.warning("Positions configured as real but no real source is set; simulating")

    # ------------------------------------------------------------------
    # READ
    # ------------------------------------------------------------------

    def get_snapshot(self) -> NAVSnapshot:
        return self._snapshot

    def get_currency(self) -> CurrencyMode:
        """Currency selected by the user (the snapshot may render BTC without a rate)"""
        return self._currency

    def get_exchange_rate(self) -> Optional[float]:
        return self._exchange_rate

    def current_day(self) -> int:
        return day_number(self._clock())

    @property
    def initialized(self) -> bool:
        return self._initialized

    def subscribe(self, topic: str, handler: Callable[[Any], Any]) -> Callable[[], None]:
        return self.registry.subscribe(topic, handler)

    # ------------------------------------------------------------------
    # LIFECYCLE
    # ------------------------------------------------------------------

    async def initialize(self) -> NAVSnapshot:
        """Load persisted state and publish the first snapshot (no movement)."""
        try:
            stored = await self.repository.get_currency()
        except StoreUnavailableError as exc:
            logger.warning("Currency preference unavailable: %s", exc)
            stored = None
        if stored is not None:
            self._currency = stored

        snapshot = await self.refresh()
        self._initialized = True
        logger.info(
            "Valuation service initialised: %s positions, NAV %s (%s)",
            snapshot.position_count,
            snapshot.display_value,
            snapshot.provenance.value,
        )
        return snapshot

    async def start(
        self,
        tick_seconds: int = 60,
        rate_seconds: int = 300,
        micro_seconds: int = 0,
        timezone: str = "UTC",
    ) -> None:
        if self._scheduler is not None:
            return
        if not self._initialized:
            await self.initialize()
        if self.rate_provider is not None:
            await self.update_exchange_rate()

        self._scheduler = ValuationScheduler(
            tick_job=self.tick,
            tick_seconds=tick_seconds,
            rate_job=self.update_exchange_rate if self.rate_provider is not None else None,
            rate_seconds=rate_seconds,
            micro_job=self.micro_tick,
            micro_seconds=micro_seconds,
            timezone=timezone,
        )
        self._scheduler.start()

    async def stop(self) -> None:
        if self._scheduler is not None:
            self._scheduler.shutdown()
            self._scheduler = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    # ------------------------------------------------------------------
    # OPERATIONS
    # ------------------------------------------------------------------

    async def tick(self) -> NAVSnapshot:
        """Advance one simulated day and publish the resulting snapshot."""
        async with self._lock:
            positions, provenance, saved = await self._resolve_positions(advance=True)
            snapshot = self._replace_snapshot(positions, provenance)
        logger.debug("Tick day=%s NAV=%s", snapshot.day_number, snapshot.display_value)
        if saved:
            await self.registry.publish(TOPIC_POSITIONS, tuple(positions))
        await self.registry.publish(TOPIC_SNAPSHOT, snapshot)
        return snapshot

    async def refresh(self, mode: Optional[CurrencyMode] = None) -> NAVSnapshot:
        """
        Re-read positions (no movement) and publish a fresh snapshot,
        optionally switching currency first.
        """
        currency_changed = False
        if mode is not None:
            currency_changed = await self._set_currency(coerce_mode(mode))
        async with self._lock:
            positions, provenance, _ = await self._resolve_positions(advance=False)
            snapshot = self._replace_snapshot(positions, provenance)
        if currency_changed:
            await self.registry.publish(TOPIC_CURRENCY, self._currency)
        await self.registry.publish(TOPIC_SNAPSHOT, snapshot)
        return snapshot

    async def switch_currency(self, mode: CurrencyMode) -> NAVSnapshot:
        """Select a display currency and re-render the current snapshot."""
        mode = coerce_mode(mode)
        changed = await self._set_currency(mode)
        async with self._lock:
            snapshot = render_snapshot(self._snapshot, mode, self._exchange_rate)
            self._snapshot = snapshot
        if changed:
            await self.registry.publish(TOPIC_CURRENCY, mode)
        await self.registry.publish(TOPIC_SNAPSHOT, snapshot)
        return snapshot

    async def add_position(
        self,
        name: str,
        initial_value: int,
        token_amount: int,
        description: str = "",
        address: Optional[str] = None,
        transaction_id: Optional[str] = None,
    ) -> Position:
        """
        Add a new simulated position valued at its initial investment.

        Raises:
            ValueError: invalid amounts, empty name, or duplicate name
        """
        for label, amount in (("initial_value", initial_value), ("token_amount", token_amount)):
            if isinstance(amount, bool) or not isinstance(amount, int):
                raise ValueError(f"{label} must be a whole number, got {amount!r}")
        name = (name or "").strip()
        position = Position.create(
            name=name,
            initial_value=initial_value,
            token_amount=token_amount,
            description=description,
            address=address,
            transaction_id=transaction_id,
        )

        async with self._lock:
            positions = await self._load_simulated()
            if any(p.name == name for p in positions):
                raise ValueError(f"Position '{name}' already exists")
            positions = positions + [position]
            await self._save_simulated(positions)
            snapshot = None
            if self._snapshot.provenance == DataProvenance.SIMULATED:
                snapshot = self._replace_snapshot(positions, DataProvenance.SIMULATED)

        logger.info("Added position %s (%s sats, %s tokens)", name, initial_value, token_amount)
        await self.registry.publish(TOPIC_POSITIONS, tuple(positions))
        if snapshot is not None:
            await self.registry.publish(TOPIC_SNAPSHOT, snapshot)
        return position

    async def update_exchange_rate(self) -> Optional[float]:
        """Poll the rate provider; keeps the last known rate when it fails."""
        if self.rate_provider is None:
            return self._exchange_rate
        try:
            rate = await asyncio.wait_for(self.rate_provider.get_btc_usd(), self.rate_timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning("Exchange rate poll timed out after %ss", self.rate_timeout_seconds)
            rate = None

        if rate is None:
            logger.info("Exchange rate unavailable; keeping %s", self._exchange_rate)
            return self._exchange_rate
        await self.set_exchange_rate(rate)
        return self._exchange_rate

    async def set_exchange_rate(self, rate: Optional[float]) -> None:
        """Accept a pushed USD/BTC rate; unusable values are ignored."""
        if not usable_rate(rate):
            logger.debug("Ignoring unusable exchange rate %r", rate)
            return
        rate = float(rate)
        if rate == self._exchange_rate:
            return
        async with self._lock:
            self._exchange_rate = rate
            snapshot = render_snapshot(self._snapshot, self._currency, rate)
            self._snapshot = snapshot
        await self.registry.publish(TOPIC_SNAPSHOT, snapshot)

    async def micro_tick(self) -> Optional[NAVSnapshot]:
        """
        Display-only jitter between ticks. Applies to simulated snapshots
        only and is not persisted; the next tick starts from the stored set.
        """
        async with self._lock:
            if self._snapshot.provenance != DataProvenance.SIMULATED or not self._snapshot.positions:
                return None
            positions = self.simulator.micro_tick(
                self._snapshot.positions, self.current_day(), self.positive_bias
            )
            snapshot = self._replace_snapshot(positions, DataProvenance.SIMULATED)
        await self.registry.publish(TOPIC_SNAPSHOT, snapshot)
        return snapshot

    async def reset(self) -> NAVSnapshot:
        """Reseed the simulated set from defaults."""
        async with self._lock:
            try:
                positions = await self.repository.reset()
            except StoreUnavailableError as exc:
                logger.warning("Reset could not persist defaults: %s", exc)
                positions = self.repository.default_positions()
            self._simulated_positions = list(positions)
        await self.registry.publish(TOPIC_POSITIONS, tuple(positions))
        return await self.refresh()

    # ------------------------------------------------------------------
    # INTERNALS (callers hold the lock)
    # ------------------------------------------------------------------

    def _uses_real_positions(self) -> bool:
        return self.real_source is not None and self.policy.use_real(DataCategory.POSITIONS)

    async def _resolve_positions(self, advance: bool) -> Tuple[List[Position], DataProvenance, bool]:
        """Positions for the next snapshot, their provenance, and whether the stored set was rewritten"""
        if self._uses_real_positions():
            try:
                real = await asyncio.wait_for(
                    self.real_source.fetch_positions(), self.real_timeout_seconds
                )
            except (PortfolioSourceError, asyncio.TimeoutError) as exc:
                self.last_error = str(exc) or exc.__class__.__name__
                logger.warning("Real positions unavailable (%s); serving fallback data", self.last_error)
                if self._last_real_positions:
                    return list(self._last_real_positions), DataProvenance.FALLBACK_AFTER_ERROR, False
                positions, saved = await self._advance_simulated(advance)
                return positions, DataProvenance.FALLBACK_AFTER_ERROR, saved

            self.last_error = None
            self._last_real_positions = list(real)
            return list(real), DataProvenance.REAL, False

        positions, saved = await self._advance_simulated(advance)
        return positions, DataProvenance.SIMULATED, saved

    async def _advance_simulated(self, advance: bool) -> Tuple[List[Position], bool]:
        positions = await self._load_simulated()
        if not advance:
            return positions, False
        positions = self.simulator.tick(positions, self.current_day(), self.positive_bias)
        saved = await self._save_simulated(positions)
        return positions, saved

    async def _load_simulated(self) -> List[Position]:
        try:
            positions = await self.repository.load_positions()
        except StoreUnavailableError as exc:
            logger.warning("Position store unavailable (%s); using in-memory positions", exc)
            if not self._simulated_positions:
                self._simulated_positions = self.repository.default_positions()
            return list(self._simulated_positions)
        self._simulated_positions = list(positions)
        return list(positions)

    async def _save_simulated(self, positions: List[Position]) -> bool:
        self._simulated_positions = list(positions)
        try:
            await self.repository.save_positions(positions)
        except StoreUnavailableError as exc:
            logger.warning("Position store unavailable (%s); update kept in memory", exc)
            return False
        return True

    async def _set_currency(self, mode: CurrencyMode) -> bool:
        """Select and persist a currency; returns True when the selection changed"""
        changed = mode != self._currency
        self._currency = mode
        try:
            await self.repository.set_currency(mode)
        except StoreUnavailableError as exc:
            logger.warning("Could not persist currency preference: %s", exc)
        return changed

    def _build_snapshot(self, positions: List[Position], provenance: DataProvenance) -> NAVSnapshot:
        base = aggregate(
            positions,
            token_supply=self.token_supply,
            day_number=self.current_day(),
            generated_at=self._clock(),
        )
        rendered = render_snapshot(base, self._currency, self._exchange_rate)
        return dataclasses.replace(rendered, provenance=provenance)

    def _replace_snapshot(self, positions: List[Position], provenance: DataProvenance) -> NAVSnapshot:
        snapshot = self._build_snapshot(positions, provenance)
        self._snapshot = snapshot
        return snapshot
