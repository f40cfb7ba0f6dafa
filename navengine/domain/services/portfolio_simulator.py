"""
PORTFOLIO SIMULATOR
Advance every position by one simulated day
"""

import logging
from typing import Iterable, List, Optional

from navengine.domain.models import Position
from navengine.domain.services.movement_engine import apply_movement
from navengine.domain.services.return_generator import DailyReturnGenerator, MICRO_CHANGE_FACTOR
from navengine.domain.services.spike_engine import SpikeTrigger
from navengine.domain.services.random_source import RandomSource

logger = logging.getLogger(__name__)


class PortfolioSimulator:
    """
    Portfolio Simulator
    Positions move independently; no cross-position state
    """

    def __init__(
        self,
        return_generator: DailyReturnGenerator,
        spike_trigger: SpikeTrigger,
    ):
        self.return_generator = return_generator
        self.spike_trigger = spike_trigger

    @classmethod
    def from_random_source(
        cls,
        random_source: Optional[RandomSource] = None,
        max_spike_probability: Optional[float] = None,
    ) -> "PortfolioSimulator":
        """Build a simulator whose engines share one random source"""
        source = random_source or RandomSource()
        if max_spike_probability is None:
            trigger = SpikeTrigger(source)
        else:
            trigger = SpikeTrigger(source, max_probability=max_spike_probability)
        return cls(DailyReturnGenerator(source), trigger)

    def advance_position(self, position: Position, current_day: int, positive_bias: bool = True) -> Position:
        last_spike_day = position.last_spike_day or 0
        is_spike = self.spike_trigger.should_spike(current_day, last_spike_day)
        if is_spike:
            change = self.spike_trigger.spike_magnitude()
            logger.info(
                "Spike on %s: %+.1f%% (day %s)", position.name, change * 100, current_day
            )
        else:
            change = self.return_generator.daily_return(positive_bias)
        return apply_movement(position, change, is_spike, current_day)

    def tick(
        self,
        positions: Iterable[Position],
        current_day: int,
        positive_bias: bool = True,
    ) -> List[Position]:
        """One simulated day across the whole portfolio; returns a new list"""
        return [self.advance_position(p, current_day, positive_bias) for p in positions]

    def micro_tick(
        self,
        positions: Iterable[Position],
        current_day: int,
        positive_bias: bool = True,
        factor: float = MICRO_CHANGE_FACTOR,
    ) -> List[Position]:
        """Small between-tick moves; never a spike"""
        return [
            apply_movement(
                p,
                self.return_generator.micro_return(positive_bias, factor),
                False,
                current_day,
            )
            for p in positions
        ]
