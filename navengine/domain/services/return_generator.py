"""
DAILY RETURN GENERATOR
Bounded pseudo-random daily percentage change

RULES:
- Box-Muller normal sample scaled by a fixed volatility
- Optional positive bias shift applied before clamping
- Result always inside [-3%, +5%] (hard clamp, no rejection sampling)
"""

import math
from typing import Optional

from navengine.domain.services.random_source import RandomSource
from navengine.utils.numbers import clamp

DAILY_VOLATILITY = 0.02
POSITIVE_BIAS_SHIFT = 0.01
DAILY_RETURN_FLOOR = -0.03
DAILY_RETURN_CEILING = 0.05
MICRO_CHANGE_FACTOR = 0.1

# Parameters behind the projected monthly return
DAYS_PER_MONTH = 30
MEAN_SPIKE_GAP_DAYS = 9.5
MEAN_SPIKE_MAGNITUDE = 0.375
SPIKE_POSITIVE_SHARE = 0.7


class DailyReturnGenerator:
    """
    Daily Return Generator
    Produces ordinary (non-spike) daily moves
    """

    def __init__(
        self,
        random_source: Optional[RandomSource] = None,
        volatility: float = DAILY_VOLATILITY,
        bias_shift: float = POSITIVE_BIAS_SHIFT,
        floor: float = DAILY_RETURN_FLOOR,
        ceiling: float = DAILY_RETURN_CEILING,
    ):
        self.random_source = random_source or RandomSource()
        self.volatility = volatility
        self.bias_shift = bias_shift
        self.floor = floor
        self.ceiling = ceiling

    def standard_normal(self) -> float:
        """Box-Muller transform of two uniform draws"""
        u1 = self.random_source.open_uniform()
        u2 = self.random_source.uniform()
        return math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)

    def daily_return(self, positive_bias: bool = True) -> float:
        """
        Draw one daily change as a fraction (0.01 == +1%).

        Args:
            positive_bias: shift the distribution up by `bias_shift`

        Returns:
            Change clamped into [floor, ceiling]
        """
        change = self.standard_normal() * self.volatility
        if positive_bias:
            change += self.bias_shift
        return clamp(change, self.floor, self.ceiling)

    def micro_return(self, positive_bias: bool = True, factor: float = MICRO_CHANGE_FACTOR) -> float:
        """Small incremental move for between-tick display updates"""
        return self.daily_return(positive_bias) * factor


def projected_monthly_return(positive_bias: bool = True) -> float:
    """
    Expected simple (non-compounded) monthly return implied by the
    generator and spike parameters. Used to sanity-check tuning.
    """
    avg_daily_return = POSITIVE_BIAS_SHIFT if positive_bias else 0.0
    spikes_per_month = DAYS_PER_MONTH / MEAN_SPIKE_GAP_DAYS
    avg_spike_return = (
        SPIKE_POSITIVE_SHARE * MEAN_SPIKE_MAGNITUDE
        - (1 - SPIKE_POSITIVE_SHARE) * MEAN_SPIKE_MAGNITUDE
    )
    normal_days = DAYS_PER_MONTH - spikes_per_month
    return spikes_per_month * avg_spike_return + normal_days * avg_daily_return
