"""
SPIKE ENGINE
Cooldown-gated rare large moves ("super spikes")

RULES:
❌ No spike within the cooldown window after the last one
✅ Base probability 1/9.5 per eligible day (mean gap 5-14 days)
✅ Probability grows 1%/day past the cooldown, capped
✅ Magnitude 25-50%, positive 70% of the time
"""

from typing import Optional

from navengine.domain.services.random_source import RandomSource
from navengine.utils.numbers import clamp, is_finite_number

SPIKE_COOLDOWN_DAYS = 5
SPIKE_BASE_PROBABILITY = 1 / 9.5
SPIKE_DAILY_INCREMENT = 0.01
SPIKE_MAX_PROBABILITY = 0.20
SPIKE_MIN_MAGNITUDE = 0.25
SPIKE_MAX_MAGNITUDE = 0.50
SPIKE_POSITIVE_PROBABILITY = 0.70


class SpikeTrigger:
    """
    Spike Trigger
    Decides whether a position gets a spike today and how large it is
    """

    def __init__(
        self,
        random_source: Optional[RandomSource] = None,
        cooldown_days: int = SPIKE_COOLDOWN_DAYS,
        base_probability: float = SPIKE_BASE_PROBABILITY,
        daily_increment: float = SPIKE_DAILY_INCREMENT,
        max_probability: float = SPIKE_MAX_PROBABILITY,
    ):
        if cooldown_days < 0:
            raise ValueError("Cooldown cannot be negative")
        if not 0 <= max_probability <= 1:
            raise ValueError("Max probability must be within [0, 1]")
        self.random_source = random_source or RandomSource()
        self.cooldown_days = cooldown_days
        self.base_probability = base_probability
        self.daily_increment = daily_increment
        self.max_probability = max_probability

    def spike_probability(self, current_day: int, last_spike_day: int = 0) -> float:
        """Probability of a spike on `current_day`; 0 inside the cooldown"""
        elapsed = current_day - last_spike_day
        if elapsed < self.cooldown_days:
            return 0.0
        additional = max(0, elapsed - self.cooldown_days) * self.daily_increment
        return min(self.max_probability, self.base_probability + additional)

    def should_spike(self, current_day: int, last_spike_day: int = 0) -> bool:
        probability = self.spike_probability(current_day, last_spike_day)
        if probability <= 0:
            return False
        return self.random_source.uniform() < probability

    def spike_magnitude(self) -> float:
        """Signed spike size as a fraction, |x| in [0.25, 0.50]"""
        span = SPIKE_MAX_MAGNITUDE - SPIKE_MIN_MAGNITUDE
        magnitude = SPIKE_MIN_MAGNITUDE + self.random_source.uniform() * span
        is_positive = self.random_source.uniform() < SPIKE_POSITIVE_PROBABILITY
        return magnitude if is_positive else -magnitude


def sanitize_probability(value: object, default: float = SPIKE_MAX_PROBABILITY) -> float:
    """Clamp a configured probability cap into [0, 1]"""
    if not is_finite_number(value):
        return default
    return clamp(float(value), 0.0, 1.0)
