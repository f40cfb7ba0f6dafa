import pytest

from navengine.domain.services.random_source import RandomSource
from navengine.domain.services.spike_engine import (
    SPIKE_BASE_PROBABILITY,
    SPIKE_MAX_MAGNITUDE,
    SPIKE_MIN_MAGNITUDE,
    SpikeTrigger,
    sanitize_probability,
)
from tests.fakes import SequenceRandomSource


def test_no_spike_inside_cooldown():
    # uniform() == 0.0 would trigger any positive probability
    trigger = SpikeTrigger(SequenceRandomSource([0.0] * 10))
    for day in range(10, 15):
        assert trigger.spike_probability(day, last_spike_day=10) == 0.0
        assert trigger.should_spike(day, last_spike_day=10) is False


def test_probability_ramps_and_caps():
    trigger = SpikeTrigger(RandomSource(seed=3))
    assert trigger.spike_probability(15, 10) == pytest.approx(SPIKE_BASE_PROBABILITY)
    assert trigger.spike_probability(18, 10) == pytest.approx(SPIKE_BASE_PROBABILITY + 0.03)
    assert trigger.spike_probability(200, 10) == pytest.approx(0.20)


def test_configurable_cap():
    trigger = SpikeTrigger(RandomSource(seed=3), max_probability=0.5)
    assert trigger.spike_probability(100, 0) == pytest.approx(0.5)


def test_should_spike_compares_draw_with_probability():
    trigger = SpikeTrigger(SequenceRandomSource([0.05, 0.5]))
    assert trigger.should_spike(20, 0) is True
    assert trigger.should_spike(20, 0) is False


def test_spike_magnitude_range_and_sign():
    # magnitude draw, then sign draw (< 0.7 positive)
    trigger = SpikeTrigger(SequenceRandomSource([0.0, 0.1, 0.9999, 0.9]))
    assert trigger.spike_magnitude() == pytest.approx(SPIKE_MIN_MAGNITUDE)
    negative = trigger.spike_magnitude()
    assert negative < 0
    assert abs(negative) == pytest.approx(SPIKE_MAX_MAGNITUDE, abs=1e-3)


def test_spike_magnitudes_mostly_positive():
    trigger = SpikeTrigger(RandomSource(seed=11))
    draws = [trigger.spike_magnitude() for _ in range(4_000)]
    assert all(SPIKE_MIN_MAGNITUDE <= abs(d) <= SPIKE_MAX_MAGNITUDE for d in draws)
    positive_share = sum(1 for d in draws if d > 0) / len(draws)
    assert positive_share == pytest.approx(0.7, abs=0.04)


def test_invalid_trigger_arguments():
    with pytest.raises(ValueError):
        SpikeTrigger(cooldown_days=-1)
    with pytest.raises(ValueError):
        SpikeTrigger(max_probability=1.5)


def test_sanitize_probability():
    assert sanitize_probability(float("nan")) == 0.20
    assert sanitize_probability(2) == 1.0
    assert sanitize_probability(-0.1) == 0.0
    assert sanitize_probability(0.3) == pytest.approx(0.3)
