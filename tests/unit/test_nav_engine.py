import math
from datetime import datetime, timezone

from navengine.domain.models import DEFAULT_TOKEN_SUPPLY, Position
from navengine.domain.services.nav_engine import aggregate, change_percentage


def test_aggregate_sums_positions(sample_positions):
    moved = [
        Position("Alpha", 1_000_000, 1_100_000, 1_000),
        Position("Beta", 500_000, 400_000, 250),
    ]
    snapshot = aggregate(moved, token_supply=1_000)
    assert snapshot.total_current_value == 1_500_000
    assert snapshot.total_initial_value == 1_500_000
    assert snapshot.change_percentage == 0.0
    assert snapshot.price_per_token == 1_500
    assert snapshot.position_count == 2


def test_change_against_inception_baseline():
    snapshot = aggregate([Position("Alpha", 1_000_000, 1_200_000, 1_000)])
    assert snapshot.change_percentage == 20.0


def test_empty_portfolio_is_zero_snapshot():
    snapshot = aggregate([])
    assert snapshot.total_current_value == 0
    assert snapshot.total_initial_value == 0
    assert snapshot.change_percentage == 0.0
    assert not math.isnan(snapshot.change_percentage)
    assert snapshot.positions == ()
    assert snapshot.price_per_token == 0


def test_change_percentage_zero_baseline():
    assert change_percentage(100, 0) == 0.0


def test_non_positive_supply_falls_back_to_default(sample_positions):
    snapshot = aggregate(sample_positions, token_supply=0)
    assert snapshot.token_supply == DEFAULT_TOKEN_SUPPLY
    assert snapshot.price_per_token == 1_500_000 // DEFAULT_TOKEN_SUPPLY


def test_aggregate_carries_day_and_timestamp(sample_positions):
    ts = datetime(2024, 3, 1, tzinfo=timezone.utc)
    snapshot = aggregate(sample_positions, day_number=42, generated_at=ts)
    assert snapshot.day_number == 42
    assert snapshot.generated_at == ts
    assert snapshot.display_value == ""


def test_recomputed_from_scratch_each_call(sample_positions):
    first = aggregate(sample_positions)
    second = aggregate(sample_positions[:1])
    assert first.total_current_value == 1_500_000
    assert second.total_current_value == 1_000_000
