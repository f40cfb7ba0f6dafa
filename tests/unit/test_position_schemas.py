from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from navengine.domain.models import CurrencyMode, DataProvenance, Position
from navengine.domain.schemas.position import NAVSnapshotSchema, PositionSchema, PositionView
from navengine.domain.services.currency_formatter import render_snapshot
from navengine.domain.services.nav_engine import aggregate


def test_schema_round_trip_through_position():
    position = Position("Alpha", 1_000, 1_100, 10, last_spike_day=4, address="addr", transaction_id="tx")
    assert PositionSchema.from_position(position).to_position() == position


def test_schema_defaults_for_new_positions():
    schema = PositionSchema.model_validate({"name": "Beta", "initialValue": 500, "tokenAmount": 5, "description": None})
    assert schema.current_value == 500
    assert schema.last_spike_day == 0
    assert schema.description == ""


def test_current_value_floored_at_one():
    schema = PositionSchema.model_validate({"name": "Beta", "value": 500, "current": 0, "tokenAmount": 5})
    assert schema.current_value == 1


def test_position_view_includes_derived_fields():
    view = PositionView.from_position(Position("Alpha", 1_000_000, 1_050_000, 1_000))
    assert view.change_percent == 5.0
    assert view.price_per_token == 1_050


def test_snapshot_schema_serialises_enums():
    base = aggregate(
        [Position.create("Alpha", 100_000_000, 1_000)],
        generated_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )
    snapshot = render_snapshot(base, CurrencyMode.FIAT, 40_000)
    data = NAVSnapshotSchema.from_snapshot(snapshot).model_dump(mode="json")
    assert data["currency"] == "usd"
    assert data["display_value"] == "$40.0k"
    assert data["provenance"] == DataProvenance.SIMULATED.value
    assert data["positions"][0]["name"] == "Alpha"


def test_snapshot_schema_includes_usd_token_price():
    base = aggregate([Position.create("Alpha", 100_000_000, 1_000)], token_supply=1_000)

    priced = NAVSnapshotSchema.from_snapshot(render_snapshot(base, CurrencyMode.NATIVE, 40_000)).model_dump()
    assert priced["price_per_token_usd"] == 40.0

    unpriced = NAVSnapshotSchema.from_snapshot(render_snapshot(base, CurrencyMode.NATIVE)).model_dump()
    assert unpriced["price_per_token_usd"] is None


def test_schema_strips_names():
    schema = PositionSchema.model_validate({"name": "  Alpha ", "value": 10, "tokenAmount": 1})
    assert schema.name == "Alpha"


def test_blank_name_rejected():
    with pytest.raises(ValidationError):
        PositionSchema.model_validate({"name": "   ", "value": 10, "tokenAmount": 1})
