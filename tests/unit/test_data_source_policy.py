import pytest

from navengine.config import Settings
from navengine.domain.models import DataCategory
from navengine.domain.services.data_source_policy import DataSourcePolicy, parse_services


def test_mock_mode_simulates_everything():
    policy = DataSourcePolicy(mode="mock")
    assert all(policy.use_mock(c) for c in DataCategory)


def test_real_mode_uses_backend():
    policy = DataSourcePolicy(mode="real")
    assert policy.use_real(DataCategory.POSITIONS)
    assert policy.describe()["supply"] == "real"


def test_hybrid_mode_per_category():
    policy = DataSourcePolicy(mode="hybrid", mock_services=parse_services("trading, supply"))
    assert policy.use_mock(DataCategory.TRADING)
    assert policy.use_mock("supply")
    assert policy.use_real(DataCategory.POSITIONS)
    assert policy.describe() == {
        "positions": "real",
        "transactions": "real",
        "trading": "mock",
        "supply": "mock",
    }


def test_force_mock_overrides_mode():
    policy = DataSourcePolicy(mode="real", force_mock=True)
    assert policy.use_mock(DataCategory.POSITIONS)


def test_unknown_mode_rejected():
    with pytest.raises(ValueError):
        DataSourcePolicy(mode="live")


def test_from_settings():
    cfg = Settings(DATA_MODE="Hybrid", HYBRID_MODE_SERVICES="positions", FORCE_MOCK=False)
    policy = DataSourcePolicy.from_settings(cfg)
    assert policy.mode == "hybrid"
    assert policy.use_mock(DataCategory.POSITIONS)
    assert policy.use_real(DataCategory.TRADING)


def test_parse_services():
    assert parse_services(None) == frozenset()
    assert parse_services(" All ,") == frozenset({"all"})
    assert parse_services(["Trading", ""]) == frozenset({"trading"})
