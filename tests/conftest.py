from typing import List

import pytest

from navengine.domain.models import Position
from navengine.domain.services.portfolio_simulator import PortfolioSimulator
from navengine.domain.services.random_source import RandomSource
from navengine.infrastructure.cache.memory_cache import MemoryCache
from navengine.infrastructure.repositories.position_repository import PositionRepository
from navengine.services.valuation_service import ValuationService
from tests.fakes import FIXED_NOW


@pytest.fixture()
def random_source() -> RandomSource:
    return RandomSource(seed=1234)


@pytest.fixture()
def sample_positions() -> List[Position]:
    return [
        Position.create("Alpha", 1_000_000, 1_000, description="first"),
        Position.create("Beta", 500_000, 250, description="second"),
    ]


@pytest.fixture()
def memory_store() -> MemoryCache:
    return MemoryCache()


@pytest.fixture()
def repository(memory_store, sample_positions) -> PositionRepository:
    return PositionRepository(memory_store, default_positions=sample_positions)


@pytest.fixture()
def simulator(random_source) -> PortfolioSimulator:
    return PortfolioSimulator.from_random_source(random_source)


@pytest.fixture()
def valuation_service(repository, simulator) -> ValuationService:
    return ValuationService(
        repository=repository,
        simulator=simulator,
        clock=lambda: FIXED_NOW,
    )
