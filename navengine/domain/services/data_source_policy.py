"""
DATA SOURCE POLICY
Decide per data category whether to serve simulated or real data

Modes:
- mock:   every category simulated
- real:   every category from the real backend
- hybrid: categories listed in HYBRID_MODE_SERVICES (or "all") simulated,
          the rest real
FORCE_MOCK overrides everything.
"""

from dataclasses import dataclass
from typing import FrozenSet, Iterable, Union

from navengine.domain.models import DataCategory

VALID_MODES = ("mock", "real", "hybrid")
ALL_CATEGORIES = "all"


@dataclass(frozen=True)
class DataSourcePolicy:
    mode: str = "mock"
    mock_services: FrozenSet[str] = frozenset({ALL_CATEGORIES})
    force_mock: bool = False

    def __post_init__(self):
        if self.mode not in VALID_MODES:
            raise ValueError(f"Unknown data mode '{self.mode}', expected one of {VALID_MODES}")

    @classmethod
    def from_settings(cls, settings) -> "DataSourcePolicy":
        return cls(
            mode=(settings.DATA_MODE or "mock").strip().lower(),
            mock_services=parse_services(settings.HYBRID_MODE_SERVICES),
            force_mock=bool(settings.FORCE_MOCK),
        )

    def use_mock(self, category: Union[DataCategory, str]) -> bool:
        if self.force_mock or self.mode == "mock":
            return True
        if self.mode == "real":
            return False
        name = category.value if isinstance(category, DataCategory) else str(category).lower()
        return ALL_CATEGORIES in self.mock_services or name in self.mock_services

    def use_real(self, category: Union[DataCategory, str]) -> bool:
        return not self.use_mock(category)

    def describe(self) -> dict:
        return {c.value: ("mock" if self.use_mock(c) else "real") for c in DataCategory}


def parse_services(raw: Union[str, Iterable[str], None]) -> FrozenSet[str]:
    if raw is None:
        return frozenset()
    items = raw.split(",") if isinstance(raw, str) else raw
    return frozenset(item.strip().lower() for item in items if item and item.strip())
