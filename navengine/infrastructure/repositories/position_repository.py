"""
Position Repository
The persisted position set is one JSON document, always replaced wholesale.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional

import yaml
from pydantic import ValidationError

from navengine.domain.models import CurrencyMode, Position
from navengine.domain.schemas.position import PositionSchema
from navengine.infrastructure.cache.types import KeyValueStore

logger = logging.getLogger(__name__)

POSITIONS_KEY = "ovt-portfolio-positions"
CURRENCY_KEY = "ovt-currency-preference"
DEFAULT_POSITIONS_FILE = Path(__file__).resolve().parents[2] / "config" / "default_positions.yml"


def mock_address(name: str) -> str:
    slug = re.sub(r"\s+", "-", name.strip()).lower()
    return f"mock-address-{slug}"


def load_default_positions(path: Optional[Path] = None) -> List[Position]:
    """
    Load the first-run seed positions from YAML.

    Positions without an address get a deterministic mock address.
    """
    seed_file = Path(path) if path else DEFAULT_POSITIONS_FILE
    with open(seed_file, "r") as f:
        data = yaml.safe_load(f) or {}

    positions: List[Position] = []
    for raw in data.get("positions", []):
        schema = PositionSchema.model_validate(raw)
        if not schema.address:
            schema.address = mock_address(schema.name)
        positions.append(schema.to_position())
    return positions


def parse_positions(payload: object) -> List[Position]:
    """
    Validate a decoded JSON document into positions.

    Raises:
        ValueError: payload is not a list of valid positions
    """
    if not isinstance(payload, list):
        raise ValueError(f"Expected a JSON array of positions, got {type(payload).__name__}")

    positions: List[Position] = []
    seen = set()
    for item in payload:
        try:
            position = PositionSchema.model_validate(item).to_position()
        except ValidationError as exc:
            raise ValueError(f"Invalid position record: {exc.errors()[:1]}") from exc
        if position.name in seen:
            logger.warning("Duplicate position '%s' in document; keeping the first", position.name)
            continue
        seen.add(position.name)
        positions.append(position)
    return positions


def dump_positions(positions: Iterable[Position]) -> List[dict]:
    return [PositionSchema.from_position(p).model_dump() for p in positions]


class PositionRepository:
    """
    Reads and writes the shared position document.

    A missing key means "not initialised yet" and triggers seeding from the
    default set; an unreadable document is reseeded the same way.
    """

    def __init__(
        self,
        store: KeyValueStore,
        default_positions: Optional[List[Position]] = None,
        positions_file: Optional[Path] = None,
    ):
        self._store = store
        self._default_positions = default_positions
        self._positions_file = positions_file

    def default_positions(self) -> List[Position]:
        if self._default_positions is None:
            self._default_positions = load_default_positions(self._positions_file)
        return list(self._default_positions)

    async def load_positions(self) -> List[Position]:
        raw = await self._store.get_str(POSITIONS_KEY)
        if raw is None:
            logger.info("Position set not found in store; seeding defaults")
            return await self.reset()

        try:
            return parse_positions(json.loads(raw))
        except (json.JSONDecodeError, ValueError) as exc:
            logger.warning("Persisted position set unreadable (%s); reseeding defaults", exc)
            return await self.reset()

    async def save_positions(self, positions: Iterable[Position]) -> None:
        await self._store.set_str(POSITIONS_KEY, json.dumps(dump_positions(positions)))

    async def reset(self) -> List[Position]:
        positions = self.default_positions()
        await self.save_positions(positions)
        return positions

    async def get_currency(self) -> Optional[CurrencyMode]:
        raw = await self._store.get_str(CURRENCY_KEY)
        if raw is None:
            return None
        try:
            return CurrencyMode(raw)
        except ValueError:
            logger.warning("Ignoring unknown currency preference %r", raw)
            return None

    async def set_currency(self, mode: CurrencyMode) -> None:
        await self._store.set_str(CURRENCY_KEY, mode.value)
