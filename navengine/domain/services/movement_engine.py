"""
MOVEMENT ENGINE
Apply one incremental move to one position

RULES:
✅ Pure: returns a new Position, never mutates the input
✅ current_value rounded to whole sats, floored at 1
✅ change_percent / price_per_token re-derived (see Position)
✅ last_spike_day only moves forward, and only on spikes
"""

import dataclasses
import math

from navengine.domain.models import Position
from navengine.utils.numbers import is_finite_number, round_half_up


def apply_movement(
    position: Position,
    change: float,
    is_spike: bool,
    current_day: int,
) -> Position:
    """
    Apply an incremental change (0.05 == +5%) to a position.

    Args:
        position: Position to move
        change: Incremental daily/spike change, not the cumulative return
        is_spike: Record `current_day` as the latest spike day
        current_day: Day number of this move

    Returns:
        New Position with the moved value
    """
    if not is_finite_number(change):
        change = 0.0

    moved = position.current_value * (1 + change)
    if not math.isfinite(moved):
        moved = float(position.current_value)
    current_value = max(1, round_half_up(moved))

    last_spike_day = position.last_spike_day
    if is_spike:
        last_spike_day = max(last_spike_day, current_day)

    return dataclasses.replace(
        position,
        current_value=current_value,
        last_spike_day=last_spike_day,
    )
