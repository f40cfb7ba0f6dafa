"""
NAV ENGINE
Reduce positions into a fund-level snapshot

RULES:
✅ Recomputed from scratch on every call (no running totals)
✅ Empty portfolio -> zero snapshot, never NaN/inf
✅ Change measured against the inception baseline
"""

from datetime import datetime
from typing import Iterable, Optional

from navengine.domain.models import DEFAULT_TOKEN_SUPPLY, NAVSnapshot, Position
from navengine.utils.time import utc_now


def change_percentage(total_current: int, total_initial: int) -> float:
    if total_initial <= 0:
        return 0.0
    return (total_current - total_initial) / total_initial * 100


def aggregate(
    positions: Iterable[Position],
    token_supply: int = DEFAULT_TOKEN_SUPPLY,
    day_number: int = 0,
    generated_at: Optional[datetime] = None,
) -> NAVSnapshot:
    """
    Aggregate positions into a NAVSnapshot with empty display fields.

    Args:
        positions: Positions to sum
        token_supply: Fund tokens outstanding, for the per-token NAV
        day_number: Simulation day the positions belong to
        generated_at: Snapshot timestamp (defaults to now, UTC)
    """
    held = tuple(positions)
    total_current = sum(p.current_value for p in held)
    total_initial = sum(p.initial_value for p in held)

    supply = token_supply if token_supply > 0 else DEFAULT_TOKEN_SUPPLY

    return NAVSnapshot(
        total_current_value=total_current,
        total_initial_value=total_initial,
        change_percentage=change_percentage(total_current, total_initial),
        positions=held,
        price_per_token=total_current // supply,
        token_supply=supply,
        day_number=day_number,
        generated_at=generated_at or utc_now(),
    )
