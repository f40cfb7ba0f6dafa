#!/usr/bin/env python3
"""
Run the portfolio simulation offline for N days and print the NAV path.

Usage:
  python scripts/simulate_price_movements.py
  python scripts/simulate_price_movements.py --days 90 --verbose
  python scripts/simulate_price_movements.py --days 30 --seed 42 --chart nav.csv
  python scripts/simulate_price_movements.py --no-positive-bias --json
"""

from __future__ import annotations

import argparse
import csv
import sys
from pathlib import Path
from typing import List, Optional

from navengine.domain.models import Position
from navengine.domain.schemas.position import NAVSnapshotSchema
from navengine.domain.services.currency_formatter import (
    format_change,
    format_token_amount,
    format_value,
    render_snapshot,
    truncate_address,
)
from navengine.domain.services.nav_engine import aggregate
from navengine.domain.services.portfolio_simulator import PortfolioSimulator
from navengine.domain.services.random_source import RandomSource
from navengine.domain.services.return_generator import projected_monthly_return
from navengine.infrastructure.repositories.position_repository import load_default_positions


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Simulate daily price movements for the default portfolio.")
    parser.add_argument("--days", type=int, default=30, help="Number of simulated days (default: 30)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for a reproducible run")
    parser.add_argument("--positions", default="", help="YAML file with seed positions (default: bundled set)")
    parser.add_argument("--no-positive-bias", action="store_true", help="Disable the upward daily bias")
    parser.add_argument("--verbose", action="store_true", help="Print every position on every day")
    parser.add_argument("--chart", default="", help="Write the daily NAV path to this CSV file")
    parser.add_argument("--json", action="store_true", help="Print the final snapshot as JSON")
    return parser.parse_args(argv)


def _print_positions(positions: List[Position]) -> None:
    for p in positions:
        print(
            f"    {p.name:<20} {format_value(p.current_value):>14}  {format_change(p.change_percent):>9}  "
            f"{format_token_amount(p.token_amount):>14}  {truncate_address(p.address)}"
        )


def write_chart(path: Path, rows: List[dict]) -> None:
    with path.open("w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=["day", "total_sats", "change_pct", "spikes"])
        writer.writeheader()
        writer.writerows(rows)


def run(args: argparse.Namespace) -> int:
    if args.days <= 0:
        print("--days must be positive", file=sys.stderr)
        return 2

    positions = load_default_positions(Path(args.positions) if args.positions else None)
    simulator = PortfolioSimulator.from_random_source(RandomSource(args.seed))
    positive_bias = not args.no_positive_bias

    start = aggregate(positions)
    print(f"Simulating {args.days} days for {len(positions)} positions (positive bias: {positive_bias})")
    print(f"Day 0: NAV {format_value(start.total_current_value)}")

    rows = [{"day": 0, "total_sats": start.total_current_value, "change_pct": 0.0, "spikes": ""}]
    spike_count = 0

    for day in range(1, args.days + 1):
        moved = simulator.tick(positions, day, positive_bias)
        spiked = [p.name for p in moved if p.last_spike_day == day]
        spike_count += len(spiked)
        positions = moved

        snapshot = aggregate(positions, day_number=day)
        line = (
            f"Day {day}: NAV {format_value(snapshot.total_current_value)} "
            f"({format_change(snapshot.change_percentage)})"
        )
        if spiked:
            line += f"  spikes: {', '.join(spiked)}"
        print(line)
        if args.verbose:
            _print_positions(positions)

        rows.append(
            {
                "day": day,
                "total_sats": snapshot.total_current_value,
                "change_pct": round(snapshot.change_percentage, 4),
                "spikes": ";".join(spiked),
            }
        )

    final = aggregate(positions, day_number=args.days)
    print("")
    print(f"Final NAV: {format_value(final.total_current_value)} ({format_change(final.change_percentage)})")
    print(f"Spikes: {spike_count}")
    print(f"Projected monthly return: {format_change(projected_monthly_return(positive_bias) * 100)}")

    if args.chart:
        write_chart(Path(args.chart), rows)
        print(f"Wrote {len(rows)} rows to {args.chart}")
    if args.json:
        print(NAVSnapshotSchema.from_snapshot(render_snapshot(final, "btc")).model_dump_json(indent=2))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    return run(parse_args(argv))


if __name__ == "__main__":
    raise SystemExit(main())
