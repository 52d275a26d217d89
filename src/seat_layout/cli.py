"""Command line interface for the seat layout engine."""
from __future__ import annotations

import argparse
import csv
import logging
from pathlib import Path
from typing import Optional, Sequence

from .coordinator import SeatAssignmentCoordinator, World
from .csv_loader import load_all, load_assignments
from .layout import SeatLimits
from .models import Seat, Table


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Seat layout and proximity rule check")
    parser.add_argument("--guests", required=True, help="Path to guests.csv")
    parser.add_argument("--rules", required=True, help="Path to rules.csv")
    parser.add_argument("--tables", required=True, help="Path to tables.csv")
    parser.add_argument("--assignments", type=Path,
                        help="Path to assignments.csv: table_id,seat_number,guest_id[,locked].")
    parser.add_argument("--max-seats", type=int, default=300,
                        help="Largest seat count accepted for a single table.")
    parser.add_argument("--no-move", action="store_true",
                        help="Reject assignments of guests who already have a seat instead of moving them.")
    parser.add_argument("--out-seats", type=Path,
                        help="Write seats CSV: one row per seat with number, mode and guest.")
    parser.add_argument("--out-report", type=Path,
                        help="Write violations CSV.")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging.")
    return parser


def _seat_by_number(table: Table, number: int) -> Optional[Seat]:
    return next((s for s in table.seats if s.seat_number == number), None)


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point used by ``python -m seat_layout.cli``."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    guests, rules, configs = load_all(args.guests, args.rules, args.tables)
    coordinator = SeatAssignmentCoordinator(
        World(guests={g.id: g for g in guests}, rules=rules),
        move_seated_guests=not args.no_move,
        seat_limits=SeatLimits(max_seats=args.max_seats),
    )

    rejected = 0
    for config in configs:
        result = coordinator.create_table(config)
        if not result:
            rejected += 1
            print(f"[REJECTED] table {config.id}: {'; '.join(result.reasons)}")

    if args.assignments:
        for row in load_assignments(args.assignments):
            table = coordinator.table(row.table_id)
            seat = _seat_by_number(table, row.seat_number) if table else None
            if seat is None:
                rejected += 1
                print(f"[REJECTED] {row.guest_id} -> {row.table_id}#{row.seat_number}: seat not found")
                continue
            result = coordinator.assign(table.id, seat.id, row.guest_id or None)
            if not result:
                rejected += 1
                print(f"[REJECTED] {row.guest_id} -> {row.table_id}#{row.seat_number}: {'; '.join(result.reasons)}")
                continue
            if row.locked:
                coordinator.set_lock(table.id, seat.id, True)

    violations = coordinator.violations
    for v in violations:
        print(f"[VIOLATION] {v.kind.value} {v.guest_a},{v.guest_b} table={v.table_id}: {v.reason}")

    stats = coordinator.summary()
    for s in stats:
        print(f"[REPORT] {s['table']} label={s['label']} seated={s['seated']}/{s['seats']} "
              f"locked={s['locked']} together={s['sit_together']} apart={s['sit_apart']}")

    if args.out_seats:
        args.out_seats.parent.mkdir(parents=True, exist_ok=True)
        with args.out_seats.open("w", newline="") as f:
            w = csv.writer(f)
            w.writerow(["table", "seat_id", "position", "seat_number", "mode", "guest", "locked", "adjacent"])
            for table in sorted(coordinator.world.tables.values(), key=lambda t: t.number):
                for seat in table.seats:
                    adjacent = [str(table.seat_at(p).seat_number) for p in seat.adjacent_positions]
                    w.writerow([table.id, seat.id, seat.position, seat.seat_number, seat.mode.value,
                                seat.assigned_guest_id or "", str(seat.locked).lower(), "|".join(adjacent)])

    if args.out_report:
        args.out_report.parent.mkdir(parents=True, exist_ok=True)
        with args.out_report.open("w", newline="") as f:
            w = csv.DictWriter(f, fieldnames=["kind", "guest_a", "guest_b", "table", "seats", "reason"])
            w.writeheader()
            for v in violations:
                w.writerow({
                    "kind": v.kind.value,
                    "guest_a": v.guest_a,
                    "guest_b": v.guest_b,
                    "table": v.table_id,
                    "seats": "|".join(v.seat_ids),
                    "reason": v.reason,
                })

    return 1 if rejected else 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
