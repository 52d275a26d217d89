"""Proximity rule evaluation.

Sit together: two seated guests with a rule must occupy adjacent seats.
Sit apart:    two seated guests with a rule must not occupy adjacent seats.

Violations are keyed by (kind, unordered guest pair), so a pair is reported
once no matter which guest's seat is scanned first. Guests without a seat
never produce violations. When a guest has several sit together partners each
partner is checked independently, even if the seat has fewer neighbors than
partners; every resulting violation is reported.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple

from .models import GuestRef, ProximityRule, RuleKind, Seat, Table, Violation

log = logging.getLogger(__name__)

SeatRef = Tuple[Table, Seat]


def _seat_index(tables: Iterable[Table]) -> Dict[str, SeatRef]:
    """guest id -> (table, seat). Ties resolve by ids so input order never matters."""
    index: Dict[str, SeatRef] = {}
    for table in tables:
        for seat in table.seats:
            gid = seat.assigned_guest_id
            if gid is None:
                continue
            current = index.get(gid)
            if current is None or (table.id, seat.id) < (current[0].id, current[1].id):
                index[gid] = (table, seat)
    return index


def _rule_maps(rules: Iterable[ProximityRule]) -> Tuple[Dict[str, Set[str]], Set[frozenset]]:
    together: Dict[str, Set[str]] = {}
    apart: Set[frozenset] = set()
    for rule in rules:
        if rule.guest_a == rule.guest_b:
            continue
        if rule.kind is RuleKind.SIT_TOGETHER:
            together.setdefault(rule.guest_a, set()).add(rule.guest_b)
            together.setdefault(rule.guest_b, set()).add(rule.guest_a)
        else:
            apart.add(frozenset((rule.guest_a, rule.guest_b)))
    return together, apart


def _name(guest_id: str, guests: Mapping[str, GuestRef]) -> str:
    g = guests.get(guest_id)
    return g.name if g is not None and g.name else guest_id


def _adjacent(a: SeatRef, b: SeatRef) -> bool:
    return a[0].id == b[0].id and b[1].position in a[1].adjacent_positions


def _together_violation(a: str, b: str, ref_a: SeatRef, ref_b: SeatRef, guests: Mapping[str, GuestRef]) -> Violation:
    if ref_a[0].id != ref_b[0].id:
        where = f"at different tables ({ref_a[0].label or ref_a[0].id}, {ref_b[0].label or ref_b[0].id})"
    else:
        where = f"not adjacent at {ref_a[0].label or ref_a[0].id}"
    return Violation(
        kind=RuleKind.SIT_TOGETHER,
        guest_a=a,
        guest_b=b,
        table_id=ref_a[0].id,
        seat_ids=(ref_a[1].id, ref_b[1].id),
        reason=f"{_name(a, guests)} and {_name(b, guests)} should sit together but are {where}",
    )


def _apart_violation(a: str, b: str, ref_a: SeatRef, ref_b: SeatRef, guests: Mapping[str, GuestRef]) -> Violation:
    return Violation(
        kind=RuleKind.SIT_APART,
        guest_a=a,
        guest_b=b,
        table_id=ref_a[0].id,
        seat_ids=(ref_a[1].id, ref_b[1].id),
        reason=(f"{_name(a, guests)} and {_name(b, guests)} should sit apart but are adjacent "
                f"at {ref_a[0].label or ref_a[0].id}"),
    )


def detect_violations(
    tables: Iterable[Table],
    rules: Iterable[ProximityRule],
    guests: Optional[Mapping[str, GuestRef]] = None,
) -> List[Violation]:
    """Every sit together / sit apart violation in the current seating.

    When ``guests`` is given, guests missing from it are ignored, as the
    registry is the source of truth for who attends.
    """
    tables = list(tables)
    seat_of = _seat_index(tables)
    if guests is not None:
        seat_of = {gid: ref for gid, ref in seat_of.items() if gid in guests}
    guests = guests or {}
    together, apart = _rule_maps(rules)
    found: Dict[tuple, Violation] = {}

    for gid, ref in seat_of.items():
        for partner in together.get(gid, ()):
            partner_ref = seat_of.get(partner)
            if partner_ref is None or _adjacent(ref, partner_ref):
                continue
            a, b = sorted((gid, partner))
            key = (RuleKind.SIT_TOGETHER, frozenset((a, b)))
            if key not in found:
                refs = (ref, partner_ref) if a == gid else (partner_ref, ref)
                found[key] = _together_violation(a, b, refs[0], refs[1], guests)

        table, seat = ref
        for pos in seat.adjacent_positions:
            neighbor = table.seat_at(pos)
            if neighbor is None or neighbor.assigned_guest_id is None:
                continue
            other = neighbor.assigned_guest_id
            if other not in seat_of or frozenset((gid, other)) not in apart:
                continue
            a, b = sorted((gid, other))
            key = (RuleKind.SIT_APART, frozenset((a, b)))
            if key not in found:
                refs = (ref, seat_of[other]) if a == gid else (seat_of[other], ref)
                found[key] = _apart_violation(a, b, refs[0], refs[1], guests)

    violations = sorted(found.values(), key=lambda v: (v.kind.value, v.guest_a, v.guest_b))
    log.debug("detected %d proximity violations", len(violations))
    return violations


def summarize_violations(tables: Iterable[Table], violations: Iterable[Violation]) -> List[Dict[str, object]]:
    """Per table seat usage plus violation counts by kind."""
    violations = list(violations)
    stats = []
    for table in sorted(tables, key=lambda t: (t.number, t.id)):
        mine = [v for v in violations if v.table_id == table.id]
        together = sum(1 for v in mine if v.kind is RuleKind.SIT_TOGETHER)
        apart = sum(1 for v in mine if v.kind is RuleKind.SIT_APART)
        stats.append({
            "table": table.id,
            "label": table.label,
            "seats": len(table.seats),
            "seated": sum(1 for s in table.seats if s.occupied),
            "locked": sum(1 for s in table.seats if s.locked),
            "sit_together": together,
            "sit_apart": apart,
            "total": together + apart,
        })
    return stats


def violations_for_guest(violations: Iterable[Violation], guest_id: str) -> List[Violation]:
    """Violations that involve ``guest_id`` on either side of the pair."""
    return [v for v in violations if guest_id in (v.guest_a, v.guest_b)]


def violations_by_table(violations: Iterable[Violation]) -> Dict[str, List[Violation]]:
    by_table: Dict[str, List[Violation]] = {}
    for v in violations:
        by_table.setdefault(v.table_id, []).append(v)
    return by_table
