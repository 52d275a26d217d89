"""Committed seating state and the operations that change it.

Every mutating operation follows the same shape:

    1. copy the tables it touches (``Table.copy``)
    2. apply the change to the copies, rejecting on the first rule it breaks
    3. recompute violations over the would-be world
    4. rebind ``world.tables`` and ``world.violations`` in one step

A rejected operation never reaches step 4, so committed state is unchanged and
no reader can observe half of a swap or batch edit. Validation calls stop after
step 3 and discard the copies.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

from .adjacency import adjacent_positions_by_kind, adjacent_seat_ids, apply_adjacency
from .layout import ConfigurationInvalid, DEFAULT_SEAT_LIMITS, SeatLimits, TableConfig, build_table, validate_config
from .models import (
    AdjacencyKind,
    ErrorKind,
    GuestRef,
    OperationResult,
    ProximityRule,
    Seat,
    SeatMode,
    Table,
    TableShape,
    Violation,
)
from .modes import incompatibility_reason, rescale_modes, rescale_rectangle_modes
from .ordering import check_permutation
from .proximity import detect_violations, summarize_violations, violations_for_guest

log = logging.getLogger(__name__)


class OperationRejected(Exception):
    """Raised inside a simulation; public methods turn it into a failed result."""

    def __init__(self, result: OperationResult) -> None:
        super().__init__("; ".join(result.reasons))
        self.result = result

    @classmethod
    def of(cls, error: ErrorKind, reason: str) -> "OperationRejected":
        return cls(OperationResult.fail(error, reason))


@dataclass
class World:
    """Explicit session handle: tables, the guest registry and rules."""

    tables: Dict[str, Table] = field(default_factory=dict)
    guests: Dict[str, GuestRef] = field(default_factory=dict)
    rules: List[ProximityRule] = field(default_factory=list)
    violations: List[Violation] = field(default_factory=list)

    def seats(self) -> Iterator[Tuple[Table, Seat]]:
        for table in self.tables.values():
            for seat in table.seats:
                yield table, seat

    def next_number(self) -> int:
        return max((t.number for t in self.tables.values()), default=0) + 1


def _seat_name(table: Table, seat: Seat) -> str:
    return f"Seat {seat.seat_number} at {table.label or table.id}"


def _auto_label(number: int) -> str:
    return f"Table {number}"


def _parse_mode(mode: object) -> SeatMode:
    try:
        return SeatMode(mode)
    except ValueError:
        raise OperationRejected.of(ErrorKind.CONFIGURATION_INVALID, f"Unknown seat mode {mode!r}") from None


class SeatAssignmentCoordinator:
    """Owns a World and applies validated, all-or-nothing seat operations."""

    def __init__(
        self,
        world: Optional[World] = None,
        move_seated_guests: bool = True,
        seat_limits: SeatLimits = DEFAULT_SEAT_LIMITS,
    ) -> None:
        self.world = world if world is not None else World()
        self.move_seated_guests = move_seated_guests
        self.seat_limits = seat_limits
        self.world.violations = self._detect(self.world.tables)

    # ----------------------------- lookup -----------------------------
    @property
    def violations(self) -> List[Violation]:
        return list(self.world.violations)

    def table(self, table_id: str) -> Optional[Table]:
        return self.world.tables.get(table_id)

    def seat(self, table_id: str, seat_id: str) -> Optional[Seat]:
        table = self.world.tables.get(table_id)
        return table.seat_by_id(seat_id) if table else None

    def find_guest_seat(self, guest_id: str) -> Optional[Tuple[Table, Seat]]:
        return self._find_guest(self.world.tables, guest_id)

    def get_adjacent_seat_ids(self, table_id: str, seat_id: str) -> Optional[List[str]]:
        """Neighbor seat ids, or None when the table or seat does not exist."""
        table = self.world.tables.get(table_id)
        if table is None or table.seat_by_id(seat_id) is None:
            return None
        return adjacent_seat_ids(table, seat_id)

    def adjacent_guests_by_kind(self, table_id: str, seat_id: str) -> Optional[Dict[AdjacencyKind, List[str]]]:
        """Guests in neighboring seats, grouped by how they neighbor ``seat_id``."""
        table = self.world.tables.get(table_id)
        seat = table.seat_by_id(seat_id) if table else None
        if seat is None:
            return None
        out: Dict[AdjacencyKind, List[str]] = {}
        for kind, positions in adjacent_positions_by_kind(table, seat.position).items():
            guests = []
            for pos in positions:
                other = table.seat_at(pos)
                if other is not None and other.assigned_guest_id is not None:
                    guests.append(other.assigned_guest_id)
            out[kind] = guests
        return out

    def summary(self) -> List[Dict[str, object]]:
        return summarize_violations(self.world.tables.values(), self.world.violations)

    # ----------------------------- internals -----------------------------
    @staticmethod
    def _find_guest(tables: Mapping[str, Table], guest_id: str) -> Optional[Tuple[Table, Seat]]:
        for table in tables.values():
            for seat in table.seats:
                if seat.assigned_guest_id == guest_id:
                    return table, seat
        return None

    def _detect(self, tables: Mapping[str, Table]) -> List[Violation]:
        return detect_violations(tables.values(), self.world.rules, self.world.guests)

    def _resolve(self, table_id: str, seat_id: str) -> Tuple[Table, Seat]:
        table = self.world.tables.get(table_id)
        if table is None:
            raise OperationRejected.of(ErrorKind.NOT_FOUND, f"Table {table_id} not found")
        seat = table.seat_by_id(seat_id)
        if seat is None:
            raise OperationRejected.of(ErrorKind.NOT_FOUND, f"Seat {seat_id} not found at {table.label or table.id}")
        return table, seat

    def _resolve_table(self, table_id: str) -> Table:
        table = self.world.tables.get(table_id)
        if table is None:
            raise OperationRejected.of(ErrorKind.NOT_FOUND, f"Table {table_id} not found")
        return table

    def _overlay(self, changed: Mapping[str, Table], removed: Iterable[str] = ()) -> Dict[str, Table]:
        tables = dict(self.world.tables)
        tables.update(changed)
        for table_id in removed:
            tables.pop(table_id, None)
        return tables

    def _commit(self, changed: Mapping[str, Table], removed: Iterable[str] = ()) -> None:
        tables = self._overlay(changed, removed)
        violations = self._detect(tables)
        self.world.tables = tables
        self.world.violations = violations
        log.debug("committed %d table(s), %d violation(s)", len(changed), len(violations))

    def _reject(self, operation: str, error: OperationRejected) -> OperationResult:
        log.info("%s rejected: %s", operation, error)
        return error.result

    def _check_guest_fits(self, guest_id: str, table: Table, seat: Seat, result: OperationResult) -> None:
        guest = self.world.guests.get(guest_id)
        if guest is None:
            result.add(ErrorKind.NOT_FOUND, f"Guest {guest_id} not found")
            return
        reason = incompatibility_reason(guest, seat.mode)
        if reason is not None:
            result.add(ErrorKind.MODE_VIOLATION, f"{reason}: {_seat_name(table, seat)}")

    # ----------------------------- simulations -----------------------------
    def _simulate_assign(self, table_id: str, seat_id: str, guest_id: Optional[str]) -> Tuple[Dict[str, Table], Dict[str, object]]:
        table, seat = self._resolve(table_id, seat_id)
        copies = {table.id: table.copy()}
        target = copies[table.id].seat_by_id(seat_id)
        details: Dict[str, object] = {"table_id": table.id, "seat_id": seat.id, "guest_id": guest_id}

        if guest_id is None:
            details["removed"] = target.assigned_guest_id
            target.assigned_guest_id = None
            return copies, details

        if guest_id not in self.world.guests:
            raise OperationRejected.of(ErrorKind.NOT_FOUND, f"Guest {guest_id} not found")
        if target.assigned_guest_id == guest_id:
            return copies, details
        if target.locked:
            raise OperationRejected.of(ErrorKind.LOCKED_SEAT, f"{_seat_name(table, seat)} is locked")
        check = OperationResult.ok()
        self._check_guest_fits(guest_id, table, seat, check)
        if not check:
            raise OperationRejected(check)

        current = self.find_guest_seat(guest_id)
        if current is not None:
            old_table, old_seat = current
            if not self.move_seated_guests:
                raise OperationRejected.of(
                    ErrorKind.ALREADY_SEATED, f"Guest {guest_id} already sits in {_seat_name(old_table, old_seat)}")
            if old_seat.locked:
                raise OperationRejected.of(
                    ErrorKind.LOCKED_SEAT, f"Guest {guest_id} sits in locked {_seat_name(old_table, old_seat)}")
            if old_table.id not in copies:
                copies[old_table.id] = old_table.copy()
            copies[old_table.id].seat_by_id(old_seat.id).assigned_guest_id = None
            details["moved_from"] = old_seat.id

        if target.assigned_guest_id is not None:
            details["displaced"] = target.assigned_guest_id
        target.assigned_guest_id = guest_id
        return copies, details

    def _simulate_swap(self, table_a: str, seat_a: str, table_b: str, seat_b: str) -> Dict[str, Table]:
        ta, sa = self._resolve(table_a, seat_a)
        tb, sb = self._resolve(table_b, seat_b)
        if ta.id == tb.id and sa.id == sb.id:
            raise OperationRejected.of(ErrorKind.INVALID_SWAP, "Cannot swap a seat with itself")

        result = OperationResult.ok()
        for table, seat in ((ta, sa), (tb, sb)):
            if seat.assigned_guest_id is None:
                result.add(ErrorKind.INVALID_SWAP, f"{_seat_name(table, seat)} is empty")
        if not result:
            raise OperationRejected(result)
        for table, seat in ((ta, sa), (tb, sb)):
            if seat.locked:
                result.add(ErrorKind.LOCKED_SEAT, f"{_seat_name(table, seat)} is locked")
        # Each guest against the seat it would move into
        self._check_guest_fits(sa.assigned_guest_id, tb, sb, result)
        self._check_guest_fits(sb.assigned_guest_id, ta, sa, result)
        if not result:
            raise OperationRejected(result)

        copies = {ta.id: ta.copy()}
        if tb.id not in copies:
            copies[tb.id] = tb.copy()
        new_a = copies[ta.id].seat_by_id(sa.id)
        new_b = copies[tb.id].seat_by_id(sb.id)
        new_a.assigned_guest_id, new_b.assigned_guest_id = sb.assigned_guest_id, sa.assigned_guest_id
        return copies

    # ----------------------------- assignment -----------------------------
    def assign(self, table_id: str, seat_id: str, guest_id: Optional[str]) -> OperationResult:
        """Seat ``guest_id`` at the seat, or clear it when ``guest_id`` is None."""
        try:
            copies, details = self._simulate_assign(table_id, seat_id, guest_id)
        except OperationRejected as e:
            return self._reject("assign", e)
        self._commit(copies)
        return OperationResult.ok(**details)

    def clear(self, table_id: str, seat_id: str) -> OperationResult:
        return self.assign(table_id, seat_id, None)

    def swap(self, table_a: str, seat_a: str, table_b: str, seat_b: str) -> OperationResult:
        try:
            copies = self._simulate_swap(table_a, seat_a, table_b, seat_b)
        except OperationRejected as e:
            return self._reject("swap", e)
        self._commit(copies)
        return OperationResult.ok(seats=[seat_a, seat_b])

    def validate_assignment(self, table_id: str, seat_id: str, guest_id: Optional[str]) -> OperationResult:
        """Check an assignment without committing it.

        A valid assignment still reports, as ``violations`` and ``warnings``, the
        proximity violations involving ``guest_id`` that it would leave behind.
        """
        try:
            copies, details = self._simulate_assign(table_id, seat_id, guest_id)
        except OperationRejected as e:
            return e.result
        predicted = violations_for_guest(self._detect(self._overlay(copies)), guest_id) if guest_id else []
        return OperationResult.ok(violations=predicted, warnings=[v.reason for v in predicted], **details)

    def validate_swap(self, table_a: str, seat_a: str, table_b: str, seat_b: str) -> OperationResult:
        try:
            self._simulate_swap(table_a, seat_a, table_b, seat_b)
        except OperationRejected as e:
            return e.result
        return OperationResult.ok()

    def detect_violations_after_assign(self, table_id: str, seat_id: str, guest_id: Optional[str]) -> List[Violation]:
        """Violations the assignment would leave. A rejected assignment changes nothing."""
        try:
            copies, _ = self._simulate_assign(table_id, seat_id, guest_id)
        except OperationRejected:
            return self.violations
        return self._detect(self._overlay(copies))

    def detect_violations_after_swap(self, table_a: str, seat_a: str, table_b: str, seat_b: str) -> List[Violation]:
        try:
            copies = self._simulate_swap(table_a, seat_a, table_b, seat_b)
        except OperationRejected:
            return self.violations
        return self._detect(self._overlay(copies))

    def swap_candidates(self, table_id: str, seat_id: str) -> List[Dict[str, object]]:
        """Every valid swap partner for a seat, fewest predicted violations first."""
        source = self.seat(table_id, seat_id)
        if source is None or source.assigned_guest_id is None:
            return []
        candidates = []
        for table, seat in self.world.seats():
            if seat.assigned_guest_id is None or (table.id == table_id and seat.id == seat_id):
                continue
            try:
                copies = self._simulate_swap(table_id, seat_id, table.id, seat.id)
            except OperationRejected:
                continue
            predicted = self._detect(self._overlay(copies))
            candidates.append({
                "table_id": table.id,
                "seat_id": seat.id,
                "seat_number": seat.seat_number,
                "guest_id": seat.assigned_guest_id,
                "violations": len(predicted),
                "_order": (table.number, seat.position),
            })
        candidates.sort(key=lambda c: (c["violations"], c["_order"]))
        for c in candidates:
            del c["_order"]
        return candidates

    def incompatible_swap_candidates(self, table_id: str, seat_id: str) -> List[Dict[str, object]]:
        """Occupied, unlocked seats whose swap fails on seat mode alone."""
        source = self.seat(table_id, seat_id)
        if source is None or source.assigned_guest_id is None:
            return []
        out = []
        for table, seat in self.world.seats():
            if seat.assigned_guest_id is None or (table.id == table_id and seat.id == seat_id):
                continue
            try:
                self._simulate_swap(table_id, seat_id, table.id, seat.id)
            except OperationRejected as e:
                if e.result.errors and all(err is ErrorKind.MODE_VIOLATION for err in e.result.errors):
                    out.append({
                        "table_id": table.id,
                        "seat_id": seat.id,
                        "seat_number": seat.seat_number,
                        "guest_id": seat.assigned_guest_id,
                        "reasons": list(e.result.reasons),
                    })
        return out

    # ----------------------------- seat edits -----------------------------
    def set_lock(self, table_id: str, seat_id: str, locked: bool = True) -> OperationResult:
        try:
            table, seat = self._resolve(table_id, seat_id)
        except OperationRejected as e:
            return self._reject("set_lock", e)
        copy = table.copy()
        copy.seat_by_id(seat.id).locked = locked
        self._commit({table.id: copy})
        return OperationResult.ok(locked=locked)

    def _target_tables(self, table_id: Optional[str]) -> List[Table]:
        if table_id is None:
            return list(self.world.tables.values())
        return [self._resolve_table(table_id)]

    def _fold_seats(self, operation: str, table_id: Optional[str], edit) -> OperationResult:
        """Apply ``edit(seat)`` to every seat of the target tables as one commit."""
        try:
            tables = self._target_tables(table_id)
        except OperationRejected as e:
            return self._reject(operation, e)
        copies = {}
        changed = 0
        for table in tables:
            copy = table.copy()
            for seat in copy.seats:
                if edit(seat):
                    changed += 1
            copies[copy.id] = copy
        self._commit(copies)
        return OperationResult.ok(changed=changed)

    def lock_all(self, table_id: Optional[str] = None) -> OperationResult:
        def edit(seat: Seat) -> bool:
            was, seat.locked = seat.locked, True
            return not was
        return self._fold_seats("lock_all", table_id, edit)

    def unlock_all(self, table_id: Optional[str] = None) -> OperationResult:
        def edit(seat: Seat) -> bool:
            was, seat.locked = seat.locked, False
            return was
        return self._fold_seats("unlock_all", table_id, edit)

    def clear_all_seats(self, table_id: Optional[str] = None, include_locked: bool = True) -> OperationResult:
        def edit(seat: Seat) -> bool:
            if seat.assigned_guest_id is None or (seat.locked and not include_locked):
                return False
            seat.assigned_guest_id = None
            return True
        return self._fold_seats("clear_all_seats", table_id, edit)

    def update_seat_mode(self, table_id: str, seat_id: str, mode: SeatMode) -> OperationResult:
        try:
            table, seat = self._resolve(table_id, seat_id)
            copy = table.copy()
            target = copy.seat_by_id(seat.id)
            target.mode = _parse_mode(mode)
            result = OperationResult.ok(mode=target.mode.value)
            if target.assigned_guest_id is not None:
                self._check_guest_fits(target.assigned_guest_id, copy, target, result)
            if not result:
                raise OperationRejected(result)
        except OperationRejected as e:
            return self._reject("update_seat_mode", e)
        self._commit({copy.id: copy})
        return result

    def update_seat_modes(self, table_id: str, modes: Sequence[SeatMode]) -> OperationResult:
        """Replace every seat mode of a table; ``modes`` is indexed by position."""
        try:
            table = self._resolve_table(table_id)
            if len(modes) != len(table.seats):
                raise OperationRejected.of(
                    ErrorKind.CONFIGURATION_INVALID, f"{len(modes)} seat modes given for {len(table.seats)} seats")
            copy = table.copy()
            result = OperationResult.ok()
            for seat in copy.seats:
                seat.mode = _parse_mode(modes[seat.position])
                if seat.assigned_guest_id is not None:
                    self._check_guest_fits(seat.assigned_guest_id, copy, seat, result)
            if not result:
                raise OperationRejected(result)
        except OperationRejected as e:
            return self._reject("update_seat_modes", e)
        self._commit({copy.id: copy})
        return result

    def update_seat_order(self, table_id: str, numbers: Sequence[int]) -> OperationResult:
        """Renumber seats; ``numbers[position]`` must be a permutation of 1..N."""
        try:
            table = self._resolve_table(table_id)
            try:
                check_permutation(numbers, len(table.seats))
            except ValueError as e:
                raise OperationRejected.of(ErrorKind.CONFIGURATION_INVALID, str(e))
        except OperationRejected as e:
            return self._reject("update_seat_order", e)
        copy = table.copy()
        for seat in copy.seats:
            seat.seat_number = int(numbers[seat.position])
        self._commit({copy.id: copy})
        return OperationResult.ok()

    # ----------------------------- tables -----------------------------
    @staticmethod
    def _config_failure(error: ConfigurationInvalid) -> OperationResult:
        result = OperationResult.ok()
        for problem in error.problems:
            result.add(ErrorKind.CONFIGURATION_INVALID, problem)
        return result

    def create_table(self, config: TableConfig) -> OperationResult:
        config = replace(config, limits=self.seat_limits)
        if config.id in self.world.tables:
            return self._reject("create_table", OperationRejected.of(
                ErrorKind.CONFIGURATION_INVALID, f"Table {config.id} already exists"))
        try:
            table = build_table(config, self.world.next_number())
        except ConfigurationInvalid as e:
            log.info("create_table rejected: %s", e)
            return self._config_failure(e)
        self._commit({table.id: table})
        log.debug("created table %s (%s)", table.id, table.label)
        return OperationResult.ok(table_id=table.id, number=table.number)

    def modify_table(self, table_id: str, config: TableConfig, preserve_modes: bool = True) -> OperationResult:
        """Rebuild a table from a new configuration. Its guests are unseated."""
        existing = self.world.tables.get(table_id)
        if existing is None:
            return self._reject("modify_table", OperationRejected.of(
                ErrorKind.NOT_FOUND, f"Table {table_id} not found"))
        config = replace(config, id=table_id, limits=self.seat_limits, label=config.label or existing.label)
        try:
            validate_config(config)
            if preserve_modes and config.modes is None and config.mode_pattern is None:
                config = config.with_modes(self._rescaled_modes(existing, config))
            table = build_table(config, existing.number)
        except ConfigurationInvalid as e:
            log.info("modify_table rejected: %s", e)
            return self._config_failure(e)
        unseated = [s.assigned_guest_id for s in existing.seats if s.assigned_guest_id is not None]
        self._commit({table.id: table})
        return OperationResult.ok(table_id=table.id, unseated=unseated)

    @staticmethod
    def _rescaled_modes(existing: Table, config: TableConfig) -> List[SeatMode]:
        old = [s.mode for s in sorted(existing.seats, key=lambda s: s.position)]
        if (existing.shape is TableShape.RECTANGLE and config.shape is TableShape.RECTANGLE
                and existing.sides is not None):
            return rescale_rectangle_modes(old, existing.sides, config.sides)
        return rescale_modes(old, config.seat_count)

    def replace_table(self, table: Table) -> OperationResult:
        """Install an externally built table after checking it against the world."""
        result = OperationResult.ok()
        seats = sorted(table.seats, key=lambda s: s.position)
        count = len(seats)
        if not str(table.id).strip():
            result.add(ErrorKind.CONFIGURATION_INVALID, "table id must not be empty")
        if [s.position for s in seats] != list(range(count)):
            result.add(ErrorKind.CONFIGURATION_INVALID, f"seat positions must be 0..{count - 1}")
        if len({s.id for s in seats}) != count:
            result.add(ErrorKind.CONFIGURATION_INVALID, "seat ids must be unique")
        try:
            check_permutation([s.seat_number for s in seats], count)
        except ValueError as e:
            result.add(ErrorKind.CONFIGURATION_INVALID, str(e))
        if table.shape is TableShape.RECTANGLE and (table.sides is None or table.sides.total != count):
            result.add(ErrorKind.CONFIGURATION_INVALID, "rectangle side counts do not match the seats")
        limits = self.seat_limits
        if not limits.min_seats <= count <= limits.max_seats:
            result.add(ErrorKind.CONFIGURATION_INVALID,
                       f"seat count {count} outside {limits.min_seats}..{limits.max_seats}")

        others = {tid: t for tid, t in self.world.tables.items() if tid != table.id}
        seen = set()
        for seat in seats:
            gid = seat.assigned_guest_id
            if gid is None:
                continue
            if gid in seen:
                result.add(ErrorKind.CONFIGURATION_INVALID, f"Guest {gid} is assigned to more than one seat")
            seen.add(gid)
            elsewhere = self._find_guest(others, gid)
            if elsewhere is not None:
                result.add(ErrorKind.ALREADY_SEATED, f"Guest {gid} already sits in {_seat_name(*elsewhere)}")
            self._check_guest_fits(gid, table, seat, result)
        if not result:
            log.info("replace_table rejected: %s", "; ".join(result.reasons))
            return result

        existing = self.world.tables.get(table.id)
        copy = table.copy()
        copy.seats = [s.copy() for s in seats]
        for seat in copy.seats:
            seat.table_id = copy.id
        copy.number = existing.number if existing is not None else self.world.next_number()
        if not copy.label:
            copy.label = existing.label if existing is not None else _auto_label(copy.number)
        apply_adjacency(copy)
        self._commit({copy.id: copy})
        return OperationResult.ok(table_id=copy.id, number=copy.number)

    def delete_table(self, table_id: str) -> OperationResult:
        """Remove a table and close the gap in table numbering."""
        try:
            removed = self._resolve_table(table_id)
        except OperationRejected as e:
            return self._reject("delete_table", e)
        renumbered = {}
        for table in self.world.tables.values():
            if table.id == table_id or table.number <= removed.number:
                continue
            copy = table.copy()
            copy.number = table.number - 1
            if table.label == _auto_label(table.number):
                copy.label = _auto_label(copy.number)
            renumbered[copy.id] = copy
        unseated = [s.assigned_guest_id for s in removed.seats if s.assigned_guest_id is not None]
        self._commit(renumbered, removed=[table_id])
        return OperationResult.ok(table_id=table_id, unseated=unseated, renumbered=sorted(renumbered))

    # ----------------------------- registry -----------------------------
    def set_rules(self, rules: Iterable[ProximityRule]) -> OperationResult:
        self.world.rules = list(rules)
        self.world.violations = self._detect(self.world.tables)
        return OperationResult.ok(violations=len(self.world.violations))

    def set_guests(self, guests: Iterable[GuestRef]) -> OperationResult:
        self.world.guests = {g.id: g for g in guests}
        self.world.violations = self._detect(self.world.tables)
        return OperationResult.ok(violations=len(self.world.violations))
