"""CSV loading utilities."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import IO, Any, Iterable, List, Optional, Tuple, Union

import pandas as pd

from .layout import TableConfig
from .models import (
    Direction,
    GuestRef,
    OrderingPattern,
    ProximityRule,
    RectangleSides,
    RuleKind,
    TableShape,
    parse_bool,
    parse_pipe_list,
)
from .modes import parse_mode_pattern

Source = Union[Path, str, IO[Any]]


@dataclass(frozen=True)
class SeatAssignment:
    """One row of ``assignments.csv``: a guest placed by table and seat number."""

    table_id: str
    seat_number: int
    guest_id: str
    locked: bool = False


def _read(path: Source) -> pd.DataFrame:
    # Everything as text so ids like "007" survive
    return pd.read_csv(path, dtype=str)


def _cell(row: pd.Series, name: str, default: Any = "") -> Any:
    value = row.get(name, default)
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return default
    value = value.strip() if isinstance(value, str) else value
    return default if value == "" else value


def _int(row: pd.Series, name: str, default: int = 0) -> int:
    value = _cell(row, name, None)
    if value is None:
        return default
    try:
        return int(float(value))
    except ValueError:
        raise ValueError(f"Column {name} must be a number, got {value!r}") from None


def load_guests(path: Source) -> List[GuestRef]:
    """Load guests from ``guests.csv`` (id, name, from_host)."""
    df = _read(path)
    guests: List[GuestRef] = []
    seen = set()
    for _, row in df.iterrows():
        gid = _cell(row, "id")
        if not gid:
            raise ValueError(f"Guest row without id: {_cell(row, 'name')}")
        if gid in seen:
            raise ValueError(f"Duplicate guest id: {gid}")
        seen.add(gid)
        guests.append(GuestRef(
            id=gid,
            name=_cell(row, "name", gid),
            from_host=parse_bool(_cell(row, "from_host", "false")),
        ))
    return guests


def load_rules(path: Source, guest_ids: Optional[Iterable[str]] = None) -> List[ProximityRule]:
    """Load proximity rules (id, kind, guest_a, guest_b).

    If ``guest_ids`` is provided it validates that both guests exist.
    """
    df = _read(path)
    known = set(guest_ids) if guest_ids is not None else None
    rules: List[ProximityRule] = []
    for i, row in df.iterrows():
        a = _cell(row, "guest_a")
        b = _cell(row, "guest_b")
        if not a or not b:
            raise ValueError(f"Rule on row {i + 1} needs two guests")
        if known is not None and (a not in known or b not in known):
            raise ValueError(f"Rule references unknown guest: {a}, {b}")
        rules.append(ProximityRule(
            id=_cell(row, "id", f"rule-{i + 1}"),
            kind=RuleKind.parse(_cell(row, "kind")),
            guest_a=a,
            guest_b=b,
        ))
    return rules


def load_tables(path: Source) -> List[TableConfig]:
    """Load table configurations.

    Round tables use ``count``; rectangle tables use ``top``, ``right``,
    ``bottom`` and ``left``. ``order`` holds a pipe separated seat number list
    for the manual pattern.
    """
    df = _read(path)
    configs: List[TableConfig] = []
    for _, row in df.iterrows():
        shape = TableShape(_cell(row, "shape", "round").lower())
        sides = None
        if shape is TableShape.RECTANGLE:
            sides = RectangleSides(
                top=_int(row, "top"),
                right=_int(row, "right"),
                bottom=_int(row, "bottom"),
                left=_int(row, "left"),
            )
        manual = [int(n) for n in parse_pipe_list(_cell(row, "order"))] or None
        configs.append(TableConfig(
            id=_cell(row, "id"),
            shape=shape,
            count=_int(row, "count"),
            sides=sides,
            direction=Direction(_cell(row, "direction", "clockwise").lower()),
            pattern=OrderingPattern(_cell(row, "pattern", "sequential").lower()),
            start_position=_int(row, "start"),
            manual_ordering=manual,
            mode_pattern=parse_mode_pattern(_cell(row, "mode_pattern")),
            label=_cell(row, "label"),
            center=(float(_cell(row, "x", 0.0)), float(_cell(row, "y", 0.0))),
        ))
    return configs


def load_assignments(path: Source) -> List[SeatAssignment]:
    """Load seat assignments (table_id, seat_number, guest_id[, locked])."""
    df = _read(path)
    out: List[SeatAssignment] = []
    for _, row in df.iterrows():
        out.append(SeatAssignment(
            table_id=_cell(row, "table_id"),
            seat_number=_int(row, "seat_number"),
            guest_id=_cell(row, "guest_id"),
            locked=parse_bool(_cell(row, "locked", "false")),
        ))
    return out


def load_all(
    guests_path: Source, rules_path: Source, tables_path: Source
) -> Tuple[List[GuestRef], List[ProximityRule], List[TableConfig]]:
    """Convenience wrapper returning guests, rules and table configs."""
    guests = load_guests(guests_path)
    rules = load_rules(rules_path, {g.id for g in guests})
    tables = load_tables(tables_path)
    return guests, rules, tables
