"""Declarative table configuration and the table build pipeline.

    TableConfig -> validate_config -> geometry -> ordering + modes -> adjacency -> Table
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import List, Optional, Sequence, Tuple

from .adjacency import apply_adjacency
from .geometry import build_rectangle_seats, build_round_seats, rectangle_dimensions, round_dimensions
from .models import Direction, OrderingPattern, RectangleSides, SeatMode, Table, TableShape
from .modes import Alternating, ModePattern, Ratio, Repeating, Specific, Uniform, generate_modes
from .ordering import check_permutation, generate_ordering

log = logging.getLogger(__name__)


class ConfigurationInvalid(ValueError):
    """A table configuration failed static validation. ``problems`` lists every issue."""

    def __init__(self, problems: Sequence[str]) -> None:
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))


@dataclass(frozen=True)
class SeatLimits:
    min_seats: int = 1
    max_seats: int = 300


DEFAULT_SEAT_LIMITS = SeatLimits()


def _coerce(enum, value):
    if isinstance(value, enum):
        return value
    try:
        return enum(value)
    except ValueError:
        return value


@dataclass
class TableConfig:
    """Everything needed to (re)build a table's seat array."""

    id: str
    shape: TableShape = TableShape.ROUND
    count: int = 0
    sides: Optional[RectangleSides] = None
    direction: Direction = Direction.CLOCKWISE
    pattern: OrderingPattern = OrderingPattern.SEQUENTIAL
    start_position: int = 0
    manual_ordering: Optional[List[int]] = None
    mode_pattern: Optional[ModePattern] = None
    modes: Optional[List[SeatMode]] = None
    label: str = ""
    center: Tuple[float, float] = (0.0, 0.0)
    limits: SeatLimits = field(default_factory=SeatLimits)

    def __post_init__(self) -> None:
        # Accept plain data; values that do not parse are left as given for validate_config
        self.shape = _coerce(TableShape, self.shape)
        self.direction = _coerce(Direction, self.direction)
        self.pattern = _coerce(OrderingPattern, self.pattern)
        if isinstance(self.sides, dict):
            self.sides = RectangleSides(**self.sides)
        if self.modes is not None:
            self.modes = [_coerce(SeatMode, m) for m in self.modes]

    @property
    def seat_count(self) -> int:
        if self.shape is TableShape.RECTANGLE:
            return self.sides.total if self.sides else 0
        return self.count

    def with_modes(self, modes: List[SeatMode]) -> "TableConfig":
        return replace(self, modes=list(modes), mode_pattern=None)


# ----------------------------- validation -----------------------------
def _mode_pattern_problems(pattern: ModePattern, count: int) -> List[str]:
    problems = []
    if isinstance(pattern, Repeating) and not pattern.sequence:
        problems.append("repeating mode pattern has an empty sequence")
    elif isinstance(pattern, Ratio):
        if any(share < 0 for share in pattern.ratios.values()):
            problems.append("mode ratios must not be negative")
        restricted = sum(s for m, s in pattern.ratios.items() if m is not SeatMode.DEFAULT)
        if restricted > 1.0 + 1e-9:
            problems.append(f"mode ratios sum to {restricted:.2f}, more than 1")
    elif isinstance(pattern, Specific):
        bad = sorted(p for p in pattern.overrides if not 0 <= p < count)
        if bad:
            problems.append(f"mode overrides outside 0..{count - 1}: {bad}")
    elif not isinstance(pattern, (Uniform, Alternating)):
        problems.append(f"unsupported mode pattern {pattern!r}")
    return problems


def validate_config(config: TableConfig) -> None:
    """Raise ConfigurationInvalid before any seat is built."""
    problems: List[str] = []
    limits = config.limits
    if not str(config.id).strip():
        problems.append("table id must not be empty")
    if limits.min_seats < 0 or limits.max_seats < 0:
        problems.append("seat limits must not be negative")
    if limits.min_seats > limits.max_seats:
        problems.append(f"min seats {limits.min_seats} is greater than max seats {limits.max_seats}")
    for name, enum in (("shape", TableShape), ("direction", Direction), ("pattern", OrderingPattern)):
        value = getattr(config, name)
        if not isinstance(value, enum):
            problems.append(f"unknown table {name} {value!r}")
    unknown_modes = [m for m in config.modes or () if not isinstance(m, SeatMode)]
    if unknown_modes:
        problems.append(f"unknown seat modes {unknown_modes!r}")

    if config.shape is TableShape.RECTANGLE:
        sides = config.sides
        if sides is None:
            problems.append("rectangle table needs per-side seat counts")
        else:
            for name, value in sides.to_dict().items():
                if value < 0:
                    problems.append(f"{name} seat count must not be negative")
            if not any(v > 0 for v in sides.to_dict().values()):
                problems.append("rectangle table needs at least one side with seats")
    else:
        if config.count < 0:
            problems.append("seat count must not be negative")
        elif config.count == 0:
            problems.append("round table needs at least one seat")

    count = config.seat_count
    if count > 0 and not limits.min_seats <= count <= limits.max_seats:
        problems.append(f"seat count {count} outside {limits.min_seats}..{limits.max_seats}")
    if count > 0 and not 0 <= config.start_position < count:
        problems.append(f"start position {config.start_position} outside 0..{count - 1}")

    if config.pattern is OrderingPattern.MANUAL:
        try:
            check_permutation(config.manual_ordering or [], count)
        except ValueError as e:
            problems.append(str(e))
    if config.modes is not None and len(config.modes) != count:
        problems.append(f"{len(config.modes)} seat modes given for {count} seats")
    if config.mode_pattern is not None and count > 0:
        problems.extend(_mode_pattern_problems(config.mode_pattern, count))

    if problems:
        raise ConfigurationInvalid(problems)


# ----------------------------- build -----------------------------
def build_table(config: TableConfig, number: int = 0) -> Table:
    """Build a fresh table: seats, numbering, modes and cached adjacency."""
    validate_config(config)
    count = config.seat_count
    label = config.label or (f"Table {number}" if number else str(config.id))

    if config.shape is TableShape.RECTANGLE:
        seats = build_rectangle_seats(config.id, config.sides, config.center)
        width, height = rectangle_dimensions(config.sides)
        table = Table(id=config.id, shape=TableShape.RECTANGLE, seats=seats, label=label, number=number,
                      x=config.center[0], y=config.center[1], width=width, height=height, sides=config.sides)
    else:
        seats = build_round_seats(config.id, count, config.center)
        radius, _ = round_dimensions(count)
        table = Table(id=config.id, shape=TableShape.ROUND, seats=seats, label=label, number=number,
                      x=config.center[0], y=config.center[1], radius=radius)

    numbers = generate_ordering(
        count,
        config.direction,
        config.pattern,
        config.start_position,
        sides=config.sides if config.shape is TableShape.RECTANGLE else None,
        manual=config.manual_ordering,
    )
    if config.modes is not None:
        modes = list(config.modes)
    else:
        modes = generate_modes(config.mode_pattern or Uniform(), count)

    for seat in table.seats:
        seat.seat_number = numbers[seat.position]
        seat.mode = modes[seat.position]
    apply_adjacency(table)
    log.debug("built %s table %s with %d seats", table.shape.value, table.id, count)
    return table
