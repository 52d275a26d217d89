"""Data models for the seat layout engine."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


def parse_pipe_list(value: object) -> List[str]:
    """Split a pipe separated string into a list.

    Empty values such as ``""`` or ``None`` return an empty list.
    ``pandas`` often provides ``float('nan')`` for missing values which is
    also treated as empty.
    """
    if value is None:
        return []
    if isinstance(value, float) and math.isnan(value):
        return []
    text = str(value).strip()
    if not text or text.lower() == "nan":
        return []
    return [part.strip() for part in text.split("|") if part.strip()]


def parse_bool(value: object) -> bool:
    """Parse common truthy strings into bool."""
    return str(value).strip().lower() in {"true", "1", "yes", "y"}


# ----------------------------- enums -----------------------------
class SeatMode(str, Enum):
    """Who may sit in a seat."""

    DEFAULT = "default"
    HOST_ONLY = "host-only"
    EXTERNAL_ONLY = "external-only"

    @classmethod
    def parse(cls, value: object) -> "SeatMode":
        text = str(value).strip().lower().replace("_", "-")
        aliases = {"": cls.DEFAULT, "d": cls.DEFAULT, "h": cls.HOST_ONLY, "e": cls.EXTERNAL_ONLY,
                   "host": cls.HOST_ONLY, "external": cls.EXTERNAL_ONLY}
        if text in aliases:
            return aliases[text]
        return cls(text)


class TableShape(str, Enum):
    ROUND = "round"
    RECTANGLE = "rectangle"


class Direction(str, Enum):
    CLOCKWISE = "clockwise"
    COUNTER_CLOCKWISE = "counter-clockwise"

    @property
    def step(self) -> int:
        return 1 if self is Direction.CLOCKWISE else -1


class OrderingPattern(str, Enum):
    SEQUENTIAL = "sequential"
    ALTERNATING = "alternating"
    OPPOSITE = "opposite"
    CENTER_OUTWARD = "center-outward"
    MANUAL = "manual"


class RuleKind(str, Enum):
    SIT_TOGETHER = "sit-together"
    SIT_APART = "sit-apart"

    @classmethod
    def parse(cls, value: object) -> "RuleKind":
        text = str(value).strip().lower().replace("_", "-").replace(" ", "-")
        if text in {"together", "sit-together", "must-with"}:
            return cls.SIT_TOGETHER
        if text in {"apart", "sit-apart", "sit-away", "away", "must-separate"}:
            return cls.SIT_APART
        raise ValueError(f"Unknown proximity rule kind: {value}")


class AdjacencyKind(str, Enum):
    SIDE = "side"
    OPPOSITE = "opposite"
    EDGE = "edge"


class ErrorKind(str, Enum):
    NOT_FOUND = "NotFound"
    MODE_VIOLATION = "ModeViolation"
    LOCKED_SEAT = "LockedSeat"
    CONFIGURATION_INVALID = "ConfigurationInvalid"
    INVALID_SWAP = "InvalidSwap"
    ALREADY_SEATED = "AlreadySeated"


# ----------------------------- records -----------------------------
@dataclass(frozen=True)
class RectangleSides:
    """Seat counts per side of a rectangle table."""

    top: int = 0
    right: int = 0
    bottom: int = 0
    left: int = 0

    @property
    def total(self) -> int:
        return self.top + self.right + self.bottom + self.left

    def to_dict(self) -> Dict[str, int]:
        return {"top": self.top, "right": self.right, "bottom": self.bottom, "left": self.left}


@dataclass
class Seat:
    """A single seat at a table."""

    id: str
    table_id: str
    position: int
    seat_number: int
    mode: SeatMode = SeatMode.DEFAULT
    assigned_guest_id: Optional[str] = None
    locked: bool = False
    x: float = 0.0
    y: float = 0.0
    adjacent_positions: List[int] = field(default_factory=list)

    @property
    def label(self) -> str:
        return str(self.seat_number)

    @property
    def occupied(self) -> bool:
        return self.assigned_guest_id is not None

    def copy(self) -> "Seat":
        return Seat(
            id=self.id,
            table_id=self.table_id,
            position=self.position,
            seat_number=self.seat_number,
            mode=self.mode,
            assigned_guest_id=self.assigned_guest_id,
            locked=self.locked,
            x=self.x,
            y=self.y,
            adjacent_positions=list(self.adjacent_positions),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "tableId": self.table_id,
            "position": self.position,
            "seatNumber": self.seat_number,
            "label": self.label,
            "mode": self.mode.value,
            "assignedGuestId": self.assigned_guest_id,
            "locked": self.locked,
            "x": self.x,
            "y": self.y,
            "adjacentPositions": list(self.adjacent_positions),
        }


@dataclass
class Table:
    """A table with its seat array, ordered by position."""

    id: str
    shape: TableShape
    seats: List[Seat] = field(default_factory=list)
    label: str = ""
    number: int = 0
    x: float = 0.0
    y: float = 0.0
    radius: float = 0.0
    width: float = 0.0
    height: float = 0.0
    sides: Optional[RectangleSides] = None

    def seat_by_id(self, seat_id: str) -> Optional[Seat]:
        return next((s for s in self.seats if s.id == seat_id), None)

    def seat_at(self, position: int) -> Optional[Seat]:
        if 0 <= position < len(self.seats) and self.seats[position].position == position:
            return self.seats[position]
        return next((s for s in self.seats if s.position == position), None)

    def copy(self) -> "Table":
        """Structural copy: new Seat objects, shared immutable config."""
        return Table(
            id=self.id,
            shape=self.shape,
            seats=[s.copy() for s in self.seats],
            label=self.label,
            number=self.number,
            x=self.x,
            y=self.y,
            radius=self.radius,
            width=self.width,
            height=self.height,
            sides=self.sides,
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "shape": self.shape.value,
            "label": self.label,
            "number": self.number,
            "x": self.x,
            "y": self.y,
            "seats": [s.to_dict() for s in self.seats],
        }
        if self.shape is TableShape.ROUND:
            out["radius"] = self.radius
        else:
            out["width"] = self.width
            out["height"] = self.height
            out["rectangleSeats"] = self.sides.to_dict() if self.sides else None
        return out


@dataclass(frozen=True)
class GuestRef:
    """Read-only view of a guest record owned by the guest registry."""

    id: str
    name: str = ""
    from_host: bool = False


@dataclass(frozen=True)
class ProximityRule:
    """A sit together or sit apart rule between two guests."""

    id: str
    kind: RuleKind
    guest_a: str
    guest_b: str

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "kind": self.kind.value, "guestA": self.guest_a, "guestB": self.guest_b}


@dataclass(frozen=True)
class Violation:
    """A proximity rule that the current seating breaks."""

    kind: RuleKind
    guest_a: str
    guest_b: str
    table_id: str
    seat_ids: tuple
    reason: str = ""

    @property
    def pair(self) -> frozenset:
        return frozenset((self.guest_a, self.guest_b))

    @property
    def key(self) -> tuple:
        return (self.kind, self.pair)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "guestA": self.guest_a,
            "guestB": self.guest_b,
            "tableId": self.table_id,
            "seatIds": list(self.seat_ids),
            "reason": self.reason,
        }


@dataclass
class OperationResult:
    """Outcome of an engine operation. Failures are data, not exceptions."""

    success: bool
    reasons: List[str] = field(default_factory=list)
    errors: List[ErrorKind] = field(default_factory=list)
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, **details: Any) -> "OperationResult":
        return cls(success=True, details=dict(details))

    @classmethod
    def fail(cls, error: ErrorKind, reason: str) -> "OperationResult":
        return cls(success=False, reasons=[reason], errors=[error])

    def add(self, error: ErrorKind, reason: str) -> None:
        self.success = False
        self.reasons.append(reason)
        self.errors.append(error)

    def __bool__(self) -> bool:
        return self.success

    def to_dict(self) -> Dict[str, Any]:
        return {"success": self.success, "reasons": list(self.reasons)}
