"""Seat mode patterns.

A mode pattern is a small declarative description of who may sit where:

    Uniform(mode)                      every seat gets ``mode``
    Alternating(mode_a, mode_b)        a, b, a, b, ...
    Repeating(sequence)                sequence[i % len(sequence)]
    Ratio({mode: share, ...})          evenly interleaved shares, remainder Default
    Specific({position: mode}, default)

``generate_modes`` turns a pattern into a per-position mode list and
``rescale_modes`` carries an existing assignment over to a new seat count.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence, Tuple, TypeVar, Union

from .geometry import SIDES, side_count
from .models import GuestRef, RectangleSides, SeatMode

T = TypeVar("T")


@dataclass(frozen=True)
class Uniform:
    mode: SeatMode = SeatMode.DEFAULT


@dataclass(frozen=True)
class Alternating:
    mode_a: SeatMode = SeatMode.HOST_ONLY
    mode_b: SeatMode = SeatMode.EXTERNAL_ONLY


@dataclass(frozen=True)
class Repeating:
    sequence: Tuple[SeatMode, ...] = ()


@dataclass(frozen=True)
class Ratio:
    # Insertion order is the tie break order
    ratios: Dict[SeatMode, float] = field(default_factory=dict)


@dataclass(frozen=True)
class Specific:
    overrides: Dict[int, SeatMode] = field(default_factory=dict)
    default: SeatMode = SeatMode.DEFAULT


ModePattern = Union[Uniform, Alternating, Repeating, Ratio, Specific]


def js_round(value: float) -> int:
    """Round half up, independent of Python's banker's rounding."""
    return int(math.floor(value + 0.5))


# ----------------------------- generation -----------------------------
def generate_modes(pattern: ModePattern, count: int) -> List[SeatMode]:
    if count <= 0:
        return []
    if isinstance(pattern, Uniform):
        return [pattern.mode] * count
    if isinstance(pattern, Alternating):
        return [pattern.mode_a if i % 2 == 0 else pattern.mode_b for i in range(count)]
    if isinstance(pattern, Repeating):
        if not pattern.sequence:
            raise ValueError("Repeating mode pattern needs a non-empty sequence")
        return [pattern.sequence[i % len(pattern.sequence)] for i in range(count)]
    if isinstance(pattern, Ratio):
        return _ratio_modes(pattern.ratios, count)
    if isinstance(pattern, Specific):
        modes = [pattern.default] * count
        for position, mode in pattern.overrides.items():
            if not 0 <= position < count:
                raise ValueError(f"Mode override position {position} outside 0..{count - 1}")
            modes[position] = mode
        return modes
    raise TypeError(f"Unsupported mode pattern: {pattern!r}")


def ratio_targets(ratios: Dict[SeatMode, float], count: int) -> Dict[SeatMode, int]:
    """Seat budget per mode. Restricted modes are rounded, Default takes the rest."""
    order = [m for m in ratios if m is not SeatMode.DEFAULT]
    targets: Dict[SeatMode, int] = {}
    remaining = count
    for mode in order:
        want = min(js_round(ratios[mode] * count), remaining)
        targets[mode] = max(0, want)
        remaining -= targets[mode]
    targets[SeatMode.DEFAULT] = remaining
    # Keep declaration order, with Default appended when it was not declared
    declared = list(ratios)
    if SeatMode.DEFAULT not in declared:
        declared.append(SeatMode.DEFAULT)
    return {m: targets[m] for m in declared}


def _ratio_modes(ratios: Dict[SeatMode, float], count: int) -> List[SeatMode]:
    targets = ratio_targets(ratios, count)
    assigned = {m: 0 for m in targets}
    modes: List[SeatMode] = []
    for i in range(count):
        best = None
        best_gap = None
        for mode, target in targets.items():
            if assigned[mode] >= target:
                continue
            # How far this mode is behind its share so far
            gap = target / count - assigned[mode] / (i + 1)
            if best_gap is None or gap > best_gap:
                best, best_gap = mode, gap
        modes.append(best)
        assigned[best] += 1
    return modes


# ----------------------------- rescaling -----------------------------
def rescale_modes(existing: Sequence[SeatMode], new_count: int) -> List[SeatMode]:
    """Nearest-index resampling of ``existing`` onto ``new_count`` seats."""
    if new_count <= 0:
        return []
    old_count = len(existing)
    if old_count == 0:
        return [SeatMode.DEFAULT] * new_count
    if new_count == 1:
        return [existing[0]]
    out = []
    for i in range(new_count):
        src = js_round(i * (old_count - 1) / (new_count - 1))
        out.append(existing[min(max(src, 0), old_count - 1)])
    return out


def split_by_side(values: Sequence[T], sides: RectangleSides) -> Dict[str, List[T]]:
    out: Dict[str, List[T]] = {}
    offset = 0
    for side in SIDES:
        n = side_count(side, sides)
        out[side] = list(values[offset:offset + n])
        offset += n
    return out


def rescale_rectangle_modes(
    existing: Sequence[SeatMode], old_sides: RectangleSides, new_sides: RectangleSides
) -> List[SeatMode]:
    """Rescale each side on its own so a side's pattern stays on that side."""
    per_side = split_by_side(existing, old_sides)
    out: List[SeatMode] = []
    for side in SIDES:
        out.extend(rescale_modes(per_side[side], side_count(side, new_sides)))
    return out


# ----------------------------- compatibility -----------------------------
def can_guest_sit(from_host: bool, mode: SeatMode) -> bool:
    if mode is SeatMode.DEFAULT:
        return True
    if mode is SeatMode.HOST_ONLY:
        return from_host
    if mode is SeatMode.EXTERNAL_ONLY:
        return not from_host
    raise ValueError(f"Unknown seat mode: {mode!r}")


def compatible_modes(from_host: bool) -> List[SeatMode]:
    if from_host:
        return [SeatMode.DEFAULT, SeatMode.HOST_ONLY]
    return [SeatMode.DEFAULT, SeatMode.EXTERNAL_ONLY]


def incompatibility_reason(guest: GuestRef, mode: SeatMode) -> str | None:
    if can_guest_sit(guest.from_host, mode):
        return None
    guest_type = "Host" if guest.from_host else "External"
    requirement = "host guests only" if mode is SeatMode.HOST_ONLY else "external guests only"
    return f"{guest.name or guest.id} ({guest_type}) cannot be assigned to this seat ({requirement})"


def partition_guests_by_mode(
    guests: Iterable[GuestRef], mode: SeatMode
) -> Tuple[List[GuestRef], List[GuestRef]]:
    """Split guests into (compatible, incompatible) for a seat mode."""
    compatible: List[GuestRef] = []
    incompatible: List[GuestRef] = []
    for g in guests:
        (compatible if can_guest_sit(g.from_host, mode) else incompatible).append(g)
    return compatible, incompatible


# ----------------------------- parsing -----------------------------
def parse_mode_pattern(text: object) -> ModePattern:
    """Parse the compact CSV form, e.g. ``ratio:host-only=0.5|external-only=0.5``.

    Forms: ``uniform:<mode>``, ``alternating:<a>|<b>``, ``repeating:<m>|<m>|...``,
    ``ratio:<mode>=<share>|...``, ``specific:<position>=<mode>|...``.
    A blank value means ``Uniform(Default)``.
    """
    raw = "" if text is None else str(text).strip()
    if not raw or raw.lower() == "nan":
        return Uniform()
    kind, _, body = raw.partition(":")
    kind = kind.strip().lower()
    parts = [p.strip() for p in body.split("|") if p.strip()]
    if kind == "uniform":
        return Uniform(SeatMode.parse(parts[0] if parts else ""))
    if kind == "alternating":
        if len(parts) != 2:
            raise ValueError(f"Alternating mode pattern needs two modes: {raw}")
        return Alternating(SeatMode.parse(parts[0]), SeatMode.parse(parts[1]))
    if kind == "repeating":
        return Repeating(tuple(SeatMode.parse(p) for p in parts))
    if kind == "ratio":
        ratios: Dict[SeatMode, float] = {}
        for p in parts:
            mode, _, share = p.partition("=")
            ratios[SeatMode.parse(mode)] = float(share)
        return Ratio(ratios)
    if kind == "specific":
        overrides: Dict[int, SeatMode] = {}
        for p in parts:
            pos, _, mode = p.partition("=")
            overrides[int(pos)] = SeatMode.parse(mode)
        return Specific(overrides)
    raise ValueError(f"Unknown mode pattern: {raw}")
