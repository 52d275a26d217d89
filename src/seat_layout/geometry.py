"""Seat geometry for round and rectangle tables.

Rectangle seat positions are laid out in a fixed side order:
    top (left to right), right (top to bottom), bottom (right to left), left (bottom to top)
Every side is contiguous in the position array. Ordering, mode rescaling and
adjacency all index into this layout, so it must not change.
"""
from __future__ import annotations

import math
from typing import List, Optional, Tuple

from .models import RectangleSides, Seat

SIDES = ("top", "right", "bottom", "left")

_OPPOSITE_SIDE = {"top": "bottom", "bottom": "top", "left": "right", "right": "left"}

# Drawing constants, in canvas units
SEAT_RADIUS = 12.0
BASE_TABLE_RADIUS = 60.0
MIN_SEAT_SPACING = 40.0
RECT_PADDING = 30.0
RECT_MIN_WIDTH = 160.0
RECT_MIN_HEIGHT = 100.0


def seat_id(table_id: str, position: int) -> str:
    return f"{table_id}-seat-{position + 1}"


# ----------------------------- rectangle side helpers -----------------------------
def side_count(side: str, sides: RectangleSides) -> int:
    return getattr(sides, side)


def side_start(side: str, sides: RectangleSides) -> int:
    """First position index of ``side``."""
    start = 0
    for name in SIDES:
        if name == side:
            return start
        start += side_count(name, sides)
    raise ValueError(f"Unknown side: {side}")


def side_of(position: int, sides: RectangleSides) -> Optional[str]:
    """Side a position lies on, or None when out of range."""
    if position < 0:
        return None
    start = 0
    for name in SIDES:
        count = side_count(name, sides)
        if position < start + count:
            return name
        start += count
    return None


def index_in_side(position: int, sides: RectangleSides) -> int:
    side = side_of(position, sides)
    if side is None:
        return -1
    return position - side_start(side, sides)


def opposite_side(side: str) -> str:
    return _OPPOSITE_SIDE[side]


# ----------------------------- builders -----------------------------
def round_dimensions(count: int) -> Tuple[float, float]:
    """Return (table radius, seat distance from center)."""
    scaled = max(BASE_TABLE_RADIUS, BASE_TABLE_RADIUS * math.sqrt(count / 8.0))
    distance = scaled + max(30.0, 20.0 + count / 2.0)
    return scaled, distance


def build_round_seats(table_id: str, count: int, center: Tuple[float, float] = (0.0, 0.0)) -> List[Seat]:
    """Seats at equal angular spacing, position 0 at the top, clockwise."""
    cx, cy = center
    _, distance = round_dimensions(count)
    seats: List[Seat] = []
    for i in range(count):
        angle = (i / count) * 2 * math.pi - math.pi / 2
        seats.append(
            Seat(
                id=seat_id(table_id, i),
                table_id=table_id,
                position=i,
                seat_number=i + 1,
                x=cx + math.cos(angle) * distance,
                y=cy + math.sin(angle) * distance,
            )
        )
    return seats


def rectangle_dimensions(sides: RectangleSides) -> Tuple[float, float]:
    """Return (width, height) sized to fit the busiest opposite pair of sides."""
    horizontal = max(sides.top, sides.bottom)
    vertical = max(sides.left, sides.right)
    width = max(RECT_MIN_WIDTH, horizontal * MIN_SEAT_SPACING + 2 * RECT_PADDING) if horizontal else RECT_MIN_WIDTH
    height = max(RECT_MIN_HEIGHT, vertical * MIN_SEAT_SPACING + 2 * RECT_PADDING) if vertical else RECT_MIN_HEIGHT
    return width, height


def build_rectangle_seats(
    table_id: str, sides: RectangleSides, center: Tuple[float, float] = (0.0, 0.0)
) -> List[Seat]:
    cx, cy = center
    width, height = rectangle_dimensions(sides)
    offset = SEAT_RADIUS * 2.5
    left_x, right_x = cx - width / 2, cx + width / 2
    top_y, bottom_y = cy - height / 2, cy + height / 2

    points: List[Tuple[float, float]] = []
    for i in range(sides.top):
        spacing = width / (sides.top + 1)
        points.append((left_x + spacing * (i + 1), top_y - offset))
    for i in range(sides.right):
        spacing = height / (sides.right + 1)
        points.append((right_x + offset, top_y + spacing * (i + 1)))
    for i in range(sides.bottom):
        spacing = width / (sides.bottom + 1)
        points.append((right_x - spacing * (i + 1), bottom_y + offset))
    for i in range(sides.left):
        spacing = height / (sides.left + 1)
        points.append((left_x - offset, bottom_y - spacing * (i + 1)))

    return [
        Seat(id=seat_id(table_id, i), table_id=table_id, position=i, seat_number=i + 1, x=x, y=y)
        for i, (x, y) in enumerate(points)
    ]
