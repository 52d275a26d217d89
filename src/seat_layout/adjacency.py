"""Seat adjacency for proximity checks.

Round tables: each seat touches its left and right neighbor.

Rectangle tables union three kinds of adjacency:
    side      the seat before/after on the same side, never wrapping past a corner
    opposite  the facing seat, only when the opposite side has the same seat count
    edge      a corner seat and the nearest seat of the perpendicular side
Opposite sides are walked in reverse visual direction, so top[i] faces
bottom[top - 1 - i] and left[i] faces right[left - 1 - i].
"""
from __future__ import annotations

from typing import Dict, List, Optional

import networkx as nx

from .geometry import index_in_side, side_count, side_of, side_start
from .models import AdjacencyKind, RectangleSides, Seat, Table, TableShape


# ----------------------------- round -----------------------------
def round_adjacent_positions(position: int, count: int) -> List[int]:
    if count < 2:
        return []
    return sorted({(position - 1) % count, (position + 1) % count} - {position})


# ----------------------------- rectangle -----------------------------
def same_side_neighbors(position: int, sides: RectangleSides) -> List[int]:
    side = side_of(position, sides)
    if side is None:
        return []
    idx = index_in_side(position, sides)
    start = side_start(side, sides)
    neighbors = []
    if idx > 0:
        neighbors.append(start + idx - 1)
    if idx < side_count(side, sides) - 1:
        neighbors.append(start + idx + 1)
    return neighbors


def opposite_position(position: int, sides: RectangleSides) -> Optional[int]:
    """Facing seat across the table, or None when the two sides differ in count."""
    side = side_of(position, sides)
    if side is None:
        return None
    idx = index_in_side(position, sides)
    top, right, bottom, left = sides.top, sides.right, sides.bottom, sides.left

    if side == "top":
        if top != bottom:
            return None
        return top + right + (top - 1 - idx)
    if side == "bottom":
        if top != bottom:
            return None
        return bottom - 1 - idx
    if side == "left":
        if left != right:
            return None
        return top + (left - 1 - idx)
    # right
    if left != right:
        return None
    return top + right + bottom + (right - 1 - idx)


def edge_positions(position: int, sides: RectangleSides) -> List[int]:
    """Corner neighbors on the perpendicular side."""
    side = side_of(position, sides)
    if side is None:
        return []
    idx = index_in_side(position, sides)
    top, right, bottom, left = sides.top, sides.right, sides.bottom, sides.left
    last_top, first_right = top - 1, top
    last_right, first_bottom = top + right - 1, top + right
    last_bottom, first_left = top + right + bottom - 1, top + right + bottom
    last_left, first_top = top + right + bottom + left - 1, 0

    out: List[int] = []
    if side == "top":
        if idx == 0 and left > 0:
            out.append(last_left)
        if idx == top - 1 and right > 0:
            out.append(first_right)
    elif side == "right":
        if idx == 0 and top > 0:
            out.append(last_top)
        if idx == right - 1 and bottom > 0:
            out.append(first_bottom)
    elif side == "bottom":
        if idx == 0 and right > 0:
            out.append(last_right)
        if idx == bottom - 1 and left > 0:
            out.append(first_left)
    else:
        if idx == 0 and bottom > 0:
            out.append(last_bottom)
        if idx == left - 1 and top > 0:
            out.append(first_top)
    return out


# ----------------------------- table level -----------------------------
def adjacent_positions_by_kind(table: Table, position: int) -> Dict[AdjacencyKind, List[int]]:
    """Adjacent positions of one seat, grouped by adjacency kind."""
    if table.shape is TableShape.ROUND:
        return {
            AdjacencyKind.SIDE: round_adjacent_positions(position, len(table.seats)),
            AdjacencyKind.OPPOSITE: [],
            AdjacencyKind.EDGE: [],
        }
    sides = table.sides or RectangleSides()
    opposite = opposite_position(position, sides)
    return {
        AdjacencyKind.SIDE: same_side_neighbors(position, sides),
        AdjacencyKind.OPPOSITE: [opposite] if opposite is not None and opposite != position else [],
        AdjacencyKind.EDGE: [p for p in edge_positions(position, sides) if p != position],
    }


def compute_adjacent_positions(table: Table, position: int) -> List[int]:
    merged = set()
    for positions in adjacent_positions_by_kind(table, position).values():
        merged.update(positions)
    return sorted(merged)


def apply_adjacency(table: Table) -> Table:
    """Cache adjacency on every seat. Call again after any structural change."""
    for seat in table.seats:
        seat.adjacent_positions = compute_adjacent_positions(table, seat.position)
    return table


def adjacency_graph(table: Table) -> nx.Graph:
    """Undirected graph of seat ids; each edge carries its adjacency ``kind``."""
    graph = nx.Graph()
    for seat in table.seats:
        graph.add_node(seat.id, position=seat.position, seat_number=seat.seat_number)
    for seat in table.seats:
        for kind, positions in adjacent_positions_by_kind(table, seat.position).items():
            for pos in positions:
                other = table.seat_at(pos)
                if other is not None and not graph.has_edge(seat.id, other.id):
                    graph.add_edge(seat.id, other.id, kind=kind.value)
    return graph


def adjacent_seats(table: Table, seat: Seat) -> List[Seat]:
    out = []
    for pos in seat.adjacent_positions:
        other = table.seat_at(pos)
        if other is not None:
            out.append(other)
    return out


def adjacent_seat_ids(table: Table, seat_id: str) -> List[str]:
    seat = table.seat_by_id(seat_id)
    if seat is None:
        return []
    return [s.id for s in adjacent_seats(table, seat)]


def are_adjacent(table: Table, seat_a: str, seat_b: str) -> bool:
    return seat_b in adjacent_seat_ids(table, seat_a)
