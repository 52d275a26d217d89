"""
Tests for seat adjacency.

Rectangle fixtures use sides (top=2, right=1, bottom=2, left=1), laid out as
positions top 0,1 / right 2 / bottom 3,4 / left 5.
"""
import pathlib
import sys

import pytest

# Ensure src package is on path
sys.path.append(str(pathlib.Path(__file__).resolve().parents[1] / "src"))

from seat_layout.adjacency import (
    adjacency_graph,
    adjacent_positions_by_kind,
    are_adjacent,
    edge_positions,
    opposite_position,
    round_adjacent_positions,
    same_side_neighbors,
)
from seat_layout.layout import TableConfig, build_table
from seat_layout.models import AdjacencyKind, RectangleSides, TableShape

SIDE_CONFIGS = [
    RectangleSides(top=3, right=0, bottom=3, left=0),
    RectangleSides(top=2, right=1, bottom=2, left=1),
    RectangleSides(top=4, right=2, bottom=3, left=2),
    RectangleSides(top=1, right=1, bottom=1, left=1),
    RectangleSides(top=5, right=3, bottom=0, left=1),
]


def rectangle(sides, table_id="R"):
    return build_table(TableConfig(id=table_id, shape=TableShape.RECTANGLE, sides=sides))


def test_round_neighbors_wrap():
    assert round_adjacent_positions(0, 8) == [1, 7]
    assert round_adjacent_positions(7, 8) == [0, 6]
    assert round_adjacent_positions(0, 2) == [1]
    assert round_adjacent_positions(0, 1) == []


class TestOpposite:
    def test_top_faces_reversed_bottom(self):
        sides = RectangleSides(top=3, right=0, bottom=3, left=0)
        # bottom starts at position 3 and runs right to left
        assert opposite_position(0, sides) == 5
        assert opposite_position(1, sides) == 4
        assert opposite_position(2, sides) == 3

    @pytest.mark.parametrize("sides", SIDE_CONFIGS)
    def test_opposite_is_an_involution(self, sides):
        for p in range(sides.total):
            q = opposite_position(p, sides)
            if q is not None:
                assert opposite_position(q, sides) == p

    def test_unequal_sides_have_no_opposite(self):
        sides = RectangleSides(top=3, right=1, bottom=2, left=1)
        for p in list(range(0, 3)) + [4, 5]:
            assert opposite_position(p, sides) is None
        assert opposite_position(3, sides) == 6


class TestRectangleKinds:
    sides = RectangleSides(top=2, right=1, bottom=2, left=1)

    def test_side_neighbors_stop_at_corners(self):
        assert same_side_neighbors(0, self.sides) == [1]
        assert same_side_neighbors(1, self.sides) == [0]
        assert same_side_neighbors(2, self.sides) == []

    def test_corner_edges(self):
        assert edge_positions(0, self.sides) == [5]
        assert edge_positions(1, self.sides) == [2]
        assert edge_positions(2, self.sides) == [1, 3]
        assert edge_positions(5, self.sides) == [4, 0]

    def test_no_edge_to_an_empty_side(self):
        sides = RectangleSides(top=2, right=0, bottom=2, left=0)
        assert edge_positions(1, sides) == []

    def test_by_kind(self):
        table = rectangle(self.sides)
        kinds = adjacent_positions_by_kind(table, 0)
        assert kinds == {
            AdjacencyKind.SIDE: [1],
            AdjacencyKind.OPPOSITE: [4],
            AdjacencyKind.EDGE: [5],
        }

    def test_cached_on_seats(self):
        table = rectangle(self.sides)
        assert [s.adjacent_positions for s in table.seats] == [
            [1, 4, 5], [0, 2, 3], [1, 3, 5], [1, 2, 4], [0, 3, 5], [0, 2, 4]]


@pytest.mark.parametrize("sides", SIDE_CONFIGS)
def test_rectangle_adjacency_is_symmetric(sides):
    table = rectangle(sides)
    for seat in table.seats:
        assert seat.position not in seat.adjacent_positions
        for pos in seat.adjacent_positions:
            assert seat.position in table.seat_at(pos).adjacent_positions


@pytest.mark.parametrize("count", [1, 2, 3, 8])
def test_round_adjacency_is_symmetric(count):
    table = build_table(TableConfig(id="T", count=count))
    for seat in table.seats:
        for pos in seat.adjacent_positions:
            assert seat.position in table.seat_at(pos).adjacent_positions


def test_graph_matches_cached_adjacency():
    table = rectangle(RectangleSides(top=2, right=1, bottom=2, left=1))
    graph = adjacency_graph(table)
    assert graph.number_of_nodes() == 6
    for seat in table.seats:
        expected = {table.seat_at(p).id for p in seat.adjacent_positions}
        assert set(graph.neighbors(seat.id)) == expected
    assert graph.edges["R-seat-1", "R-seat-5"]["kind"] == "opposite"
    assert graph.edges["R-seat-1", "R-seat-2"]["kind"] == "side"
    assert graph.edges["R-seat-2", "R-seat-3"]["kind"] == "edge"


def test_are_adjacent():
    table = build_table(TableConfig(id="T", count=8))
    assert are_adjacent(table, "T-seat-1", "T-seat-8")
    assert not are_adjacent(table, "T-seat-1", "T-seat-5")
    assert not are_adjacent(table, "T-seat-1", "missing")
