import pathlib
import sys

import pytest

# Ensure src package is on path
sys.path.append(str(pathlib.Path(__file__).resolve().parents[1] / "src"))

from seat_layout.models import Direction, OrderingPattern, RectangleSides
from seat_layout.ordering import check_permutation, generate_ordering

AUTOMATIC = [
    OrderingPattern.SEQUENTIAL,
    OrderingPattern.ALTERNATING,
    OrderingPattern.OPPOSITE,
    OrderingPattern.CENTER_OUTWARD,
]


@pytest.mark.parametrize("count", [2, 3, 4, 8, 13])
@pytest.mark.parametrize("pattern", AUTOMATIC)
@pytest.mark.parametrize("direction", list(Direction))
def test_round_ordering_is_a_permutation(count, pattern, direction):
    for start in (0, count - 1):
        numbers = generate_ordering(count, direction, pattern, start)
        assert sorted(numbers) == list(range(1, count + 1))
        assert numbers[start] == 1


@pytest.mark.parametrize("sides", [
    RectangleSides(top=1, right=0, bottom=1, left=0),
    RectangleSides(top=3, right=0, bottom=3, left=0),
    RectangleSides(top=2, right=1, bottom=2, left=1),
    RectangleSides(top=4, right=2, bottom=3, left=1),
    RectangleSides(top=5, right=0, bottom=0, left=0),
    RectangleSides(top=3, right=2, bottom=3, left=2),
])
@pytest.mark.parametrize("pattern", AUTOMATIC)
@pytest.mark.parametrize("direction", list(Direction))
def test_rectangle_ordering_is_a_permutation(sides, pattern, direction):
    count = sides.total
    for start in range(count):
        numbers = generate_ordering(count, direction, pattern, start, sides=sides)
        assert sorted(numbers) == list(range(1, count + 1))


def test_sequential_clockwise_round_of_eight():
    assert generate_ordering(8, Direction.CLOCKWISE, OrderingPattern.SEQUENTIAL, 0) == [1, 2, 3, 4, 5, 6, 7, 8]


def test_sequential_counter_clockwise():
    assert generate_ordering(4, Direction.COUNTER_CLOCKWISE, OrderingPattern.SEQUENTIAL, 0) == [1, 4, 3, 2]
    assert generate_ordering(4, Direction.CLOCKWISE, OrderingPattern.SEQUENTIAL, 2) == [3, 4, 1, 2]


def test_alternating_splits_even_and_odd_numbers():
    # evens walk clockwise from the start, odds counter-clockwise
    assert generate_ordering(5, Direction.CLOCKWISE, OrderingPattern.ALTERNATING, 0) == [1, 2, 4, 5, 3]
    assert generate_ordering(5, Direction.COUNTER_CLOCKWISE, OrderingPattern.ALTERNATING, 0) == [1, 3, 5, 4, 2]


def test_opposite_round_pairs_facing_seats():
    numbers = generate_ordering(8, Direction.CLOCKWISE, OrderingPattern.OPPOSITE, 0)
    assert numbers == [1, 3, 5, 7, 2, 4, 6, 8]


def test_opposite_rectangle_pairs_across_the_table():
    sides = RectangleSides(top=3, right=1, bottom=3, left=1)
    numbers = generate_ordering(8, Direction.CLOCKWISE, OrderingPattern.OPPOSITE, 0, sides=sides)
    assert numbers == [1, 3, 5, 7, 6, 4, 2, 8]


def test_opposite_rectangle_numbers_unpaired_seats_last():
    sides = RectangleSides(top=3, right=1, bottom=2, left=1)
    numbers = generate_ordering(7, Direction.CLOCKWISE, OrderingPattern.OPPOSITE, 0, sides=sides)
    # only right and left face each other; top and bottom are numbered after them
    assert numbers[3] == 2 and numbers[6] == 3
    assert numbers == [1, 4, 5, 2, 6, 7, 3]


def test_center_outward():
    assert generate_ordering(5, Direction.CLOCKWISE, OrderingPattern.CENTER_OUTWARD, 0) == [1, 2, 4, 5, 3]
    assert generate_ordering(5, Direction.COUNTER_CLOCKWISE, OrderingPattern.CENTER_OUTWARD, 0) == [1, 3, 5, 4, 2]


def test_manual_ordering():
    assert generate_ordering(3, pattern=OrderingPattern.MANUAL, manual=[2, 3, 1]) == [2, 3, 1]
    with pytest.raises(ValueError):
        generate_ordering(3, pattern=OrderingPattern.MANUAL, manual=[1, 1, 2])
    with pytest.raises(ValueError):
        generate_ordering(3, pattern=OrderingPattern.MANUAL)


def test_rectangle_sides_must_match_count():
    with pytest.raises(ValueError):
        generate_ordering(5, pattern=OrderingPattern.OPPOSITE, sides=RectangleSides(top=2, bottom=2))


def test_empty_table_has_no_numbers():
    assert generate_ordering(0) == []


def test_check_permutation():
    check_permutation([3, 1, 2], 3)
    with pytest.raises(ValueError):
        check_permutation([1, 2], 3)
    with pytest.raises(ValueError):
        check_permutation([0, 1, 2], 3)
