"""Seat numbering.

``generate_ordering`` returns ``numbers`` where ``numbers[position]`` is the
human facing seat number of that position. For every pattern and direction the
result is a permutation of ``1..count``.
"""
from __future__ import annotations

from typing import List, Optional, Sequence

from .adjacency import opposite_position
from .models import Direction, OrderingPattern, RectangleSides


def generate_ordering(
    count: int,
    direction: Direction = Direction.CLOCKWISE,
    pattern: OrderingPattern = OrderingPattern.SEQUENTIAL,
    start_position: int = 0,
    sides: Optional[RectangleSides] = None,
    manual: Optional[Sequence[int]] = None,
) -> List[int]:
    if count <= 0:
        return []
    direction = Direction(direction)
    pattern = OrderingPattern(pattern)
    start = start_position % count

    if pattern is OrderingPattern.SEQUENTIAL:
        return _sequential(count, direction, start)
    if pattern is OrderingPattern.ALTERNATING:
        return _alternating(count, direction, start)
    if pattern is OrderingPattern.OPPOSITE:
        if sides is not None:
            if sides.total != count:
                raise ValueError(f"Rectangle sides hold {sides.total} seats, expected {count}")
            return _opposite_rectangle(count, direction, start, sides)
        return _opposite_round(count, direction, start)
    if pattern is OrderingPattern.CENTER_OUTWARD:
        return _center_outward(count, direction, start)
    if manual is None:
        raise ValueError("Manual ordering needs an explicit seat number list")
    check_permutation(manual, count)
    return list(manual)


def check_permutation(numbers: Sequence[int], count: int) -> None:
    """Raise ValueError unless ``numbers`` is a permutation of 1..count."""
    if len(numbers) != count or sorted(int(n) for n in numbers) != list(range(1, count + 1)):
        raise ValueError(f"Seat numbers must be a permutation of 1..{count}")


def _sequential(count: int, direction: Direction, start: int) -> List[int]:
    result = [0] * count
    for i in range(count):
        result[(start + direction.step * i) % count] = i + 1
    return result


def _alternating(count: int, direction: Direction, start: int) -> List[int]:
    """Seat 1 at start; even numbers walk ``direction``, odd numbers walk the other way."""
    result = [0] * count
    result[start] = 1
    evens = [n for n in range(2, count + 1) if n % 2 == 0]
    odds = [n for n in range(3, count + 1) if n % 2 == 1]
    step = direction.step
    for i, number in enumerate(evens):
        result[(start + step * (1 + i)) % count] = number
    for i, number in enumerate(odds):
        result[(start - step * (1 + i)) % count] = number
    return result


def _opposite_round(count: int, direction: Direction, start: int) -> List[int]:
    result = [0] * count
    half = count // 2
    number = 1
    for i in range(count):
        pos = (start + direction.step * i) % count
        if result[pos]:
            continue
        result[pos] = number
        number += 1
        facing = (pos + half) % count
        if number <= count and not result[facing]:
            result[facing] = number
            number += 1
    return result


def _opposite_rectangle(count: int, direction: Direction, start: int, sides: RectangleSides) -> List[int]:
    """Pair each seat with the seat facing it; unpaired seats are numbered last."""
    result = [0] * count
    result[start] = 1
    number = 2
    facing = opposite_position(start, sides)
    if facing is not None and not result[facing]:
        result[facing] = number
        number += 1

    deferred: List[int] = []
    for i in range(1, count):
        pos = (start + direction.step * i) % count
        if result[pos]:
            continue
        facing = opposite_position(pos, sides)
        if facing is None or facing == pos:
            deferred.append(pos)
            continue
        result[pos] = number
        number += 1
        if not result[facing]:
            result[facing] = number
            number += 1

    for pos in deferred:
        if not result[pos]:
            result[pos] = number
            number += 1
    return result


def _center_outward(count: int, direction: Direction, start: int) -> List[int]:
    result = [0] * count
    result[start] = 1
    number = 2
    offset = 1
    while number <= count:
        forward = (start + direction.step * offset) % count
        backward = (start - direction.step * offset) % count
        for pos in (forward, backward):
            if not result[pos] and number <= count:
                result[pos] = number
                number += 1
        offset += 1
    return result
