"""Grid primitives: cells, the four moves, bounds and distances."""

from __future__ import annotations

from enum import Enum
from typing import List, NamedTuple, Optional, Tuple


class Point(NamedTuple):
    x: int
    y: int


class Direction(Enum):
    """The four orthogonal moves. Declaration order is the default tie-break priority."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @property
    def offset(self) -> Point:
        return _OFFSETS[self]

    @property
    def opposite(self) -> "Direction":
        return _OPPOSITES[self]

    def step(self, point: Point) -> Point:
        dx, dy = _OFFSETS[self]
        return Point(point.x + dx, point.y + dy)

    @classmethod
    def from_offset(cls, dx: int, dy: int) -> Optional["Direction"]:
        return _BY_OFFSET.get((dx, dy))

    @classmethod
    def parse(cls, name: str) -> "Direction":
        """Parse a move name such as ``"up"`` (case-insensitive)."""
        return cls(str(name).strip().lower())


_OFFSETS = {
    Direction.UP: Point(0, 1),
    Direction.DOWN: Point(0, -1),
    Direction.LEFT: Point(-1, 0),
    Direction.RIGHT: Point(1, 0),
}

_OPPOSITES = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}

_BY_OFFSET = {(off.x, off.y): d for d, off in _OFFSETS.items()}


def in_bounds(point: Point, width: int, height: int) -> bool:
    return 0 <= point.x < width and 0 <= point.y < height


def manhattan(a: Point, b: Point) -> int:
    return abs(a.x - b.x) + abs(a.y - b.y)


def neighbors(point: Point) -> List[Tuple[Direction, Point]]:
    """Return (direction, cell) pairs for the four orthogonal neighbours, in Direction order."""
    return [(d, d.step(point)) for d in Direction]


def corners(width: int, height: int) -> Tuple[Point, ...]:
    """Return the distinct corner cells of a width x height board."""
    seen: List[Point] = []
    for cell in (
        Point(0, 0),
        Point(width - 1, 0),
        Point(0, height - 1),
        Point(width - 1, height - 1),
    ):
        if cell not in seen:
            seen.append(cell)
    return tuple(seen)


def is_corner(point: Point, width: int, height: int) -> bool:
    return point.x in (0, width - 1) and point.y in (0, height - 1)


def pack(point: Point, width: int) -> int:
    """Packed integer key for an in-bounds cell (row-major, y * width + x)."""
    return point.y * width + point.x
