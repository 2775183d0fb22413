"""Immutable world snapshot and its Battlesnake JSON codec."""

from __future__ import annotations

from typing import Any, Dict, FrozenSet, Iterable, List, NamedTuple, Optional, Tuple

from .geometry import Point


class SnapshotError(ValueError):
    """Raised when a snapshot payload cannot be decoded."""


def _point(raw: Any, field: str) -> Point:
    try:
        return Point(int(raw["x"]), int(raw["y"]))
    except (KeyError, TypeError, ValueError) as exc:
        raise SnapshotError(f"{field}: expected an object with integer x/y, got {raw!r}") from exc


def _points(raw: Any, field: str) -> List[Point]:
    if raw is None:
        return []
    if not isinstance(raw, (list, tuple)):
        raise SnapshotError(f"{field}: expected a list, got {type(raw).__name__}")
    return [_point(item, f"{field}[{idx}]") for idx, item in enumerate(raw)]


def _point_dict(point: Point) -> Dict[str, int]:
    return {"x": point.x, "y": point.y}


class Snake(NamedTuple):
    id: str
    body: Tuple[Point, ...]
    health: int = 100

    @property
    def head(self) -> Point:
        return self.body[0]

    @property
    def neck(self) -> Optional[Point]:
        return self.body[1] if len(self.body) > 1 else None

    @property
    def tail(self) -> Point:
        return self.body[-1]

    @property
    def length(self) -> int:
        return len(self.body)

    def tail_vacates(self) -> bool:
        """True when the tail cell frees up on the next move (the tail is not stacked)."""
        return len(self.body) > 1 and self.body[-1] != self.body[-2]

    @classmethod
    def from_dict(cls, raw: Any, field: str = "snake") -> "Snake":
        if not isinstance(raw, dict):
            raise SnapshotError(f"{field}: expected an object")
        if "id" not in raw:
            raise SnapshotError(f"{field}.id: missing")
        body = _points(raw.get("body"), f"{field}.body")
        if not body:
            raise SnapshotError(f"{field}.body: must contain at least one segment")
        try:
            health = int(raw.get("health", 100))
        except (TypeError, ValueError) as exc:
            raise SnapshotError(f"{field}.health: expected an integer") from exc
        return cls(id=str(raw["id"]), body=tuple(body), health=health)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "health": self.health,
            "length": self.length,
            "head": _point_dict(self.head),
            "body": [_point_dict(p) for p in self.body],
        }


class Board(NamedTuple):
    width: int
    height: int
    food: FrozenSet[Point] = frozenset()
    hazards: FrozenSet[Point] = frozenset()
    snakes: Tuple[Snake, ...] = ()

    @classmethod
    def from_dict(cls, raw: Any) -> "Board":
        if not isinstance(raw, dict):
            raise SnapshotError("board: expected an object")
        try:
            width = int(raw["width"])
            height = int(raw["height"])
        except (KeyError, TypeError, ValueError) as exc:
            raise SnapshotError("board: width and height must be integers") from exc
        if width <= 0 or height <= 0:
            raise SnapshotError(f"board: dimensions must be positive, got {width}x{height}")
        snakes_raw = raw.get("snakes") or []
        if not isinstance(snakes_raw, (list, tuple)):
            raise SnapshotError("board.snakes: expected a list")
        return cls(
            width=width,
            height=height,
            food=frozenset(_points(raw.get("food"), "board.food")),
            hazards=frozenset(_points(raw.get("hazards"), "board.hazards")),
            snakes=tuple(
                Snake.from_dict(s, f"board.snakes[{idx}]") for idx, s in enumerate(snakes_raw)
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "food": [_point_dict(p) for p in sorted(self.food)],
            "hazards": [_point_dict(p) for p in sorted(self.hazards)],
            "snakes": [s.to_dict() for s in self.snakes],
        }


class GameState(NamedTuple):
    turn: int
    board: Board
    you: Snake

    def rivals(self) -> Tuple[Snake, ...]:
        """Every snake on the board except ``you`` (matched by id)."""
        return tuple(s for s in self.board.snakes if s.id != self.you.id)

    @classmethod
    def from_dict(cls, raw: Any) -> "GameState":
        """Decode a Battlesnake move payload (``turn``, ``board``, ``you``)."""
        if not isinstance(raw, dict):
            raise SnapshotError("snapshot: expected an object")
        if "board" not in raw:
            raise SnapshotError("board: missing")
        if "you" not in raw:
            raise SnapshotError("you: missing")
        try:
            turn = int(raw.get("turn", 0))
        except (TypeError, ValueError) as exc:
            raise SnapshotError("turn: expected an integer") from exc
        return cls(turn=turn, board=Board.from_dict(raw["board"]), you=Snake.from_dict(raw["you"], "you"))

    def to_dict(self) -> Dict[str, Any]:
        return {"turn": self.turn, "board": self.board.to_dict(), "you": self.you.to_dict()}


def build_state(
    you: Iterable[Tuple[int, int]],
    *,
    width: int = 11,
    height: int = 11,
    rivals: Iterable[Iterable[Tuple[int, int]]] = (),
    food: Iterable[Tuple[int, int]] = (),
    hazards: Iterable[Tuple[int, int]] = (),
    health: int = 100,
    turn: int = 0,
) -> GameState:
    """Convenience constructor from plain (x, y) tuples; rivals get ids ``rival-<n>``."""
    me = Snake(id="you", body=tuple(Point(*p) for p in you), health=health)
    others = tuple(
        Snake(id=f"rival-{idx}", body=tuple(Point(*p) for p in body))
        for idx, body in enumerate(rivals)
    )
    board = Board(
        width=width,
        height=height,
        food=frozenset(Point(*p) for p in food),
        hazards=frozenset(Point(*p) for p in hazards),
        snakes=(me,) + others,
    )
    return GameState(turn=turn, board=board, you=me)
