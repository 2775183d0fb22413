"""Per-turn safety map and the filter that rules out fatal moves."""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Set

from . import config
from .geometry import Direction, Point, corners, in_bounds
from .state import GameState


class SafetyMap:
    """Per-turn record of which moves are still judged non-fatal.

    All four directions are always present. Entries start safe and can only be narrowed;
    the first reason a direction was rejected is kept for diagnostics.
    """

    __slots__ = ("_safe", "reasons")

    def __init__(self) -> None:
        self._safe: Dict[Direction, bool] = {d: True for d in Direction}
        self.reasons: Dict[Direction, str] = {}

    def __getitem__(self, direction: Direction) -> bool:
        return self._safe[direction]

    def __iter__(self) -> Iterator[Direction]:
        return iter(Direction)

    def __len__(self) -> int:
        return len(self._safe)

    def mark_unsafe(self, direction: Direction, reason: str) -> None:
        if self._safe[direction]:
            self._safe[direction] = False
            self.reasons[direction] = reason

    def safe_directions(self) -> List[Direction]:
        return [d for d in Direction if self._safe[d]]

    def any_safe(self) -> bool:
        return any(self._safe.values())

    def as_dict(self) -> Dict[str, bool]:
        return {d.value: self._safe[d] for d in Direction}

    def __repr__(self) -> str:
        return f"SafetyMap({self.as_dict()!r})"


class SafetyFilter:
    """Eliminate moves that are immediately or predictably fatal."""

    def __init__(
        self,
        *,
        exclude_tail: Optional[bool] = None,
        corner_avoidance: Optional[bool] = None,
        corner_min_board: Optional[int] = None,
    ) -> None:
        self.exclude_tail = config.SELF_TAIL_EXCLUSION if exclude_tail is None else bool(exclude_tail)
        self.corner_avoidance = (
            config.CORNER_AVOIDANCE if corner_avoidance is None else bool(corner_avoidance)
        )
        self.corner_min_board = (
            int(config.CORNER_MIN_BOARD) if corner_min_board is None else int(corner_min_board)
        )

    def evaluate(self, state: GameState) -> SafetyMap:
        safety = SafetyMap()
        me = state.you
        head = me.head
        candidates = {d: d.step(head) for d in Direction}

        self._forbid_reverse(state, safety)
        self._forbid_out_of_bounds(state, candidates, safety)
        self._forbid_self(state, candidates, safety)
        self._forbid_rival_bodies(state, candidates, safety)
        self._forbid_hazards(state, candidates, safety)
        self._forbid_head_to_head(state, candidates, safety)
        self._forbid_corner_pockets(state, safety)
        return safety

    def _forbid_reverse(self, state: GameState, safety: SafetyMap) -> None:
        # A single segment or a neck stacked on the head carries no heading.
        neck = state.you.neck
        if neck is None:
            return
        head = state.you.head
        back = Direction.from_offset(neck.x - head.x, neck.y - head.y)
        if back is not None:
            safety.mark_unsafe(back, "reverse")

    def _forbid_out_of_bounds(
        self, state: GameState, candidates: Dict[Direction, Point], safety: SafetyMap
    ) -> None:
        board = state.board
        for d, cell in candidates.items():
            if not in_bounds(cell, board.width, board.height):
                safety.mark_unsafe(d, "wall")

    def _own_obstacles(self, state: GameState) -> Set[Point]:
        me = state.you
        occupied = set(me.body)
        if self.exclude_tail and me.tail_vacates():
            occupied.discard(me.tail)
        return occupied

    def _forbid_self(
        self, state: GameState, candidates: Dict[Direction, Point], safety: SafetyMap
    ) -> None:
        occupied = self._own_obstacles(state)
        for d, cell in candidates.items():
            if cell in occupied:
                safety.mark_unsafe(d, "self")

    def _forbid_rival_bodies(
        self, state: GameState, candidates: Dict[Direction, Point], safety: SafetyMap
    ) -> None:
        occupied: Set[Point] = set()
        for rival in state.rivals():
            occupied.update(rival.body)
        for d, cell in candidates.items():
            if cell in occupied:
                safety.mark_unsafe(d, "rival_body")

    def _forbid_hazards(
        self, state: GameState, candidates: Dict[Direction, Point], safety: SafetyMap
    ) -> None:
        hazards = state.board.hazards
        for d, cell in candidates.items():
            if cell in hazards:
                safety.mark_unsafe(d, "hazard")

    def _forbid_head_to_head(
        self, state: GameState, candidates: Dict[Direction, Point], safety: SafetyMap
    ) -> None:
        my_length = state.you.length
        contested: Set[Point] = set()
        for rival in state.rivals():
            # Losing or tied collisions only; shorter rivals are prey.
            if rival.length < my_length:
                continue
            contested.update(d.step(rival.head) for d in Direction)
        for d, cell in candidates.items():
            if cell in contested:
                safety.mark_unsafe(d, "head_to_head")

    def _forbid_corner_pockets(self, state: GameState, safety: SafetyMap) -> None:
        board = state.board
        if not self.corner_avoidance:
            return
        if board.width < self.corner_min_board or board.height < self.corner_min_board:
            return
        head = state.you.head
        for corner in corners(board.width, board.height):
            # Diagonal neighbour of the corner only; edge cells next to it are left alone.
            dx, dy = corner.x - head.x, corner.y - head.y
            if abs(dx) != 1 or abs(dy) != 1:
                continue
            safety.mark_unsafe(Direction.from_offset(dx, 0), "corner")
            safety.mark_unsafe(Direction.from_offset(0, dy), "corner")
