"""Reachable-space estimation used to reject self-traps and rank fallback moves."""

from __future__ import annotations

from typing import Dict, Iterable, Optional, Set

from . import config
from .geometry import Direction, Point, in_bounds, pack
from .rules import SafetyMap
from .state import Board, GameState


def reachable_area(origin: Point, blocked: Iterable[Point], board: Board) -> int:
    """Count cells reachable from ``origin`` by orthogonal steps without crossing ``blocked``.

    The origin itself counts. An out-of-bounds or blocked origin reaches nothing.
    Work and memory are bounded by the board area.
    """
    width, height = board.width, board.height
    if not in_bounds(origin, width, height):
        return 0

    area = width * height
    # 1 = blocked or already visited.
    grid = bytearray(area)
    for cell in blocked:
        if in_bounds(cell, width, height):
            grid[pack(cell, width)] = 1

    start = pack(origin, width)
    if grid[start]:
        return 0

    queue = [0] * area
    queue[0] = start
    grid[start] = 1
    head, tail = 0, 1
    while head < tail:
        idx = queue[head]
        head += 1
        x = idx % width
        if x > 0 and not grid[idx - 1]:
            grid[idx - 1] = 1
            queue[tail] = idx - 1
            tail += 1
        if x < width - 1 and not grid[idx + 1]:
            grid[idx + 1] = 1
            queue[tail] = idx + 1
            tail += 1
        if idx >= width and not grid[idx - width]:
            grid[idx - width] = 1
            queue[tail] = idx - width
            tail += 1
        if idx + width < area and not grid[idx + width]:
            grid[idx + width] = 1
            queue[tail] = idx + width
            tail += 1
    return tail


class SpaceEvaluator:
    """Flood-fill every still-safe move and reject the ones that lead into a pocket."""

    def __init__(
        self,
        *,
        multiplier: Optional[int] = None,
        hazards_block: Optional[bool] = None,
    ) -> None:
        self.multiplier = int(config.SPACE_MULTIPLIER) if multiplier is None else int(multiplier)
        self.hazards_block = config.HAZARDS_BLOCK_SPACE if hazards_block is None else bool(hazards_block)

    def threshold(self, state: GameState) -> int:
        return state.you.length * self.multiplier

    def blocked_after_move(self, state: GameState) -> Set[Point]:
        """Cells occupied once our head has advanced and our tail has dropped off.

        A stacked tail stays put, which ``body[:-1]`` already accounts for.
        Rival bodies are kept whole.
        """
        blocked: Set[Point] = set(state.you.body[:-1])
        for rival in state.rivals():
            blocked.update(rival.body)
        if self.hazards_block:
            blocked.update(state.board.hazards)
        return blocked

    def evaluate(self, state: GameState, safety: SafetyMap) -> Dict[Direction, int]:
        """Return the reachable area per still-safe direction, narrowing ``safety`` on traps."""
        scores: Dict[Direction, int] = {}
        safe = safety.safe_directions()
        if not safe:
            return scores

        head = state.you.head
        blocked = self.blocked_after_move(state)
        threshold = self.threshold(state)
        for d in safe:
            cell = d.step(head)
            area = reachable_area(cell, blocked, state.board)
            scores[d] = area
            if area < threshold:
                safety.mark_unsafe(d, "trap")
        return scores
