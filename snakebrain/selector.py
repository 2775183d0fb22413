"""Final move choice from safety, space scores and the food proposal."""

from __future__ import annotations

import random
from typing import Dict, List, Optional, Sequence

from . import config
from .geometry import Direction
from .rules import SafetyMap


class MoveSelector:
    """Pick the final move from the safety map, the space scores and the food proposal."""

    def __init__(
        self,
        *,
        tie_break: Optional[str] = None,
        priority: Optional[Sequence[str]] = None,
        default: Optional[str] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.tie_break = config.TIE_BREAK if tie_break is None else tie_break
        if self.tie_break not in config.TIE_BREAKS:
            raise ValueError(f"unknown tie-break policy: {self.tie_break!r}")
        names = config.DIRECTION_PRIORITY if priority is None else priority
        self.priority: List[Direction] = [Direction.parse(n) for n in names]
        if set(self.priority) != set(Direction):
            raise ValueError("priority must name every direction exactly once")
        self._rank = {d: idx for idx, d in enumerate(self.priority)}
        self.default = Direction.parse(config.DEFAULT_MOVE if default is None else default)
        self.rng = rng if rng is not None else random.Random()

    def _break_tie(self, tied: List[Direction]) -> Direction:
        ordered = sorted(tied, key=self._rank.__getitem__)
        if self.tie_break == "random" and len(ordered) > 1:
            return self.rng.choice(ordered)
        return ordered[0]

    def _most_space(self, directions: List[Direction], space: Dict[Direction, int]) -> Direction:
        best = max(space.get(d, 0) for d in directions)
        return self._break_tie([d for d in directions if space.get(d, 0) == best])

    def select(
        self,
        safety: SafetyMap,
        space: Dict[Direction, int],
        food: Optional[Direction] = None,
    ) -> Direction:
        if food is not None and safety[food]:
            return food

        safe = safety.safe_directions()
        if safe:
            return self._most_space(safe, space)

        # Nothing safe: moves that only failed the space check still beat a wall.
        scored = [d for d in Direction if space.get(d, 0) > 0]
        if scored:
            return self._most_space(scored, space)
        return self.default

    def rationale(
        self,
        choice: Direction,
        safety: SafetyMap,
        space: Dict[Direction, int],
        food: Optional[Direction] = None,
    ) -> str:
        """Short label for why ``choice`` won; used by diagnostics only."""
        if food is not None and choice == food:
            return "food"
        if safety[choice]:
            return "space"
        if space.get(choice, 0) > 0:
            return "least_trapped"
        return "default"
