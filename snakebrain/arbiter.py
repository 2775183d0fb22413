"""Food targeting that refuses races a stronger rival would win."""

from __future__ import annotations

from typing import List, Optional

from . import config
from .geometry import Direction, Point, is_corner, manhattan
from .rules import SafetyMap
from .state import GameState


class ContestedResourceArbiter:
    """Propose a safe step toward the nearest food no stronger rival can reach first.

    Contest rules (``rule``):

    - ``closer_or_equal``: a rival at the same or a shorter distance contests the food.
    - ``strictly_closer``: only a strictly nearer rival contests it.
    - ``within_margin``: a rival no more than ``margin`` steps further away contests it.

    In every rule the rival must also be at least as long as us.
    """

    def __init__(
        self,
        *,
        rule: Optional[str] = None,
        margin: Optional[int] = None,
        skip_corners: Optional[bool] = None,
        axis_fallback: Optional[bool] = None,
        seek_health: Optional[int] = None,
    ) -> None:
        self.rule = config.FOOD_CONTEST_RULE if rule is None else rule
        if self.rule not in config.FOOD_CONTEST_RULES:
            raise ValueError(f"unknown food contest rule: {self.rule!r}")
        self.margin = int(config.FOOD_CONTEST_MARGIN) if margin is None else int(margin)
        self.skip_corners = config.FOOD_SKIP_CORNERS if skip_corners is None else bool(skip_corners)
        self.axis_fallback = config.FOOD_AXIS_FALLBACK if axis_fallback is None else bool(axis_fallback)
        self.seek_health = config.FOOD_SEEK_HEALTH if seek_health is None else seek_health

    def _rival_wins_race(self, rival_dist: int, my_dist: int) -> bool:
        if self.rule == "strictly_closer":
            return rival_dist < my_dist
        if self.rule == "within_margin":
            return rival_dist <= my_dist + self.margin
        return rival_dist <= my_dist

    def is_contested(self, food: Point, state: GameState) -> bool:
        me = state.you
        my_dist = manhattan(me.head, food)
        for rival in state.rivals():
            if rival.length < me.length:
                continue
            if self._rival_wins_race(manhattan(rival.head, food), my_dist):
                return True
        return False

    def candidates(self, state: GameState) -> List[Point]:
        """Uncontested, non-corner food ordered nearest first (ties by x, then y)."""
        board = state.board
        head = state.you.head
        eligible = []
        for food in board.food:
            if self.skip_corners and is_corner(food, board.width, board.height):
                continue
            if self.is_contested(food, state):
                continue
            eligible.append(food)
        return sorted(eligible, key=lambda f: (manhattan(head, f), f.x, f.y))

    def steps_toward(self, head: Point, food: Point) -> List[Direction]:
        """Horizontal step first, vertical only when already aligned (or as fallback)."""
        horizontal: Optional[Direction] = None
        vertical: Optional[Direction] = None
        if food.x < head.x:
            horizontal = Direction.LEFT
        elif food.x > head.x:
            horizontal = Direction.RIGHT
        if food.y < head.y:
            vertical = Direction.DOWN
        elif food.y > head.y:
            vertical = Direction.UP

        if horizontal is not None:
            if self.axis_fallback and vertical is not None:
                return [horizontal, vertical]
            return [horizontal]
        return [vertical] if vertical is not None else []

    def wants_food(self, state: GameState) -> bool:
        return self.seek_health is None or state.you.health < int(self.seek_health)

    def propose(self, state: GameState, safety: SafetyMap) -> Optional[Direction]:
        if not state.board.food or not self.wants_food(state):
            return None
        head = state.you.head
        for food in self.candidates(state):
            for d in self.steps_toward(head, food):
                if safety[d]:
                    return d
        return None
