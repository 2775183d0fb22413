"""Per-turn move decision: safety filter, space check, food arbitration, selection."""

from __future__ import annotations

import logging
import random
from typing import Any, Dict, Optional, Tuple

from .arbiter import ContestedResourceArbiter
from .geometry import Direction
from .rules import SafetyFilter
from .selector import MoveSelector
from .space import SpaceEvaluator
from .state import GameState
from .telemetry import Observer

logger = logging.getLogger(__name__)


class SnakeAgent:
    """Stateless move engine.

    An agent holds its policy collaborators only; every call to :meth:`choose_move` builds a
    fresh safety map and space scores from the snapshot, so one instance can serve many
    games at once. The only optional outside input is the random source used for
    tie-breaking (``seed`` or ``rng``).
    """

    def __init__(
        self,
        *,
        safety_filter: Optional[SafetyFilter] = None,
        space_evaluator: Optional[SpaceEvaluator] = None,
        arbiter: Optional[ContestedResourceArbiter] = None,
        selector: Optional[MoveSelector] = None,
        observer: Optional[Observer] = None,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.seed = seed
        if rng is None:
            rng = random.Random(seed)
        self.safety_filter = safety_filter or SafetyFilter()
        self.space_evaluator = space_evaluator or SpaceEvaluator()
        self.arbiter = arbiter or ContestedResourceArbiter()
        self.selector = selector or MoveSelector(rng=rng)
        self.observer = observer

    def _emit(self, event: str, payload: Dict[str, Any]) -> None:
        if self.observer is None:
            return
        try:
            self.observer.emit(event, payload)
        except Exception as exc:
            logger.warning("Observer %r failed on %s: %s", self.observer, event, exc)

    def choose_move(self, state: GameState) -> Tuple[Direction, Dict[str, Any]]:
        safety = self.safety_filter.evaluate(state)
        space = self.space_evaluator.evaluate(state, safety)
        food_move = self.arbiter.propose(state, safety)
        move = self.selector.select(safety, space, food_move)
        rationale = self.selector.rationale(move, safety, space, food_move)

        debug_info: Dict[str, Any] = {
            "turn": state.turn,
            "snake": state.you.id,
            "move": move.value,
            "rationale": rationale,
            "safety": safety.as_dict(),
            "space": {d.value: area for d, area in space.items()},
            "reasons": {d.value: reason for d, reason in safety.reasons.items()},
            "food_move": food_move.value if food_move is not None else None,
        }
        self._emit("decision", debug_info)
        return move, debug_info

    def decide(self, state: GameState) -> Direction:
        move, _ = self.choose_move(state)
        return move

    def move(self, payload: Dict[str, Any]) -> Dict[str, str]:
        """Battlesnake-style adapter: raw move payload in, ``{"move": ...}`` out."""
        return {"move": self.decide(GameState.from_dict(payload)).value}
