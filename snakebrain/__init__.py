"""snakebrain: a per-turn move engine for multi-snake grid games."""

from .agent import SnakeAgent
from .arbiter import ContestedResourceArbiter
from .geometry import Direction, Point
from .rules import SafetyFilter, SafetyMap
from .selector import MoveSelector
from .space import SpaceEvaluator, reachable_area
from .state import Board, GameState, Snake, SnapshotError

__all__ = [
    "Board",
    "ContestedResourceArbiter",
    "Direction",
    "GameState",
    "MoveSelector",
    "Point",
    "SafetyFilter",
    "SafetyMap",
    "Snake",
    "SnakeAgent",
    "SnapshotError",
    "SpaceEvaluator",
    "reachable_area",
]
