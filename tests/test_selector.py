from __future__ import annotations

import random
import unittest

from snakebrain.geometry import Direction
from snakebrain.rules import SafetyMap
from snakebrain.selector import MoveSelector

UP, DOWN, LEFT, RIGHT = Direction.UP, Direction.DOWN, Direction.LEFT, Direction.RIGHT


def _safety(*unsafe):
    safety = SafetyMap()
    for d in unsafe:
        safety.mark_unsafe(d, "test")
    return safety


class MoveSelectorTest(unittest.TestCase):
    def setUp(self):
        self.selector = MoveSelector(tie_break="priority", priority=("up", "down", "left", "right"), default="down")

    def test_safe_food_move_wins(self):
        safety = _safety()
        space = {UP: 100, DOWN: 10, LEFT: 10, RIGHT: 10}
        self.assertEqual(self.selector.select(safety, space, LEFT), LEFT)
        self.assertEqual(self.selector.rationale(LEFT, safety, space, LEFT), "food")

    def test_unsafe_food_move_is_ignored(self):
        safety = _safety(LEFT)
        space = {UP: 5, DOWN: 50, RIGHT: 10}
        self.assertEqual(self.selector.select(safety, space, LEFT), DOWN)
        self.assertEqual(self.selector.rationale(DOWN, safety, space, LEFT), "space")

    def test_most_space_then_priority(self):
        safety = _safety(UP)
        space = {DOWN: 20, LEFT: 40, RIGHT: 40}
        self.assertEqual(self.selector.select(safety, space), LEFT)

    def test_custom_priority(self):
        selector = MoveSelector(priority=("right", "left", "down", "up"))
        space = {d: 7 for d in Direction}
        self.assertEqual(selector.select(_safety(), space), RIGHT)

    def test_random_tie_break_stays_among_the_best(self):
        selector = MoveSelector(tie_break="random", rng=random.Random(3))
        space = {UP: 1, DOWN: 9, LEFT: 9, RIGHT: 9}
        picks = {selector.select(_safety(), space) for _ in range(50)}
        self.assertTrue(picks <= {DOWN, LEFT, RIGHT})
        self.assertGreater(len(picks), 1)

    def test_least_trapped_when_nothing_safe(self):
        safety = _safety(UP, DOWN, LEFT, RIGHT)
        space = {LEFT: 2, RIGHT: 1}
        self.assertEqual(self.selector.select(safety, space), LEFT)
        self.assertEqual(self.selector.rationale(LEFT, safety, space), "least_trapped")

    def test_default_when_nothing_scored(self):
        safety = _safety(UP, DOWN, LEFT, RIGHT)
        self.assertEqual(self.selector.select(safety, {}), DOWN)
        self.assertEqual(self.selector.rationale(DOWN, safety, {}), "default")

    def test_rejects_bad_configuration(self):
        with self.assertRaises(ValueError):
            MoveSelector(tie_break="alphabetical")
        with self.assertRaises(ValueError):
            MoveSelector(priority=("up", "up", "left", "right"))
        with self.assertRaises(ValueError):
            MoveSelector(default="sideways")
