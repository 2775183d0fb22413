from __future__ import annotations

import unittest

from snakebrain.geometry import Direction
from snakebrain.rules import SafetyFilter, SafetyMap
from snakebrain.state import build_state

UP, DOWN, LEFT, RIGHT = Direction.UP, Direction.DOWN, Direction.LEFT, Direction.RIGHT


class SafetyMapTest(unittest.TestCase):
    def test_starts_fully_safe(self):
        safety = SafetyMap()
        self.assertEqual(len(safety), 4)
        self.assertEqual(safety.safe_directions(), list(Direction))

    def test_only_narrows_and_keeps_first_reason(self):
        safety = SafetyMap()
        safety.mark_unsafe(LEFT, "wall")
        safety.mark_unsafe(LEFT, "hazard")
        self.assertFalse(safety[LEFT])
        self.assertEqual(safety.reasons, {LEFT: "wall"})
        self.assertEqual(set(safety.as_dict()), {"up", "down", "left", "right"})


class SafetyFilterTest(unittest.TestCase):
    def setUp(self):
        self.flt = SafetyFilter(exclude_tail=True, corner_avoidance=True, corner_min_board=5)

    def test_reverse_into_neck_is_unsafe(self):
        state = build_state([(5, 5), (5, 4), (5, 3)])
        safety = self.flt.evaluate(state)
        self.assertEqual(safety.safe_directions(), [UP, LEFT, RIGHT])
        self.assertEqual(safety.reasons[DOWN], "reverse")

    def test_single_segment_has_no_reversal_constraint(self):
        safety = self.flt.evaluate(build_state([(5, 5)]))
        self.assertEqual(safety.safe_directions(), list(Direction))

    def test_stacked_spawn_has_no_reversal_constraint(self):
        safety = self.flt.evaluate(build_state([(5, 5), (5, 5), (5, 5)]))
        self.assertEqual(safety.safe_directions(), list(Direction))

    def test_walls(self):
        safety = self.flt.evaluate(build_state([(0, 5), (1, 5)]))
        self.assertEqual(safety.reasons[LEFT], "wall")
        self.assertEqual(safety.reasons[RIGHT], "reverse")
        self.assertEqual(safety.safe_directions(), [UP, DOWN])

    def test_one_by_one_board_has_no_safe_move(self):
        safety = self.flt.evaluate(build_state([(0, 0)], width=1, height=1))
        self.assertFalse(safety.any_safe())
        self.assertEqual(set(safety.reasons.values()), {"wall"})

    def test_own_body(self):
        state = build_state([(5, 5), (5, 4), (6, 4), (6, 5), (6, 6)])
        safety = self.flt.evaluate(state)
        self.assertEqual(safety.reasons[RIGHT], "self")
        self.assertTrue(safety[UP])
        self.assertTrue(safety[LEFT])

    def test_tail_that_moves_away_is_enterable(self):
        state = build_state([(5, 5), (5, 4), (6, 4), (6, 5)])
        self.assertTrue(self.flt.evaluate(state)[RIGHT])
        strict = SafetyFilter(exclude_tail=False)
        self.assertFalse(strict.evaluate(state)[RIGHT])

    def test_stacked_tail_is_not_enterable(self):
        state = build_state([(5, 5), (5, 4), (6, 4), (6, 5), (6, 5)])
        self.assertEqual(self.flt.evaluate(state).reasons[RIGHT], "self")

    def test_rival_body_blocks_but_shorter_rival_head_does_not(self):
        state = build_state(
            [(5, 5), (5, 4), (5, 3), (5, 2)],
            rivals=[[(6, 6), (6, 5), (7, 5)]],
        )
        safety = self.flt.evaluate(state)
        self.assertEqual(safety.reasons[RIGHT], "rival_body")
        # (5, 6) is a possible next head for the rival, but the rival is shorter.
        self.assertTrue(safety[UP])

    def test_hazards_are_walls(self):
        state = build_state([(5, 5), (5, 4)], hazards=[(4, 5)], health=100)
        self.assertEqual(self.flt.evaluate(state).reasons[LEFT], "hazard")

    def test_equal_rival_head_to_head_is_avoided(self):
        state = build_state([(5, 5), (5, 4), (5, 3)], rivals=[[(7, 5), (8, 5), (9, 5)]])
        safety = self.flt.evaluate(state)
        self.assertEqual(safety.reasons[RIGHT], "head_to_head")
        self.assertTrue(safety[UP])
        self.assertTrue(safety[LEFT])

    def test_longer_rival_head_to_head_is_avoided(self):
        state = build_state([(5, 5), (5, 4), (5, 3)], rivals=[[(5, 7), (5, 8), (5, 9), (5, 10)]])
        self.assertEqual(self.flt.evaluate(state).reasons[UP], "head_to_head")

    def test_shorter_rival_head_to_head_is_allowed(self):
        state = build_state([(5, 5), (5, 4), (5, 3)], rivals=[[(7, 5), (8, 5)]])
        self.assertTrue(self.flt.evaluate(state)[RIGHT])

    def test_diagonal_to_corner_blocks_both_corner_moves(self):
        state = build_state([(1, 1), (2, 1), (3, 1)])
        safety = self.flt.evaluate(state)
        self.assertEqual(safety.reasons[LEFT], "corner")
        self.assertEqual(safety.reasons[DOWN], "corner")
        self.assertEqual(safety.safe_directions(), [UP])

    def test_edge_cell_next_to_corner_is_not_a_pocket(self):
        # Only the diagonal neighbour of a corner triggers the heuristic.
        safety = self.flt.evaluate(build_state([(0, 1), (0, 2), (0, 3)]))
        self.assertTrue(safety[DOWN])
        self.assertNotIn("corner", safety.reasons.values())
        self.assertEqual(safety.safe_directions(), [DOWN, RIGHT])

        safety = self.flt.evaluate(build_state([(9, 10), (8, 10), (7, 10)]))
        self.assertTrue(safety[RIGHT])
        self.assertEqual(safety.safe_directions(), [DOWN, RIGHT])

    def test_corner_heuristic_skipped_on_small_boards(self):
        state = build_state([(1, 1)], width=3, height=3)
        self.assertEqual(self.flt.evaluate(state).safe_directions(), list(Direction))

    def test_corner_heuristic_can_be_disabled(self):
        flt = SafetyFilter(corner_avoidance=False)
        state = build_state([(1, 1), (2, 1), (3, 1)])
        self.assertEqual(flt.evaluate(state).safe_directions(), [UP, DOWN, LEFT])
