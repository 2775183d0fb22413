from __future__ import annotations

import unittest

from snakebrain.geometry import (
    Direction,
    Point,
    corners,
    in_bounds,
    is_corner,
    manhattan,
    neighbors,
    pack,
)


class DirectionTest(unittest.TestCase):
    def test_offsets_follow_board_orientation(self):
        origin = Point(5, 5)
        self.assertEqual(Direction.UP.step(origin), Point(5, 6))
        self.assertEqual(Direction.DOWN.step(origin), Point(5, 4))
        self.assertEqual(Direction.LEFT.step(origin), Point(4, 5))
        self.assertEqual(Direction.RIGHT.step(origin), Point(6, 5))

    def test_opposites_are_symmetric(self):
        for d in Direction:
            self.assertEqual(d.opposite.opposite, d)
            self.assertNotEqual(d.opposite, d)
        self.assertEqual(Direction.UP.opposite, Direction.DOWN)
        self.assertEqual(Direction.LEFT.opposite, Direction.RIGHT)

    def test_from_offset(self):
        self.assertEqual(Direction.from_offset(0, -1), Direction.DOWN)
        self.assertIsNone(Direction.from_offset(0, 0))
        self.assertIsNone(Direction.from_offset(1, 1))

    def test_parse_accepts_move_names(self):
        self.assertEqual(Direction.parse("Left"), Direction.LEFT)
        with self.assertRaises(ValueError):
            Direction.parse("north")


class GridHelpersTest(unittest.TestCase):
    def test_bounds(self):
        self.assertTrue(in_bounds(Point(0, 0), 1, 1))
        self.assertFalse(in_bounds(Point(1, 0), 1, 1))
        self.assertFalse(in_bounds(Point(-1, 3), 11, 11))
        self.assertFalse(in_bounds(Point(3, 11), 11, 11))

    def test_manhattan(self):
        self.assertEqual(manhattan(Point(1, 2), Point(4, 0)), 5)

    def test_neighbors_in_direction_order(self):
        cells = neighbors(Point(2, 2))
        self.assertEqual([d for d, _ in cells], list(Direction))
        self.assertIn((Direction.UP, Point(2, 3)), cells)

    def test_corners_deduplicate_on_thin_boards(self):
        self.assertEqual(len(corners(11, 11)), 4)
        self.assertEqual(corners(1, 1), (Point(0, 0),))
        self.assertEqual(len(corners(1, 5)), 2)
        self.assertTrue(is_corner(Point(10, 0), 11, 11))
        self.assertFalse(is_corner(Point(5, 0), 11, 11))

    def test_pack_is_row_major(self):
        self.assertEqual(pack(Point(3, 2), 11), 25)
