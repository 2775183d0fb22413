from __future__ import annotations

import unittest
from unittest import mock

from snakebrain import config
from snakebrain.agent import SnakeAgent
from snakebrain.game import ArenaGame
from snakebrain.geometry import Direction
from snakebrain.state import build_state
from snakebrain.telemetry import CompositeObserver, Observer, RecordingObserver, StatsObserver

UP, DOWN, LEFT, RIGHT = Direction.UP, Direction.DOWN, Direction.LEFT, Direction.RIGHT

# Dead-end pocket on a 7x7 board: two free cells to the left, one to the right.
POCKET_HAZARDS = [(2, 4), (1, 4), (0, 3), (2, 2), (1, 2), (5, 3), (4, 4), (4, 2), (3, 4)]

MOVE_PAYLOAD = {
    "turn": 3,
    "board": {
        "width": 11,
        "height": 11,
        "food": [{"x": 3, "y": 3}],
        "hazards": [],
        "snakes": [
            {"id": "me", "health": 90, "body": [{"x": 1, "y": 1}, {"x": 1, "y": 0}, {"x": 0, "y": 0}]},
            {"id": "them", "health": 100, "body": [{"x": 5, "y": 5}, {"x": 5, "y": 6}]},
        ],
    },
    "you": {"id": "me", "health": 90, "body": [{"x": 1, "y": 1}, {"x": 1, "y": 0}, {"x": 0, "y": 0}]},
}


class _ExplodingObserver(Observer):
    def emit(self, event, payload):
        raise RuntimeError("observer down")


class ScenarioTest(unittest.TestCase):
    def setUp(self):
        self.agent = SnakeAgent(seed=0)

    def test_open_board_never_reverses(self):
        state = build_state([(5, 5), (5, 4), (5, 3)])
        move, info = self.agent.choose_move(state)
        self.assertIn(move, (UP, LEFT, RIGHT))
        self.assertEqual(info["reasons"], {"down": "reverse"})

    def test_dead_end_takes_the_larger_pocket(self):
        state = build_state([(3, 3), (3, 2), (3, 1)], width=7, height=7, hazards=POCKET_HAZARDS)
        move, info = self.agent.choose_move(state)
        self.assertEqual(move, LEFT)
        self.assertEqual(info["rationale"], "least_trapped")
        self.assertEqual(info["space"], {"left": 2, "right": 1})
        self.assertEqual(info["reasons"]["left"], "trap")

    def test_fully_enclosed_falls_back_to_default(self):
        hazards = POCKET_HAZARDS + [(2, 3), (4, 3)]
        state = build_state([(3, 3), (3, 2), (3, 1)], width=7, height=7, hazards=hazards)
        move, info = self.agent.choose_move(state)
        self.assertEqual(move, DOWN)
        self.assertEqual(info["rationale"], "default")
        self.assertEqual(info["safety"], {"up": False, "down": False, "left": False, "right": False})

    def test_contested_food_is_left_to_the_longer_rival(self):
        me = [(5, 5), (5, 4), (5, 3), (5, 2), (5, 1)]
        rival = [(9, 9), (9, 8), (9, 7), (9, 6), (9, 5), (9, 4)]
        state = build_state(me, rivals=[rival], food=[(5, 9)])
        move, info = self.agent.choose_move(state)
        self.assertIsNone(info["food_move"])
        self.assertEqual(info["rationale"], "space")
        # Up, left and right reach the same area; priority order breaks the tie.
        self.assertEqual(info["space"]["up"], info["space"]["left"])
        self.assertEqual(move, UP)

    def test_rival_head_reach_removes_shared_cell(self):
        state = build_state([(5, 5), (5, 4), (5, 3)], rivals=[[(7, 5), (8, 5), (9, 5)]])
        move, info = self.agent.choose_move(state)
        self.assertEqual(info["reasons"]["right"], "head_to_head")
        self.assertNotEqual(move, RIGHT)
        self.assertNotEqual(move, DOWN)

    def test_single_safe_move_is_taken(self):
        state = build_state([(0, 5), (1, 5), (2, 5)], hazards=[(0, 4)])
        move, info = self.agent.choose_move(state)
        self.assertEqual(move, UP)
        self.assertEqual(info["safety"], {"up": True, "down": False, "left": False, "right": False})

    def test_one_by_one_board_returns_default(self):
        self.assertEqual(self.agent.decide(build_state([(0, 0)], width=1, height=1)), DOWN)

    def test_single_segment_may_move_any_way(self):
        _, info = self.agent.choose_move(build_state([(5, 5)]))
        self.assertTrue(all(info["safety"].values()))

    def test_food_move_reported(self):
        move, info = self.agent.choose_move(build_state([(5, 5), (5, 4), (5, 3)], food=[(8, 5)]))
        self.assertEqual(move, RIGHT)
        self.assertEqual(info["rationale"], "food")


class AgentAdapterTest(unittest.TestCase):
    def test_move_accepts_battlesnake_payload(self):
        self.assertEqual(SnakeAgent().move(MOVE_PAYLOAD), {"move": "right"})

    def test_agent_is_stateless_between_calls(self):
        agent = SnakeAgent(seed=1)
        state = build_state([(5, 5), (5, 4), (5, 3)], food=[(2, 7)])
        first = agent.choose_move(state)
        agent.choose_move(build_state([(0, 5), (1, 5), (2, 5)], hazards=[(0, 4)]))
        self.assertEqual(agent.choose_move(state), first)


class ObserverTest(unittest.TestCase):
    def test_recording_observer_sees_each_decision(self):
        observer = RecordingObserver()
        agent = SnakeAgent(observer=observer)
        agent.decide(build_state([(5, 5), (5, 4), (5, 3)]))
        self.assertEqual(len(observer.events), 1)
        event, payload = observer.events[0]
        self.assertEqual(event, "decision")
        self.assertEqual(payload["snake"], "you")

    def test_failing_observer_does_not_change_the_move(self):
        state = build_state([(5, 5), (5, 4), (5, 3)], food=[(8, 5)])
        agent = SnakeAgent(observer=_ExplodingObserver())
        with self.assertLogs("snakebrain.agent", level="WARNING"):
            move = agent.decide(state)
        self.assertEqual(move, SnakeAgent().decide(state))

    def test_composite_keeps_feeding_observers_after_a_failure(self):
        stats = StatsObserver()
        agent = SnakeAgent(observer=CompositeObserver([_ExplodingObserver(), stats]))
        with self.assertLogs("snakebrain.telemetry", level="WARNING"):
            agent.decide(build_state([(5, 5), (5, 4), (5, 3)]))
        self.assertEqual(stats.stats()["decisions"], 1)

    def test_stats_observer_counts(self):
        stats = StatsObserver()
        agent = SnakeAgent(observer=stats)
        agent.decide(build_state([(5, 5), (5, 4), (5, 3)], food=[(8, 5)]))
        agent.decide(build_state([(0, 0)], width=1, height=1))
        out = stats.stats()
        self.assertEqual(out["decisions"], 2)
        self.assertEqual(out["food_moves"], 1)
        self.assertEqual(out["safety_forced"], 1)
        self.assertEqual(out["reject_wall"], 4)
        self.assertEqual(out["reject_reverse"], 1)


class ArenaPropertiesTest(unittest.TestCase):
    """Run real arena games and check every decision the engine made."""

    def test_chosen_move_is_safe_whenever_any_move_is_safe(self):
        with mock.patch.object(config, "MAX_TURNS_PER_GAME", 80):
            for seed in range(3):
                observer = RecordingObserver()
                agent = SnakeAgent(seed=seed, observer=observer)
                game = ArenaGame(num_snakes=4, seed=seed, render_enabled=False, hazard_count=6)
                game.play({sid: agent.decide for sid in game.snake_ids})
                self.assertTrue(observer.events)
                for _, info in observer.events:
                    self.assertIn(info["move"], ("up", "down", "left", "right"))
                    if any(info["safety"].values()):
                        self.assertTrue(info["safety"][info["move"]], info)
                    if info["food_move"] is not None:
                        self.assertTrue(info["safety"][info["food_move"]], info)
