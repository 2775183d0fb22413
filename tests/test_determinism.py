from __future__ import annotations

import json
import os
import shutil
import unittest
import uuid

from snakebrain.cli import run


class DeterminismTest(unittest.TestCase):
    def _run_games(self, seed: int, log_path: str, state_dir: str) -> list[tuple]:
        rc = run(
            num_games=3,
            render=False,
            debug=False,
            seed=seed,
            max_turns=200,
            log_jsonl=log_path,
            state_dir=state_dir,
            no_save=True,
            opponents="random",
        )
        self.assertEqual(rc, 0)
        with open(log_path, encoding="utf-8") as fh:
            rows = [json.loads(line) for line in fh]
        return [(row["winner"], row["turns"], row["length"], row["decisions"]) for row in rows]

    def test_headless_runs_are_deterministic(self):
        tmp_root = os.path.abspath(
            os.path.join(os.getcwd(), f"tmp-determinism-{uuid.uuid4().hex}")
        )
        os.makedirs(tmp_root, exist_ok=True)
        try:
            games = []
            for run_id in range(2):
                log_path = os.path.join(tmp_root, f"run{run_id}.jsonl")
                state_dir = tmp_root
                games.append(self._run_games(2026, log_path, state_dir))
            self.assertEqual(len(games[0]), 3)
            self.assertEqual(games[0], games[1])
        finally:
            shutil.rmtree(tmp_root, ignore_errors=True)
