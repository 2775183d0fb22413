"""Command-line interface: arena runs, one-shot decisions and replay checks."""

from __future__ import annotations

import argparse
import cProfile
import json
import logging
import os
import pstats
import random
import time
from pathlib import Path
from typing import Any, Dict, Optional

from . import config
from .agent import SnakeAgent
from .game import ArenaGame, random_safe_move
from .geometry import Direction
from .replay import ReplayError, ReplayRecorder, load_replay
from .state import GameState, SnapshotError
from .telemetry import CompositeObserver, LoggingObserver, StatsObserver

logger = logging.getLogger(__name__)

HERO_ID = "snake-0"


def _open_jsonl(path: Optional[str]):
    if not path:
        return None
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    return p.open("a", encoding="utf-8")


def _build_strategies(
    game: ArenaGame, hero: SnakeAgent, opponents: str, seed: Optional[int], episode: int
):
    def hero_move(state: GameState) -> Direction:
        move, debug_info = hero.choose_move(state)
        game.debug_info = debug_info
        if not game.render_enabled and state.turn and state.turn % config.PROGRESS_LOG_INTERVAL == 0:
            logger.info(
                "Game %d | Turn %d | Length %d | Health %d | Alive %d",
                episode,
                state.turn,
                state.you.length,
                state.you.health,
                len(state.board.snakes),
            )
        return move

    strategies: Dict[str, Any] = {HERO_ID: hero_move}
    for idx, sid in enumerate(game.snake_ids[1:], start=1):
        opp_seed = None if seed is None else seed + idx
        if opponents == "random":
            rng = random.Random(opp_seed)
            strategies[sid] = lambda state, rng=rng: random_safe_move(state, rng)
        else:
            strategies[sid] = SnakeAgent(seed=opp_seed).decide
    return strategies


def run(
    num_games: int,
    render: bool,
    debug: bool,
    seed: Optional[int],
    max_turns: Optional[int],
    log_jsonl: Optional[str],
    state_dir: Optional[str],
    no_save: bool,
    num_snakes: Optional[int] = None,
    width: Optional[int] = None,
    height: Optional[int] = None,
    hazards: Optional[int] = None,
    opponents: str = "self",
    record: bool = False,
) -> int:
    config_snapshot = {
        "SAVE_REPLAYS": config.SAVE_REPLAYS,
        "MAX_TURNS_PER_GAME": config.MAX_TURNS_PER_GAME,
        "STATE_DIR": config.STATE_DIR,
        "REPLAY_DIR": config.REPLAY_DIR,
        "UI_DEBUG_MODE": config.UI_DEBUG_MODE,
    }
    config.UI_DEBUG_MODE = bool(debug)
    if state_dir:
        config.set_state_dir(state_dir)

    # Evaluation mode: disable writes.
    if no_save:
        config.SAVE_REPLAYS = False

    if max_turns is not None:
        config.MAX_TURNS_PER_GAME = int(max_turns)

    jsonl_f = None
    try:
        config.validate_config()

        stats = StatsObserver()
        hero = SnakeAgent(seed=seed, observer=CompositeObserver([stats, LoggingObserver()]))
        game = ArenaGame(
            num_snakes=num_snakes,
            width=width,
            height=height,
            seed=seed,
            render_enabled=render,
            hazard_count=hazards,
        )

        wins = 0
        total_turns = 0
        session_forced = 0
        session_decisions = 0
        t0 = time.time()
        jsonl_f = _open_jsonl(log_jsonl)

        for i in range(num_games):
            if i > 0:
                game.reset()
            stats.reset()
            recorder = None
            if record and config.SAVE_REPLAYS:
                replay_name = f"game-{seed if seed is not None else 'x'}-{i + 1}.msgpack"
                recorder = ReplayRecorder(
                    os.path.join(config.REPLAY_DIR, replay_name),
                    meta={"seed": seed, "episode": i + 1, "width": game.width, "height": game.height},
                )

            start_game_time = time.time()
            strategies = _build_strategies(game, hero, opponents, seed, i + 1)
            summary = game.play(strategies, on_turn=recorder.record_turn if recorder else None)
            elapsed_game = time.time() - start_game_time

            if recorder is not None:
                recorder.meta.update({"winner": summary["winner"], "turns": summary["turns"]})
                recorder.save()

            game_stats = stats.stats()
            won = summary["winner"] == HERO_ID
            wins += int(won)
            total_turns += int(summary["turns"])
            session_forced += int(game_stats["safety_forced"])
            session_decisions += int(game_stats["decisions"])
            logger.info(
                "Game %d/%d: winner=%s turns=%d length=%d death=%s (%.2fs) | food moves=%d forced=%d",
                i + 1,
                num_games,
                summary["winner"],
                summary["turns"],
                summary["lengths"].get(HERO_ID, 0),
                summary["death_reasons"].get(HERO_ID, "-"),
                elapsed_game,
                game_stats["food_moves"],
                game_stats["safety_forced"],
            )

            if jsonl_f is not None:
                row = {
                    "ts": time.time(),
                    "episode": i + 1,
                    "seed": seed,
                    "render": bool(render),
                    "board": f"{game.width}x{game.height}",
                    "snakes": game.num_snakes,
                    "opponents": opponents,
                    "winner": summary["winner"],
                    "won": bool(won),
                    "turns": int(summary["turns"]),
                    "length": int(summary["lengths"].get(HERO_ID, 0)),
                    "death_reason": summary["death_reasons"].get(HERO_ID),
                }
                row.update(game_stats)
                jsonl_f.write(json.dumps(row) + "\n")
                jsonl_f.flush()

        elapsed = time.time() - t0
        if num_games:
            logger.info(
                "Session: wins=%d/%d avg_turns=%.1f (%.2fs)",
                wins,
                num_games,
                total_turns / float(num_games),
                elapsed,
            )
            if session_decisions > 0:
                logger.info("forced_rate=%.2f%%", 100.0 * session_forced / float(session_decisions))
        return 0
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130
    finally:
        if jsonl_f is not None:
            jsonl_f.close()
        for attr, value in config_snapshot.items():
            setattr(config, attr, value)


def decide_file(path: str) -> int:
    """Print the engine's move for one JSON snapshot (Battlesnake move payload)."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            payload = json.load(fh)
        state = GameState.from_dict(payload)
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Unable to read snapshot %s: %s", path, exc)
        return 2
    except SnapshotError as exc:
        logger.error("Invalid snapshot %s: %s", path, exc)
        return 2

    move, debug_info = SnakeAgent().choose_move(state)
    logger.info("Turn %d: %s (%s)", state.turn, move.value, debug_info["rationale"])
    print(json.dumps({"move": move.value, **{k: debug_info[k] for k in ("rationale", "safety", "space")}}))
    return 0


def check_replay(path: str, snake_id: Optional[str] = None, seed: Optional[int] = None) -> int:
    """Re-run the engine over a recorded game and report how many moves it reproduces."""
    try:
        replay = load_replay(path)
        ids = replay.snake_ids()
        if not ids:
            logger.error("Replay %s has no recorded moves", path)
            return 2
        target = snake_id or ids[0]
        agent = SnakeAgent(seed=seed)
        matched = 0
        total = 0
        for state, recorded in replay.states_for(target):
            total += 1
            move = agent.decide(state)
            if move == recorded:
                matched += 1
            else:
                logger.info("turn %d: recorded %s, engine now %s", state.turn, recorded.value, move.value)
    except ReplayError as exc:
        logger.error("%s", exc)
        return 2

    logger.info("Replay %s: %s reproduced %d/%d moves", path, target, matched, total)
    print(json.dumps({"snake": target, "matched": matched, "total": total}))
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    # Ensure pygame banner stays hidden even when importing via `snakebrain.cli`.
    os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

    parser = argparse.ArgumentParser(description="snakebrain move engine")
    parser.add_argument("--num-games", "--games", type=int, default=10, help="Number of arena games to run")
    parser.add_argument("--no-render", action="store_true", help="Disable window rendering (headless)")
    parser.add_argument("--debug", action="store_true", help="Show space scores on the board (windowed mode)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducibility")
    parser.add_argument("--max-turns", type=int, default=None, help="Per-game turn cap")
    parser.add_argument("--snakes", type=int, default=None, help="Snakes per game (default: config.NUM_SNAKES)")
    parser.add_argument("--width", type=int, default=None, help="Board width")
    parser.add_argument("--height", type=int, default=None, help="Board height")
    parser.add_argument("--hazards", type=int, default=None, help="Number of static hazard cells")
    parser.add_argument(
        "--opponents",
        choices=("self", "random"),
        default="self",
        help="Opponent policy: copies of the engine, or random safe moves",
    )
    parser.add_argument("--profile", action="store_true", help="Enable profiling output")
    parser.add_argument(
        "--log-jsonl",
        type=str,
        default=None,
        help="Append per-game metrics to a JSONL file (e.g. runs/session.jsonl)",
    )
    parser.add_argument(
        "--state-dir",
        type=str,
        default=None,
        help="Override state directory (default: state/). Replays are written under <state>/replays.",
    )
    parser.add_argument("--record", action="store_true", help="Write a msgpack replay per game")
    parser.add_argument(
        "--no-save",
        action="store_true",
        help="Do not write replays to disk (evaluation mode).",
    )
    parser.add_argument("--decide", type=str, default=None, metavar="PATH", help="Decide one JSON snapshot and exit")
    parser.add_argument("--replay", type=str, default=None, metavar="PATH", help="Re-check a recorded replay and exit")
    parser.add_argument("--snake", type=str, default=None, help="Snake id to check with --replay")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log every decision")

    args = parser.parse_args(argv)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.decide:
        return decide_file(args.decide)
    if args.replay:
        return check_replay(args.replay, args.snake, args.seed)

    def _run() -> int:
        return run(
            num_games=args.num_games,
            render=not args.no_render,
            debug=args.debug,
            seed=args.seed,
            max_turns=args.max_turns,
            log_jsonl=args.log_jsonl,
            state_dir=args.state_dir,
            no_save=args.no_save,
            num_snakes=args.snakes,
            width=args.width,
            height=args.height,
            hazards=args.hazards,
            opponents=args.opponents,
            record=args.record,
        )

    if args.profile:
        profiler = cProfile.Profile()
        profiler.enable()
        rc = _run()
        profiler.disable()
        stats = pstats.Stats(profiler).sort_stats("cumulative")
        print("\n=== Profiling Results ===")
        stats.print_stats(30)
        return rc

    return _run()
