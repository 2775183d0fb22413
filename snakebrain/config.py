"""Central configuration for the move engine, the arena and the CLI."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

# Logging
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)-12s - %(levelname)-8s - %(message)s"


def configure_logging(level: int = logging.INFO) -> None:
    """Configure root logging if the host application has not done so already.

    This keeps the package library-friendly (it will not override an existing logging setup),
    while preserving CLI ergonomics.
    """
    root = logging.getLogger()
    if root.handlers:
        return
    logging.basicConfig(level=level, format=DEFAULT_LOG_FORMAT, stream=sys.stdout)


configure_logging()

logger = logging.getLogger("snakebrain")


# ----------------------------
# Paths / persistence
# ----------------------------
REPO_ROOT = Path(__file__).resolve().parents[1]


def _default_state_dir() -> Path:
    """Resolve the state directory (supports env override)."""
    raw = os.environ.get("SNAKEBRAIN_STATE_DIR")
    if raw:
        return Path(raw).expanduser().resolve()
    return REPO_ROOT / "state"


STATE_DIR = _default_state_dir()
REPLAY_DIR = str(STATE_DIR / "replays")

# If False, arena runs never write replay files.
SAVE_REPLAYS = True


def set_state_dir(state_dir: str | Path) -> None:
    """Update the state directory and derived paths at runtime."""
    global STATE_DIR, REPLAY_DIR
    STATE_DIR = Path(state_dir).expanduser().resolve()
    STATE_DIR.mkdir(parents=True, exist_ok=True)
    REPLAY_DIR = str(STATE_DIR / "replays")


# ----------------------------
# Safety policy
# ----------------------------
# The tail cell vacates at the end of the turn unless it is stacked (snake just ate).
SELF_TAIL_EXCLUSION = True

# Never step toward a board corner from a cell next to it.
CORNER_AVOIDANCE = True
# Boards narrower than this skip the corner heuristic (every cell would neighbour a corner).
CORNER_MIN_BOARD = 5

# ----------------------------
# Space policy
# ----------------------------
# Reachable area must be >= body length * SPACE_MULTIPLIER (1 = minimum, 2 = conservative).
SPACE_MULTIPLIER = 1
HAZARDS_BLOCK_SPACE = True

# ----------------------------
# Food policy
# ----------------------------
FOOD_CONTEST_RULES = ("closer_or_equal", "strictly_closer", "within_margin")
FOOD_CONTEST_RULE = "closer_or_equal"
FOOD_CONTEST_MARGIN = 1
FOOD_SKIP_CORNERS = True
# Try the vertical step when the horizontal step toward food is unsafe.
FOOD_AXIS_FALLBACK = False
# Only chase food while health is below this value; None chases every turn.
FOOD_SEEK_HEALTH = None

# ----------------------------
# Selection
# ----------------------------
TIE_BREAKS = ("priority", "random")
TIE_BREAK = "priority"
DIRECTION_PRIORITY = ("up", "down", "left", "right")
DEFAULT_MOVE = "down"

# ----------------------------
# Arena & rendering
# ----------------------------
BOARD_WIDTH = 11
BOARD_HEIGHT = 11
NUM_SNAKES = 4
START_LENGTH = 3
START_HEALTH = 100
HAZARD_COUNT = 0
HAZARD_DAMAGE = 14
MIN_FOOD = 1
FOOD_SPAWN_CHANCE = 0.15
MAX_TURNS_PER_GAME = 500

GRID_SIZE = 48
FPS = 10
UI_DEBUG_MODE = False

PROGRESS_LOG_INTERVAL = 100


def validate_config() -> None:
    """Basic sanity checks."""
    ok = True
    if BOARD_WIDTH < 1 or BOARD_HEIGHT < 1:
        logger.error("BOARD_WIDTH and BOARD_HEIGHT must be >= 1")
        ok = False
    if not 1 <= NUM_SNAKES <= 8:
        logger.error("NUM_SNAKES must be between 1 and 8")
        ok = False
    if START_LENGTH < 1:
        logger.error("START_LENGTH must be >= 1")
        ok = False
    if SPACE_MULTIPLIER < 1:
        logger.error("SPACE_MULTIPLIER must be >= 1")
        ok = False
    if FOOD_CONTEST_RULE not in FOOD_CONTEST_RULES:
        logger.error("FOOD_CONTEST_RULE must be one of %s", ", ".join(FOOD_CONTEST_RULES))
        ok = False
    if FOOD_CONTEST_MARGIN < 0:
        logger.error("FOOD_CONTEST_MARGIN must be >= 0")
        ok = False
    if TIE_BREAK not in TIE_BREAKS:
        logger.error("TIE_BREAK must be one of %s", ", ".join(TIE_BREAKS))
        ok = False
    if sorted(DIRECTION_PRIORITY) != ["down", "left", "right", "up"]:
        logger.error("DIRECTION_PRIORITY must list up, down, left and right exactly once")
        ok = False
    if DEFAULT_MOVE not in ("up", "down", "left", "right"):
        logger.error("DEFAULT_MOVE must be a direction name")
        ok = False
    if not 0.0 <= FOOD_SPAWN_CHANCE <= 1.0:
        logger.error("FOOD_SPAWN_CHANCE must be within [0, 1]")
        ok = False
    if MAX_TURNS_PER_GAME < 1:
        logger.error("MAX_TURNS_PER_GAME must be >= 1")
        ok = False
    if not ok:
        raise SystemExit(1)
