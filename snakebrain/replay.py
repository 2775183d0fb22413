"""Replay files: every snapshot and move of an arena game, stored as msgpack.

Persistence follows the same rules as any state we write:
- atomic write (temp file + ``os.replace``) with a ``.bak`` copy of the previous file;
- loading falls back to the backup, moving the unreadable file aside as ``.corrupt.<ts>``;
- with no backup the file is left in place and ``ReplayError`` is raised.
"""

from __future__ import annotations

import errno
import logging
import os
import shutil
import time
from typing import Any, Dict, Iterator, List, Optional, Tuple

import msgpack

from .geometry import Direction
from .state import GameState, SnapshotError

logger = logging.getLogger(__name__)

# On-disk format version for the msgpack payload.
REPLAY_FORMAT_VERSION = 1


class ReplayError(RuntimeError):
    """Raised when a replay file cannot be read."""


class Replay:
    def __init__(self, meta: Dict[str, Any], frames: List[Dict[str, Any]]) -> None:
        self.meta = meta
        self.frames = frames

    def __len__(self) -> int:
        return len(self.frames)

    def snake_ids(self) -> List[str]:
        seen: List[str] = []
        for frame in self.frames:
            for sid in frame.get("moves", {}):
                if sid not in seen:
                    seen.append(sid)
        return seen

    def states_for(self, snake_id: str) -> Iterator[Tuple[GameState, Direction]]:
        """Yield (snapshot, recorded move) for every turn ``snake_id`` moved in."""
        for frame in self.frames:
            move = frame.get("moves", {}).get(snake_id)
            state_raw = frame.get("states", {}).get(snake_id)
            if move is None or state_raw is None:
                continue
            try:
                state, recorded = GameState.from_dict(state_raw), Direction.parse(move)
            except (SnapshotError, ValueError) as exc:
                raise ReplayError(f"turn {frame.get('turn')}: {exc}") from exc
            yield state, recorded


class ReplayRecorder:
    """Collect arena frames and write them to ``path``."""

    def __init__(self, path: str, meta: Optional[Dict[str, Any]] = None) -> None:
        self.path = path
        self.meta: Dict[str, Any] = dict(meta or {})
        self.frames: List[Dict[str, Any]] = []

    def record_turn(self, states: Dict[str, GameState], moves: Dict[str, Direction]) -> None:
        turn = next(iter(states.values())).turn if states else len(self.frames)
        self.frames.append(
            {
                "turn": int(turn),
                "states": {sid: state.to_dict() for sid, state in states.items()},
                "moves": {sid: move.value for sid, move in moves.items()},
            }
        )

    def save(self) -> bool:
        """Write the replay (atomic, with backup). Returns True when the file was written."""
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        if os.path.exists(self.path):
            try:
                shutil.copy(self.path, self.path + ".bak")
            except OSError as e:
                logger.error("Backup failed: %s", e)

        payload = {
            "v": REPLAY_FORMAT_VERSION,
            "meta": self.meta,
            "frames": self.frames,
        }
        blob = msgpack.packb(payload, use_bin_type=True)
        tmp_path = self.path + ".tmp"

        def _write_blob(path: str) -> None:
            with open(path, "wb") as f:
                f.write(blob)
                f.flush()
                os.fsync(f.fileno())

        try:
            _write_blob(tmp_path)
        except OSError as exc:
            logger.error("Failed to write temp replay: %s", exc)
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            return False

        saved = False
        try:
            os.replace(tmp_path, self.path)
            saved = True
        except OSError as exc:
            if exc.errno in {errno.EACCES, errno.EPERM}:
                logger.warning("Atomic replace denied (%s); falling back to overwrite", exc)
                try:
                    _write_blob(self.path)
                    saved = True
                except OSError as fallback_exc:
                    logger.error("Fallback write failed: %s", fallback_exc)
            else:
                logger.error("Save failed: %s", exc)
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)

        if saved:
            logger.info("Saved %d frames to %s", len(self.frames), self.path)
        return saved


def _decode_payload(blob: bytes) -> Replay:
    obj = msgpack.unpackb(blob, raw=False, strict_map_key=False)
    if not isinstance(obj, dict) or "frames" not in obj:
        raise ValueError("Unsupported replay payload")
    version = int(obj.get("v", 0) or 0)
    if version > REPLAY_FORMAT_VERSION:
        raise ValueError(f"Replay format v{version} is newer than supported v{REPLAY_FORMAT_VERSION}")
    frames = obj.get("frames") or []
    if not isinstance(frames, list):
        raise ValueError("Replay frames must be a list")
    return Replay(dict(obj.get("meta") or {}), [f for f in frames if isinstance(f, dict)])


def load_replay(path: str) -> Replay:
    """Load a replay; on failure restore from ``.bak`` once, else quarantine and raise."""
    if not os.path.exists(path):
        raise ReplayError(f"No replay file at {path}")

    def _try_load(p: str) -> Replay:
        with open(p, "rb") as f:
            return _decode_payload(f.read())

    try:
        replay = _try_load(path)
    except (OSError, ValueError, TypeError) as e:
        logger.error("Load failed: %s", e)
        backup_file = path + ".bak"
        if not os.path.exists(backup_file):
            raise ReplayError(f"Unreadable replay {path} and no backup available") from e
        ts = time.strftime("%Y%m%d-%H%M%S")
        corrupt_name = path + f".corrupt.{ts}"
        shutil.move(path, corrupt_name)
        logger.warning("Moved corrupt replay file to %s", corrupt_name)
        shutil.copy(backup_file, path)
        logger.warning("Restored replay file from backup")
        try:
            replay = _try_load(path)
        except (OSError, ValueError, TypeError) as bak_e:
            raise ReplayError(f"Backup for {path} is unreadable too: {bak_e}") from bak_e

    logger.info("Loaded %d frames from %s", len(replay), path)
    return replay
