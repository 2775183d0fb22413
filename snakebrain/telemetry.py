"""Optional diagnostics side channel for the decision pipeline.

The agent calls ``observer.emit(event, payload)`` after each decision. Observers never
influence the chosen move; a failing observer is logged and ignored.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Tuple

logger = logging.getLogger(__name__)


class Observer:
    """No-op base observer."""

    def emit(self, event: str, payload: Dict[str, Any]) -> None:
        return None


class LoggingObserver(Observer):
    def __init__(self, level: int = logging.DEBUG) -> None:
        self.level = level

    def emit(self, event: str, payload: Dict[str, Any]) -> None:
        if not logger.isEnabledFor(self.level):
            return
        if event == "decision":
            logger.log(
                self.level,
                "turn %s %s -> %s (%s) safe=%s space=%s rejected=%s",
                payload.get("turn"),
                payload.get("snake"),
                payload.get("move"),
                payload.get("rationale"),
                payload.get("safety"),
                payload.get("space"),
                payload.get("reasons"),
            )
        else:
            logger.log(self.level, "%s: %s", event, payload)


class RecordingObserver(Observer):
    """Keep every event in memory (tests, notebooks)."""

    def __init__(self) -> None:
        self.events: List[Tuple[str, Dict[str, Any]]] = []

    def emit(self, event: str, payload: Dict[str, Any]) -> None:
        self.events.append((event, dict(payload)))


class StatsObserver(Observer):
    """Count decisions, food moves, forced fallbacks and rejection reasons."""

    def __init__(self) -> None:
        self.decisions = 0
        self.food_moves = 0
        self.forced = 0
        self._reject_reasons: Dict[str, int] = defaultdict(int)

    def reset(self) -> None:
        self.decisions = 0
        self.food_moves = 0
        self.forced = 0
        self._reject_reasons.clear()

    def emit(self, event: str, payload: Dict[str, Any]) -> None:
        if event != "decision":
            return
        self.decisions += 1
        rationale = payload.get("rationale")
        if rationale == "food":
            self.food_moves += 1
        elif rationale in ("least_trapped", "default"):
            self.forced += 1
        for reason in (payload.get("reasons") or {}).values():
            self._reject_reasons[reason] += 1

    def stats(self) -> Dict[str, Any]:
        forced_rate = float(self.forced) / float(self.decisions) if self.decisions else 0.0
        out: Dict[str, Any] = {
            "decisions": int(self.decisions),
            "food_moves": int(self.food_moves),
            "safety_forced": int(self.forced),
            "forced_rate": forced_rate,
        }
        out.update({f"reject_{reason}": count for reason, count in sorted(self._reject_reasons.items())})
        return out


class CompositeObserver(Observer):
    """Fan events out to several observers; one failing child does not starve the rest."""

    def __init__(self, observers: Iterable[Observer]) -> None:
        self.observers = list(observers)

    def emit(self, event: str, payload: Dict[str, Any]) -> None:
        for observer in self.observers:
            try:
                observer.emit(event, payload)
            except Exception as exc:
                logger.warning("Observer %r failed on %s: %s", observer, event, exc)
