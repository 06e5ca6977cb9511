"""UI model holding the latest render frame plus score samples for plotting."""

from __future__ import annotations

from collections import deque
from threading import Lock
from typing import Any, Callable


Subscriber = Callable[[dict[str, Any]], None]


class RenderStateModel:
    """Latest frame (as plain dicts) with a bounded score trail.

    Subscribers run after the lock is released, so they may read the model
    back without deadlocking.
    """

    def __init__(self, history_size: int = 120) -> None:
        self._lock = Lock()
        self._latest: dict[str, Any] | None = None
        self._scores: deque[int] = deque(maxlen=max(1, history_size))
        self._phase: str | None = None
        self._subscribers: list[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> None:
        with self._lock:
            self._subscribers.append(callback)

    def update_state(self, state: dict[str, Any]) -> None:
        hud = state.get("hud") or {}
        with self._lock:
            self._latest = state
            self._scores.append(int(hud.get("score", 0)))
            self._phase = str(hud.get("phase", self._phase or "running"))
            subscribers = list(self._subscribers)
        for callback in subscribers:
            callback(state)

    def latest(self) -> dict[str, Any] | None:
        with self._lock:
            return self._latest

    def phase(self) -> str | None:
        with self._lock:
            return self._phase

    def score_history(self) -> list[int]:
        """Scores of the buffered frames, oldest first."""
        with self._lock:
            return list(self._scores)
