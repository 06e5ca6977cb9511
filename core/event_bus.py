"""Synchronous pub/sub event bus for single-threaded simulation loops."""

from __future__ import annotations

import logging
from collections import defaultdict
from threading import Lock
from typing import Any, Callable


LOGGER = logging.getLogger(__name__)

Callback = Callable[[Any], None]


class EventBus:
    """Minimal in-process event bus.

    Callbacks run inline on the publishing thread, in subscription order, so
    observers see events in the same order the simulation produced them. A
    failing subscriber is logged and skipped; it never aborts the tick that
    published the event.
    """

    def __init__(self) -> None:
        self._subs: dict[str, list[Callback]] = defaultdict(list)
        self._lock = Lock()
        self._closed = False

    def subscribe(self, event_type: str, callback: Callback) -> None:
        with self._lock:
            self._subs[event_type].append(callback)

    def unsubscribe(self, event_type: str, callback: Callback) -> None:
        with self._lock:
            callbacks = self._subs.get(event_type, [])
            if callback in callbacks:
                callbacks.remove(callback)

    def publish(self, event_type: str, payload: Any) -> int:
        """Deliver ``payload`` to every subscriber; return delivered count."""
        if self._closed:
            return 0
        with self._lock:
            callbacks = list(self._subs.get(event_type, []))
        delivered = 0
        for callback in callbacks:
            try:
                callback(payload)
            except Exception:
                LOGGER.exception("Subscriber for '%s' failed", event_type)
                continue
            delivered += 1
        return delivered

    def close(self) -> None:
        with self._lock:
            self._subs.clear()
            self._closed = True
