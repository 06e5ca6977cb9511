"""Base simulation plugin contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from core.deterministic_rng import DeterministicRNG
from core.event_bus import EventBus
from data.high_score_store import HighScoreRepository


class Simulation(ABC):
    """Abstract simulation plugin interface.

    All simulation state must be instance-local. The core engine communicates
    with plugins only through this contract.
    """

    def __init__(
        self,
        params: dict[str, Any],
        rng: DeterministicRNG,
        event_bus: EventBus | None = None,
        high_scores: HighScoreRepository | None = None,
    ) -> None:
        """Store plugin parameters and collaborators.

        Args:
            params: Plugin-specific validated parameters.
            rng: Deterministic RNG owned by the simulator; plugins draw named
                streams from it.
            event_bus: Optional bus for transient events (messages, exit).
            high_scores: Optional persisted high-score repository.
        """
        self.params = params
        self.rng = rng
        self.event_bus = event_bus
        self.high_scores = high_scores

    @abstractmethod
    def reset(self) -> None:
        """Initialize world state and agents."""

    @abstractmethod
    def step(self, dt: float) -> None:
        """Advance the simulation by one fixed step of ``dt`` seconds."""

    @abstractmethod
    def get_metrics(self) -> dict[str, float]:
        """Return scalar metrics for logging."""

    @abstractmethod
    def get_render_state(self) -> dict[str, Any]:
        """Return JSON-serializable world state (data only)."""

    def handle_input(self, action: str) -> None:
        """React to an external trigger (tap, click, key press)."""
        _ = action

    @abstractmethod
    def close(self) -> None:
        """Release plugin resources."""
