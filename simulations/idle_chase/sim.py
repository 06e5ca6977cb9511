"""Simulation plugin for idle_chase."""

from __future__ import annotations

from typing import Any

from core.deterministic_rng import DeterministicRNG
from core.event_bus import EventBus
from data.high_score_store import HighScoreRepository
from simulations.base_simulation import Simulation
from simulations.idle_chase.environment import IdleChaseSession
from simulations.idle_chase.settings import IdleChaseConfig


class IdleChaseSimulation(Simulation):
    """Idle-screen chase: one seeker, personality-driven chasers, power mode."""

    def __init__(
        self,
        params: dict[str, Any],
        rng: DeterministicRNG,
        event_bus: EventBus | None = None,
        high_scores: HighScoreRepository | None = None,
    ) -> None:
        super().__init__(params=params, rng=rng, event_bus=event_bus, high_scores=high_scores)
        self.config = IdleChaseConfig.from_params(params)
        self.session = IdleChaseSession(
            config=self.config,
            rng=rng,
            high_scores=high_scores,
            event_bus=event_bus,
        )

    def reset(self) -> None:
        if self.session.state is not None:
            self.session.dispose()
        self.session.start()

    def step(self, dt: float) -> None:
        self.session.tick(dt)

    def handle_input(self, action: str) -> None:
        self.session.handle_input(action)

    def get_metrics(self) -> dict[str, float]:
        return self.session.get_metrics()

    def get_render_state(self) -> dict[str, Any]:
        return self.session.get_render_state()

    def close(self) -> None:
        self.session.dispose()


SIMULATION_NAME = "idle_chase"
SimulationClass = IdleChaseSimulation
