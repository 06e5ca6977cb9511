"""Core simulator that orchestrates plugins without simulation-specific logic."""

from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Any, Callable

from core.config_loader import load_config
from core.deterministic_rng import DeterministicRNG
from core.event_bus import EventBus
from core.plugin_registry import get_simulation_class
from core.scheduler import FixedTimestepScheduler
from data.high_score_store import DEFAULT_KEY, HighScoreRepository, KeyValueStore, build_store

LOGGER = logging.getLogger(__name__)


# Plugin events worth relaying to remote displays.
FORWARDED_EVENTS = ("message", "high_score", "power_mode", "chaser_eaten", "phase", "exit")


class SimulatorRuntimeError(RuntimeError):
    """Raised when a simulation plugin fails during execution."""


class Simulator:
    """Plugin-driven simulator runtime.

    ``run(steps)`` is a self-contained batch run that always closes the
    plugin. ``run_for(seconds)`` advances an open session through the
    fixed-timestep scheduler and is meant to be called repeatedly by a UI or
    server loop, followed by ``close()``.
    """

    def __init__(
        self,
        config_path: str | Path,
        event_bus: EventBus | None = None,
        store: KeyValueStore | None = None,
    ) -> None:
        config = load_config(str(config_path))
        self.config = config

        self.simulation_name = str(config["simulation"])
        self.simulation_config = dict(config["simulation_config"])
        self.session_config = dict(config["session_config"])
        self.logging_config = dict(config["logging_config"])
        self.storage_config = dict(config["storage_config"])

        self.seed = int(config["seed"])
        self.rng = DeterministicRNG(self.seed)
        self.event_bus = event_bus if event_bus is not None else EventBus()

        self.step_index = 0
        self.tick_seconds = float(self.session_config["tick_seconds"])
        self.auto_start = bool(self.session_config["auto_start"])
        self.session_name = str(self.logging_config["session_name"])
        self._snapshot_interval = max(1, int(self.logging_config["snapshot_interval"]))
        self.scheduler = FixedTimestepScheduler(step_seconds=self.tick_seconds)

        self._owns_store = store is None
        self.store = store if store is not None else build_store(self.storage_config)
        self.high_scores = HighScoreRepository(self.store, key=str(self.storage_config.get("key", DEFAULT_KEY)))

        simulation_class = get_simulation_class(self.simulation_name)
        try:
            self.sim = simulation_class(
                params=self.simulation_config,
                rng=self.rng,
                event_bus=self.event_bus,
                high_scores=self.high_scores,
            )
        except Exception as exc:
            raise SimulatorRuntimeError(
                f"Failed to initialize simulation plugin '{self.simulation_name}': {exc}"
            ) from exc

        self._render_adapter: Callable[[Any], Any] | None = None
        try:
            adapter_module = importlib.import_module(
                f"simulations.{self.simulation_name}.renderer_adapter"
            )
        except ModuleNotFoundError:
            LOGGER.debug("Plugin '%s' has no renderer adapter", self.simulation_name)
        else:
            self._render_adapter = getattr(adapter_module, "build_render_state", None)

        self._started = False
        self._closed = False

    @property
    def started(self) -> bool:
        return self._started

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self) -> None:
        """Reset the plugin once; ``auto_start`` also dismisses the title."""
        if self._started:
            return
        self.sim.reset()
        if self.auto_start:
            self.sim.handle_input("auto_start")
        self._started = True
        LOGGER.info(
            "Session '%s' started: plugin '%s', seed %d, tick %.3fs",
            self.session_name,
            self.simulation_name,
            self.seed,
            self.tick_seconds,
        )
        self.event_bus.publish("simulation_start", {"session_name": self.session_name, "seed": self.seed})
        self._emit_render_state()

    def build_render_state(self) -> Any:
        if self._render_adapter is None:
            return self.sim.get_render_state()
        return self._render_adapter(self)

    def _emit_render_state(self) -> None:
        self.event_bus.publish("render_state", self.build_render_state())

    def _step(self, dt: float) -> dict[str, float]:
        self.step_index += 1
        self.sim.step(dt)
        metric = self.sim.get_metrics()
        if self.step_index % self._snapshot_interval == 0:
            self._emit_render_state()
        return metric

    def run(self, steps: int = 10) -> list[dict[str, float]]:
        """Run plugin for a fixed number of steps and collect metrics."""
        metrics: list[dict[str, float]] = []
        try:
            self.start()
            for _ in range(steps):
                metrics.append(self._step(self.tick_seconds))
        except Exception as exc:
            raise SimulatorRuntimeError(
                f"Simulation plugin '{self.simulation_name}' crashed during run: {exc}"
            ) from exc
        finally:
            self.close()
        return metrics

    def run_for(self, seconds: float) -> int:
        """Advance by wall-clock ``seconds``; return the number of fixed steps run.

        A plugin crash closes the simulator before the wrapped error propagates.
        """
        if self._closed:
            return 0
        try:
            self.start()
            return self.scheduler.advance(seconds, self._step)
        except Exception as exc:
            self.close()
            raise SimulatorRuntimeError(
                f"Simulation plugin '{self.simulation_name}' crashed during run: {exc}"
            ) from exc

    def handle_input(self, action: str = "dismiss") -> None:
        if self._closed:
            return
        self.start()
        self.sim.handle_input(action)
        self._emit_render_state()

    def close(self) -> None:
        """Dispose the plugin and release the store when owned."""
        if self._closed:
            return
        self._closed = True
        try:
            self.sim.close()
        except Exception as exc:
            raise SimulatorRuntimeError(
                f"Simulation plugin '{self.simulation_name}' failed during close: {exc}"
            ) from exc
        finally:
            if self._owns_store:
                self.high_scores.close()
            self.event_bus.publish(
                "simulation_end",
                {"session_name": self.session_name, "step_index": self.step_index},
            )
