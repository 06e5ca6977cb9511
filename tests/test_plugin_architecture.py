"""Tests for plugin discovery and the plugin-driven simulator runtime."""

from __future__ import annotations

import json

import pytest

from core.config_loader import ConfigValidationError
from core.event_bus import EventBus
from core.plugin_registry import (
    SimulationPluginNotFoundError,
    discover_simulations,
    get_simulation_class,
)
from core.render_state import RenderState
from core.simulator import Simulator, SimulatorRuntimeError
from data.high_score_store import MemoryStore
from simulations.idle_chase.sim import IdleChaseSimulation


def _valid_config_yaml(auto_start: bool = True, snapshot_interval: int = 2) -> str:
    return (
        "simulation: idle_chase\n"
        "params:\n"
        "  chaser_count: 4\n"
        "  initial_targets: 6\n"
        "session:\n"
        "  random_seed: 21\n"
        "  tick_seconds: 0.05\n"
        f"  auto_start: {'true' if auto_start else 'false'}\n"
        "logging:\n"
        "  log_level: warning\n"
        f"  snapshot_interval: {snapshot_interval}\n"
        "  session_name: plugin_test\n"
    )


def _write(tmp_path, text: str):
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_plugin_discovery_finds_idle_chase() -> None:
    discovered = discover_simulations(refresh=True)

    assert discovered["idle_chase"] is IdleChaseSimulation
    assert get_simulation_class("idle_chase") is IdleChaseSimulation


def test_unknown_plugin_lists_available_names() -> None:
    with pytest.raises(SimulationPluginNotFoundError, match="idle_chase"):
        get_simulation_class("pacman")


def test_simulator_runs_for_10_steps_and_emits_snapshots(tmp_path) -> None:
    bus = EventBus()
    frames: list = []
    lifecycle: list[str] = []
    bus.subscribe("render_state", frames.append)
    bus.subscribe("simulation_start", lambda payload: lifecycle.append("start"))
    bus.subscribe("simulation_end", lambda payload: lifecycle.append("end"))

    simulator = Simulator(_write(tmp_path, _valid_config_yaml()), event_bus=bus)
    metrics = simulator.run(steps=10)

    assert len(metrics) == 10
    assert metrics[-1]["tick"] == 10.0
    assert len(frames) == 6
    assert all(isinstance(frame, RenderState) for frame in frames)
    assert lifecycle == ["start", "end"]
    assert simulator.closed


def test_same_seed_reproduces_run(tmp_path) -> None:
    config_path = _write(tmp_path, _valid_config_yaml())

    first = Simulator(config_path).run(steps=40)
    second = Simulator(config_path).run(steps=40)

    assert first == second


def test_plugin_crash_is_wrapped_and_session_closed(tmp_path, monkeypatch) -> None:
    simulator = Simulator(_write(tmp_path, _valid_config_yaml()))

    def explode(dt: float) -> None:
        raise ZeroDivisionError("bad tick")

    monkeypatch.setattr(simulator.sim.session, "tick", explode)

    with pytest.raises(SimulatorRuntimeError, match="crashed during run"):
        simulator.run(steps=3)
    assert simulator.closed
    assert simulator.sim.session.disposed


def test_run_for_crash_closes_session(tmp_path, monkeypatch) -> None:
    bus = EventBus()
    ends: list = []
    bus.subscribe("simulation_end", ends.append)
    simulator = Simulator(_write(tmp_path, _valid_config_yaml()), event_bus=bus)

    def explode(dt: float) -> None:
        raise ZeroDivisionError("bad tick")

    monkeypatch.setattr(simulator.sim.session, "tick", explode)

    with pytest.raises(SimulatorRuntimeError, match="crashed during run"):
        simulator.run_for(0.2)
    assert simulator.closed
    assert simulator.sim.session.disposed
    assert len(ends) == 1
    assert simulator.run_for(0.2) == 0


def test_run_for_uses_fixed_timestep(tmp_path) -> None:
    simulator = Simulator(_write(tmp_path, _valid_config_yaml()))

    assert simulator.run_for(0.12) == 2
    assert simulator.run_for(0.03) == 1
    assert simulator.step_index == 3
    simulator.close()
    assert simulator.run_for(1.0) == 0


def test_title_screen_waits_for_input_then_exit(tmp_path) -> None:
    bus = EventBus()
    exits: list = []
    bus.subscribe("exit", exits.append)
    simulator = Simulator(_write(tmp_path, _valid_config_yaml(auto_start=False)), event_bus=bus)

    simulator.run_for(0.5)
    state = simulator.sim.session.state
    assert state.phase.value == "title"
    assert state.tick_index == 0

    simulator.handle_input("tap")
    simulator.run_for(0.1)
    assert state.phase.value == "running"
    assert state.tick_index == 2

    simulator.handle_input("tap")
    assert state.exit_requested
    assert len(exits) == 1
    simulator.close()


def test_injected_store_carries_high_score_between_sessions(tmp_path) -> None:
    store = MemoryStore({"idle_high_score": 5000})
    simulator = Simulator(_write(tmp_path, _valid_config_yaml()), store=store)
    simulator.run(steps=5)

    assert simulator.sim.session.state.high_score == 5000
    assert store.get("idle_high_score") == 5000


def test_json_storage_is_written_on_new_high(tmp_path) -> None:
    score_path = tmp_path / "scores.json"
    text = _valid_config_yaml() + f"storage:\n  backend: json\n  path: {score_path.as_posix()}\n"
    simulator = Simulator(_write(tmp_path, text))
    simulator.run(steps=60)

    high_score = simulator.sim.session.state.high_score
    assert high_score > 0
    assert json.loads(score_path.read_text(encoding="utf-8"))["idle_high_score"] == high_score


def test_invalid_config_triggers_schema_error(tmp_path) -> None:
    text = _valid_config_yaml().replace("chaser_count: 4", "chaser_count: wrong_type")

    with pytest.raises(ConfigValidationError, match="expected int"):
        Simulator(_write(tmp_path, text))
