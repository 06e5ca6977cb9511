"""Render adapter for idle_chase plugin."""

from __future__ import annotations

import time
from typing import Any

from core.render_state import AgentState, EnvironmentState, HudState, RenderState


def build_render_state(simulator: object) -> RenderState:
    """Build generic RenderState while preserving plugin-specific metadata."""
    sim = getattr(simulator, "sim")
    raw = sim.get_render_state()
    metrics = sim.get_metrics()

    agents: list[AgentState] = []
    seeker = raw.get("seeker")
    if isinstance(seeker, dict):
        agents.append(
            AgentState(
                id="seeker",
                kind="seeker",
                position=_pair(seeker.get("position")),
                direction=_pair(seeker.get("direction")),
                color="#FFD700",
            )
        )
    for chaser in raw.get("chasers", []):
        agents.append(
            AgentState(
                id=f"chaser_{chaser['id']}",
                kind="chaser",
                position=_pair(chaser.get("position")),
                direction=_pair(chaser.get("direction")),
                color=str(chaser.get("color")),
                mode=str(chaser.get("mode")),
                scared=bool(chaser.get("scared", False)),
            )
        )

    arena = raw.get("arena", {})
    bounds = arena.get("bounds", [0.0, 100.0])
    env_state = EnvironmentState(
        bounds=(float(bounds[0]), float(bounds[1])),
        size=float(arena.get("size", 100.0)),
        obstacles=list(raw.get("obstacles", [])),
        resources=list(raw.get("targets", [])),
        effects=list(raw.get("particles", [])),
        metadata={
            "simulation": "idle_chase",
            "tick": raw.get("tick", 0),
            "mouth_open": bool(seeker.get("mouth_open", True)) if isinstance(seeker, dict) else True,
            "eating": bool(seeker.get("eating", False)) if isinstance(seeker, dict) else False,
            "path": list(seeker.get("path", [])) if isinstance(seeker, dict) else [],
            "exit_requested": bool(raw.get("exit_requested", False)),
        },
    )

    power = raw.get("power_mode", {})
    hud = HudState(
        score=int(raw.get("score", 0)),
        high_score=int(raw.get("high_score", 0)),
        power_active=bool(power.get("active", False)),
        power_time_remaining=int(power.get("time_remaining", 0)),
        phase=str(raw.get("phase", "running")),
        message=raw.get("message"),
    )

    return RenderState(
        step_index=int(getattr(simulator, "step_index", raw.get("tick", 0))),
        agents=agents,
        environment=env_state,
        hud=hud,
        metrics={k: float(v) for k, v in metrics.items() if _is_floatable(v)},
        timestamp=float(time.time()),
    )


def _pair(value: Any) -> tuple[float, float]:
    if isinstance(value, (list, tuple)) and len(value) >= 2:
        return (float(value[0]), float(value[1]))
    return (0.0, 0.0)


def _is_floatable(value: Any) -> bool:
    try:
        float(value)
    except (TypeError, ValueError):
        return False
    return True
