"""Immutable render-state contracts for streaming and visualization."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class AgentState:
    """Simulation-agnostic agent snapshot."""

    id: str
    kind: str
    position: tuple[float, float]
    direction: tuple[float, float] | None = None
    color: str | None = None
    mode: str | None = None
    scared: bool = False


@dataclass(frozen=True)
class EnvironmentState:
    """Simulation-agnostic environment snapshot."""

    bounds: tuple[float, float]
    size: float
    obstacles: list[Any] = field(default_factory=list)
    resources: list[Any] = field(default_factory=list)
    effects: list[Any] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class HudState:
    """Score and overlay data drawn on top of the arena."""

    score: int
    high_score: int
    power_active: bool = False
    power_time_remaining: int = 0
    phase: str = "running"
    message: dict[str, Any] | None = None


@dataclass(frozen=True)
class RenderState:
    """Top-level immutable render frame emitted by simulator."""

    step_index: int
    agents: list[AgentState]
    environment: EnvironmentState
    hud: HudState
    metrics: dict[str, float]
    timestamp: float
