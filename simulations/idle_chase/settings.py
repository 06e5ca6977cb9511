"""Typed runtime parameters for the idle_chase plugin, grouped per subsystem."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Mapping

from simulations.idle_chase.config_schema import DEFAULTS


def _pair(key: str) -> tuple[float, float]:
    low, high = DEFAULTS[key]
    return (float(low), float(high))


def _triple(key: str) -> tuple[float, float, float]:
    a, b, c = DEFAULTS[key]
    return (float(a), float(b), float(c))


def _ticks(key: str) -> tuple[int, int]:
    low, high = DEFAULTS[key]
    return (int(low), int(high))


@dataclass(frozen=True)
class ArenaConfig:
    """Bounds, spawn policy and obstacle generation parameters."""

    arena_size: float = DEFAULTS["arena_size"]
    arena_margin: float = DEFAULTS["arena_margin"]
    spawn_inset: float = DEFAULTS["spawn_inset"]
    spawn_attempts: int = DEFAULTS["spawn_attempts"]
    spawn_margin: float = DEFAULTS["spawn_margin"]
    spawn_fallback: tuple[float, float] = field(default_factory=lambda: _pair("spawn_fallback"))
    agent_margin: float = DEFAULTS["agent_margin"]
    obstacle_count_min: int = DEFAULTS["obstacle_count_min"]
    obstacle_count_max: int = DEFAULTS["obstacle_count_max"]
    obstacle_attempts: int = DEFAULTS["obstacle_attempts"]
    obstacle_gap: float = DEFAULTS["obstacle_gap"]
    obstacle_long_min: float = DEFAULTS["obstacle_long_min"]
    obstacle_long_max: float = DEFAULTS["obstacle_long_max"]
    obstacle_short_min: float = DEFAULTS["obstacle_short_min"]
    obstacle_short_max: float = DEFAULTS["obstacle_short_max"]
    safe_zone_radius: float = DEFAULTS["safe_zone_radius"]

    @property
    def bounds_min(self) -> float:
        return float(self.arena_margin)

    @property
    def bounds_max(self) -> float:
        return float(self.arena_size - self.arena_margin)


@dataclass(frozen=True)
class PathfinderConfig:
    """Grid A* parameters."""

    path_grid_size: float = DEFAULTS["path_grid_size"]
    path_max_iterations: int = DEFAULTS["path_max_iterations"]
    path_cache_size: int = DEFAULTS["path_cache_size"]
    path_cache_bypass: float = DEFAULTS["path_cache_bypass"]
    path_avoid_radius: float = DEFAULTS["path_avoid_radius"]
    path_obstacle_margin: float = DEFAULTS["path_obstacle_margin"]
    path_goal_factor: float = DEFAULTS["path_goal_factor"]
    path_smoothing_window: int = DEFAULTS["path_smoothing_window"]


@dataclass(frozen=True)
class ChaserConfig:
    """Chaser speeds, mode weights and timers.

    Mode weight triples are ordered ``(chase, ambush, random)``.
    """

    chaser_count: int = DEFAULTS["chaser_count"]
    chaser_speed_aggressive: float = DEFAULTS["chaser_speed_aggressive"]
    chaser_speed_smart: float = DEFAULTS["chaser_speed_smart"]
    chaser_speed_random: float = DEFAULTS["chaser_speed_random"]
    chaser_speed_ambusher: float = DEFAULTS["chaser_speed_ambusher"]
    chaser_scared_speed: float = DEFAULTS["chaser_scared_speed"]
    speed_jitter: float = DEFAULTS["speed_jitter"]
    mode_weights_aggressive: tuple[float, float, float] = field(default_factory=lambda: _triple("mode_weights_aggressive"))
    mode_weights_smart: tuple[float, float, float] = field(default_factory=lambda: _triple("mode_weights_smart"))
    mode_weights_random: tuple[float, float, float] = field(default_factory=lambda: _triple("mode_weights_random"))
    mode_weights_ambusher: tuple[float, float, float] = field(default_factory=lambda: _triple("mode_weights_ambusher"))
    chase_ticks: tuple[int, int] = field(default_factory=lambda: _ticks("chase_ticks"))
    ambush_ticks: tuple[int, int] = field(default_factory=lambda: _ticks("ambush_ticks"))
    random_ticks: tuple[int, int] = field(default_factory=lambda: _ticks("random_ticks"))
    flee_ticks: int = DEFAULTS["flee_ticks"]
    chase_max_distance: float = DEFAULTS["chase_max_distance"]
    ambush_lookahead: float = DEFAULTS["ambush_lookahead"]
    flee_danger_radius: float = DEFAULTS["flee_danger_radius"]
    random_turn_probability: float = DEFAULTS["random_turn_probability"]
    chaser_turn_blend: float = DEFAULTS["chaser_turn_blend"]
    chaser_respawn_delay: float = DEFAULTS["chaser_respawn_delay"]


@dataclass(frozen=True)
class SeekerConfig:
    """Seeker speeds, targeting weights and stuck detection."""

    seeker_speed: float = DEFAULTS["seeker_speed"]
    seeker_power_speed: float = DEFAULTS["seeker_power_speed"]
    seeker_warning_radius: float = DEFAULTS["seeker_warning_radius"]
    seeker_pursuit_range: float = DEFAULTS["seeker_pursuit_range"]
    special_target_weight: float = DEFAULTS["special_target_weight"]
    chaser_target_weight: float = DEFAULTS["chaser_target_weight"]
    seeker_replan_probability: float = DEFAULTS["seeker_replan_probability"]
    waypoint_arrival_radius: float = DEFAULTS["waypoint_arrival_radius"]
    stuck_epsilon: float = DEFAULTS["stuck_epsilon"]
    stuck_threshold: int = DEFAULTS["stuck_threshold"]


@dataclass(frozen=True)
class ScoringConfig:
    """Targets, pickups, power mode and milestone parameters."""

    initial_targets: int = DEFAULTS["initial_targets"]
    target_cap: int = DEFAULTS["target_cap"]
    target_spawn_interval: float = DEFAULTS["target_spawn_interval"]
    special_target_chance: float = DEFAULTS["special_target_chance"]
    target_pickup_radius: float = DEFAULTS["target_pickup_radius"]
    chaser_pickup_radius: float = DEFAULTS["chaser_pickup_radius"]
    normal_target_points: int = DEFAULTS["normal_target_points"]
    special_target_points: int = DEFAULTS["special_target_points"]
    chaser_points: int = DEFAULTS["chaser_points"]
    power_mode_duration: int = DEFAULTS["power_mode_duration"]
    milestone_interval: int = DEFAULTS["milestone_interval"]
    message_duration: float = DEFAULTS["message_duration"]
    passive_points: int = DEFAULTS["passive_points"]
    passive_interval: float = DEFAULTS["passive_interval"]


@dataclass(frozen=True)
class EffectsConfig:
    """Particle and animation parameters (presentation only)."""

    particle_gravity: float = DEFAULTS["particle_gravity"]
    particle_decay: float = DEFAULTS["particle_decay"]
    particle_speed_min: float = DEFAULTS["particle_speed_min"]
    particle_speed_max: float = DEFAULTS["particle_speed_max"]
    eating_duration: float = DEFAULTS["eating_duration"]
    mouth_interval: float = DEFAULTS["mouth_interval"]
    mouth_interval_eating: float = DEFAULTS["mouth_interval_eating"]


@dataclass(frozen=True)
class IdleChaseConfig:
    """All runtime parameters for one idle_chase session."""

    arena: ArenaConfig = field(default_factory=ArenaConfig)
    pathfinder: PathfinderConfig = field(default_factory=PathfinderConfig)
    chasers: ChaserConfig = field(default_factory=ChaserConfig)
    seeker: SeekerConfig = field(default_factory=SeekerConfig)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    effects: EffectsConfig = field(default_factory=EffectsConfig)

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "IdleChaseConfig":
        """Build grouped config from flat validated plugin params."""
        merged = dict(DEFAULTS)
        merged.update(params)
        groups = {}
        for group in fields(cls):
            group_type = group.default_factory  # type: ignore[misc]
            kwargs = {}
            for item in fields(group_type):
                if item.name in merged:
                    kwargs[item.name] = _normalize(item.name, merged[item.name])
            groups[group.name] = group_type(**kwargs)
        return cls(**groups)


def _normalize(key: str, value: Any) -> Any:
    """Freeze list params into tuples of the expected element type."""
    if not isinstance(value, (list, tuple)):
        return value
    expected = len(DEFAULTS[key])
    if len(value) != expected:
        raise ValueError(f"Parameter '{key}' expects {expected} values, got {len(value)}.")
    if key.endswith("_ticks"):
        low, high = int(value[0]), int(value[1])
        if low > high:
            raise ValueError(f"Parameter '{key}' must be [low, high].")
        return (low, high)
    return tuple(float(item) for item in value)
