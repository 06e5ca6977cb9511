"""Bounded arena with static rectangular obstacles."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, Iterable

from simulations.idle_chase.geometry import Point, circle_intersects_rect
from simulations.idle_chase.settings import ArenaConfig

LOGGER = logging.getLogger(__name__)

OBSTACLE_COLORS = ("#D97706", "#B45309", "#92400E", "#F59E0B")


@dataclass(frozen=True)
class Obstacle:
    """Axis-aligned rectangle, immutable once generated for a session."""

    x: float
    y: float
    width: float
    height: float
    color: str = OBSTACLE_COLORS[0]

    def contains(self, point: Point, margin: float = 0.0) -> bool:
        """Inclusive containment test against the rectangle grown by ``margin``."""
        return (
            self.x - margin <= point.x <= self.x + self.width + margin
            and self.y - margin <= point.y <= self.y + self.height + margin
        )

    def overlaps(self, other: "Obstacle", margin: float = 0.0) -> bool:
        return (
            self.x - margin < other.x + other.width
            and other.x < self.x + self.width + margin
            and self.y - margin < other.y + other.height
            and other.y < self.y + self.height + margin
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "x": float(self.x),
            "y": float(self.y),
            "width": float(self.width),
            "height": float(self.height),
            "color": self.color,
        }


class Arena:
    """Read-mostly world geometry shared by every subsystem.

    ``is_inside_obstacle`` is the single "is this spot blocked" predicate;
    callers pick the margin (agents use a small one, path checks a larger
    one).
    """

    def __init__(self, config: ArenaConfig, obstacles: Iterable[Obstacle] = ()) -> None:
        self.config = config
        self.obstacles: tuple[Obstacle, ...] = tuple(obstacles)

    @property
    def bounds_min(self) -> float:
        return self.config.bounds_min

    @property
    def bounds_max(self) -> float:
        return self.config.bounds_max

    @property
    def center(self) -> Point:
        half = self.config.arena_size / 2.0
        return Point(half, half)

    def safe_zones(self) -> list[Point]:
        """Reserved circles kept free of obstacles: centre and corner anchors."""
        size = self.config.arena_size
        inset = size * 0.15
        return [
            self.center,
            Point(inset, inset),
            Point(size - inset, inset),
            Point(size - inset, size - inset),
            Point(inset, size - inset),
        ]

    def is_inside_obstacle(self, point: Point, margin: float = 0.0) -> bool:
        return any(obstacle.contains(point, margin) for obstacle in self.obstacles)

    def is_in_bounds(self, point: Point) -> bool:
        low, high = self.bounds_min, self.bounds_max
        return low <= point.x <= high and low <= point.y <= high

    def is_walkable(self, point: Point, margin: float | None = None) -> bool:
        if margin is None:
            margin = self.config.agent_margin
        return self.is_in_bounds(point) and not self.is_inside_obstacle(point, margin)

    def clamp(self, point: Point) -> Point:
        return point.clamped(self.bounds_min, self.bounds_max)

    def find_valid_position(self, rng: random.Random, margin: float | None = None) -> Point:
        """Random spawn point outside every obstacle (grown by ``margin``).

        Falls back to the configured default point once the attempt budget is
        spent; never raises.
        """
        if margin is None:
            margin = self.config.spawn_margin
        low = self.config.spawn_inset
        high = self.config.arena_size - self.config.spawn_inset
        for _ in range(max(1, int(self.config.spawn_attempts))):
            candidate = Point(rng.uniform(low, high), rng.uniform(low, high))
            if not self.is_inside_obstacle(candidate, margin):
                return candidate
        fallback = Point(*self.config.spawn_fallback)
        LOGGER.debug("Spawn attempts exhausted, using fallback %s", fallback)
        return fallback

    def to_list(self) -> list[dict[str, Any]]:
        return [obstacle.to_dict() for obstacle in self.obstacles]


def generate_obstacles(config: ArenaConfig, rng: random.Random) -> list[Obstacle]:
    """Place a random number of non-overlapping bars around the safe zones.

    Each obstacle gets ``obstacle_attempts`` placements; one that never fits
    is dropped, so the result may be shorter than the requested count.
    """
    low_count = max(0, int(config.obstacle_count_min))
    high_count = max(low_count, int(config.obstacle_count_max))
    requested = rng.randint(low_count, high_count)
    safe_zones = Arena(config).safe_zones()
    low = config.bounds_min
    high = config.bounds_max

    placed: list[Obstacle] = []
    for index in range(requested):
        color = OBSTACLE_COLORS[index % len(OBSTACLE_COLORS)]
        for _ in range(max(1, int(config.obstacle_attempts))):
            long_side = rng.uniform(config.obstacle_long_min, config.obstacle_long_max)
            short_side = rng.uniform(config.obstacle_short_min, config.obstacle_short_max)
            if rng.random() < 0.5:
                width, height = long_side, short_side
            else:
                width, height = short_side, long_side
            if high - width <= low or high - height <= low:
                continue
            candidate = Obstacle(
                x=rng.uniform(low, high - width),
                y=rng.uniform(low, high - height),
                width=width,
                height=height,
                color=color,
            )
            if any(candidate.overlaps(existing, config.obstacle_gap) for existing in placed):
                continue
            if any(
                circle_intersects_rect(zone, config.safe_zone_radius, candidate.x, candidate.y, width, height)
                for zone in safe_zones
            ):
                continue
            placed.append(candidate)
            break
        else:
            LOGGER.debug("Dropped obstacle %d after %d attempts", index, config.obstacle_attempts)

    return placed
