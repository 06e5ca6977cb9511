"""Score, high score, power mode, milestones and pickup tests."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any, Callable, Sequence

from simulations.idle_chase.agents import Chaser, Target
from simulations.idle_chase.geometry import Point
from simulations.idle_chase.settings import ScoringConfig

MILESTONE_MESSAGES = (
    "Welcome to Golden Munch!",
    "Fresh Bakes Daily",
    "Sweet Treats Await",
    "Discover New Flavors",
    "Handcrafted with Love",
    "Tap Anywhere to Start Ordering!",
)

# Float sums of fixed steps drift slightly below whole seconds.
_EPSILON = 1e-9

HighScoreCallback = Callable[[int, int], None]


@dataclass
class Scoreboard:
    """Current score and the best score ever observed.

    ``on_new_high(high_score, previous)`` fires on every increase of the high
    score, so persistence happens as soon as it changes.
    """

    score: int = 0
    high_score: int = 0
    on_new_high: HighScoreCallback | None = field(default=None, repr=False)

    def add(self, points: int) -> bool:
        """Add points; return True if the high score moved."""
        if points <= 0:
            return False
        self.score += int(points)
        if self.score <= self.high_score:
            return False
        previous = self.high_score
        self.high_score = self.score
        if self.on_new_high is not None:
            self.on_new_high(self.high_score, previous)
        return True


@dataclass
class PowerMode:
    """Whole-second countdown while chasers are vulnerable."""

    active: bool = False
    time_remaining: int = 0
    _second_timer: float = field(default=0.0, repr=False)

    def activate(self, duration: int) -> None:
        """Start (or restart) the countdown at ``duration`` seconds."""
        self.active = True
        self.time_remaining = max(0, int(duration))
        self._second_timer = 0.0

    def update(self, dt: float) -> bool:
        """Advance the countdown; return True on the step it expires."""
        if not self.active:
            return False
        self._second_timer += dt
        while self._second_timer + _EPSILON >= 1.0 and self.active:
            self._second_timer -= 1.0
            self.time_remaining -= 1
            if self.time_remaining <= 0:
                self.deactivate()
                return True
        return False

    def deactivate(self) -> None:
        self.active = False
        self.time_remaining = 0
        self._second_timer = 0.0


@dataclass
class MilestoneTracker:
    """Reports each multiple of ``interval`` the score crosses, once."""

    interval: int
    last_milestone: int = 0

    def check(self, score: int) -> int | None:
        if self.interval <= 0:
            return None
        reached = (int(score) // self.interval) * self.interval
        if reached <= self.last_milestone:
            return None
        self.last_milestone = reached
        return reached


@dataclass
class Message:
    text: str
    duration: float
    remaining: float
    milestone: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "duration": float(self.duration),
            "remaining": float(max(0.0, self.remaining)),
            "milestone": self.milestone,
        }


class MessageBoard:
    """Holds at most one transient on-screen message."""

    def __init__(self, rng: random.Random, pool: Sequence[str] = MILESTONE_MESSAGES) -> None:
        self.rng = rng
        self.pool = tuple(pool)
        self.current: Message | None = None

    def show_random(self, duration: float, milestone: int | None = None) -> Message:
        return self.show(self.rng.choice(self.pool), duration, milestone)

    def show(self, text: str, duration: float, milestone: int | None = None) -> Message:
        self.current = Message(text=text, duration=float(duration), remaining=float(duration), milestone=milestone)
        return self.current

    def update(self, dt: float) -> None:
        if self.current is None:
            return
        self.current.remaining -= dt
        if self.current.remaining <= _EPSILON:
            self.current = None

    def clear(self) -> None:
        self.current = None


@dataclass
class PassiveScore:
    """Trickle of points while the session runs."""

    points: int
    interval: float
    _timer: float = field(default=0.0, repr=False)

    def update(self, dt: float) -> int:
        if self.points <= 0 or self.interval <= 0:
            return 0
        self._timer += dt
        earned = 0
        while self._timer + _EPSILON >= self.interval:
            self._timer -= self.interval
            earned += self.points
        return earned


class CollisionResolver:
    """Proximity tests between the seeker and targets or chasers."""

    def __init__(self, config: ScoringConfig) -> None:
        self.config = config

    def target_hits(self, position: Point, targets: Sequence[Target]) -> list[Target]:
        radius = self.config.target_pickup_radius
        return [target for target in targets if position.distance_to(target.position) < radius]

    def chaser_hits(self, position: Point, chasers: Sequence[Chaser], power_active: bool) -> list[Chaser]:
        if not power_active:
            return []
        radius = self.config.chaser_pickup_radius
        return [
            chaser
            for chaser in chasers
            if chaser.scared and position.distance_to(chaser.position) < radius
        ]

    def target_points(self, target: Target) -> int:
        if target.is_special:
            return int(self.config.special_target_points)
        return int(self.config.normal_target_points)
