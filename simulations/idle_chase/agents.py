"""Agent and collectible models for the idle_chase plugin."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

from simulations.idle_chase.geometry import Point


class Personality(str, enum.Enum):
    AGGRESSIVE = "aggressive"
    SMART = "smart"
    RANDOM = "random"
    AMBUSHER = "ambusher"


class ChaserMode(str, enum.Enum):
    RANDOM = "random"
    CHASE = "chase"
    FLEE = "flee"
    AMBUSH = "ambush"


class CandidateKind(str, enum.Enum):
    TARGET = "target"
    CHASER = "chaser"


NORMAL_TARGET_KINDS = ("cake", "cupcake", "shortcake", "cookie", "donut", "pie")
SPECIAL_TARGET_KIND = "star"

CHASER_COLORS = ("#FF69B4", "#00CED1", "#FF6347", "#98FB98")
CHASER_PERSONALITIES = (
    Personality.AGGRESSIVE,
    Personality.SMART,
    Personality.RANDOM,
    Personality.AMBUSHER,
)


@dataclass
class Target:
    """Collectible; ``is_special`` ones trigger power mode."""

    target_id: int
    position: Point
    kind: str
    is_special: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": int(self.target_id),
            "position": self.position.to_list(),
            "kind": self.kind,
            "is_special": bool(self.is_special),
        }


@dataclass
class Chaser:
    """Adversarial agent driven by a personality-weighted mode machine."""

    chaser_id: int
    position: Point
    direction: Point
    color: str
    personality: Personality
    scared: bool = False
    mode: ChaserMode = ChaserMode.RANDOM
    mode_timer: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": int(self.chaser_id),
            "position": self.position.to_list(),
            "direction": self.direction.to_list(),
            "color": self.color,
            "personality": self.personality.value,
            "scared": bool(self.scared),
            "mode": self.mode.value,
            "mode_timer": int(self.mode_timer),
        }


@dataclass
class StuckDetector:
    """Counts consecutive updates in which a position did not advance."""

    epsilon: float = 0.1
    threshold: int = 10
    counter: int = 0
    last_position: Point | None = None

    def update(self, position: Point) -> int:
        if self.last_position is not None and (
            abs(position.x - self.last_position.x) < self.epsilon
            and abs(position.y - self.last_position.y) < self.epsilon
        ):
            self.counter += 1
        else:
            self.counter = 0
        self.last_position = position
        return self.counter

    @property
    def is_stuck(self) -> bool:
        return self.counter > self.threshold

    def reset(self) -> None:
        self.counter = 0


@dataclass
class Seeker:
    """The single target-collecting agent."""

    position: Point
    direction: Point = field(default_factory=lambda: Point(1.0, 0.0))
    current_path: list[Point] = field(default_factory=list)
    stuck: StuckDetector = field(default_factory=StuckDetector)

    @property
    def stuck_counter(self) -> int:
        return self.stuck.counter

    def to_dict(self) -> dict[str, Any]:
        return {
            "position": self.position.to_list(),
            "direction": self.direction.to_list(),
            "path": [point.to_list() for point in self.current_path],
            "stuck_counter": int(self.stuck.counter),
        }


@dataclass(frozen=True)
class PursuitCandidate:
    """Something the seeker may head for: a target or a fleeing chaser."""

    kind: CandidateKind
    ref_id: int
    position: Point
    priority_weight: float = 1.0

    def weighted_distance(self, origin: Point) -> float:
        return origin.distance_to(self.position) * self.priority_weight


@dataclass(frozen=True)
class AgentView:
    """Read-only position/heading snapshot handed to other agents' updates."""

    agent_id: int
    position: Point
    direction: Point
    scared: bool = False


@dataclass
class PendingRespawn:
    """A chaser eaten in power mode, waiting to come back."""

    personality: Personality
    color: str
    remaining: float
