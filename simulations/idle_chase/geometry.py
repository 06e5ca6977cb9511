"""Point/vector math for the normalized [0, 100] x [0, 100] arena."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass


@dataclass(frozen=True)
class Point:
    """Position, direction or waypoint in arena space."""

    x: float
    y: float

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y)

    def scaled(self, factor: float) -> "Point":
        return Point(self.x * factor, self.y * factor)

    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def distance_to(self, other: "Point") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def normalized(self) -> "Point":
        """Unit vector in the same direction; the zero vector stays zero."""
        length = self.length()
        if length <= 1e-9:
            return Point(0.0, 0.0)
        return Point(self.x / length, self.y / length)

    def clamped(self, low: float, high: float) -> "Point":
        return Point(min(high, max(low, self.x)), min(high, max(low, self.y)))

    def cell(self, size: float) -> tuple[int, int]:
        """Grid cell containing this point for a grid of ``size`` units."""
        return (int(round(self.x / size)), int(round(self.y / size)))

    def to_list(self) -> list[float]:
        return [float(self.x), float(self.y)]


def blend(current: Point, desired: Point, weight: float) -> Point:
    """Move ``current`` heading toward ``desired`` by ``weight`` in [0, 1]."""
    weight = min(1.0, max(0.0, weight))
    mixed = current.scaled(1.0 - weight) + desired.scaled(weight)
    if mixed.length() <= 1e-9:
        return desired.normalized()
    return mixed.normalized()


def random_heading(rng: random.Random) -> Point:
    angle = rng.uniform(0.0, 2.0 * math.pi)
    return Point(math.cos(angle), math.sin(angle))


def circle_intersects_rect(
    center: Point, radius: float, x: float, y: float, width: float, height: float
) -> bool:
    """True when the circle touches the axis-aligned rectangle."""
    nearest_x = min(max(center.x, x), x + width)
    nearest_y = min(max(center.y, y), y + height)
    return math.hypot(center.x - nearest_x, center.y - nearest_y) < radius
