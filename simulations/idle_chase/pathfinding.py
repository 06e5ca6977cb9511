"""Grid-quantized A* with bounded iterations, danger avoidance and caching."""

from __future__ import annotations

import heapq
import logging
import random
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from simulations.idle_chase.arena import Arena
from simulations.idle_chase.geometry import Point
from simulations.idle_chase.settings import PathfinderConfig

LOGGER = logging.getLogger(__name__)

# Four cardinal moves plus diagonals pre-scaled to ~unit length.
DIRECTIONS: tuple[Point, ...] = (
    Point(1.0, 0.0),
    Point(-1.0, 0.0),
    Point(0.0, 1.0),
    Point(0.0, -1.0),
    Point(0.7, 0.7),
    Point(-0.7, 0.7),
    Point(0.7, -0.7),
    Point(-0.7, -0.7),
)

CacheKey = tuple[int, int, int, int]


@dataclass
class PathCache:
    """Bounded path cache keyed by rounded start/goal cells.

    Eviction drops the first key in insertion order once the size limit is
    exceeded. Re-storing an existing key keeps its original position.
    """

    max_size: int = 100
    _entries: dict[CacheKey, tuple[Point, ...]] = field(default_factory=dict)
    hits: int = 0
    misses: int = 0

    def get(self, key: CacheKey) -> tuple[Point, ...] | None:
        path = self._entries.get(key)
        if path is None:
            self.misses += 1
        else:
            self.hits += 1
        return path

    def put(self, key: CacheKey, path: Sequence[Point]) -> None:
        self._entries[key] = tuple(path)
        while len(self._entries) > max(0, self.max_size):
            oldest = next(iter(self._entries))
            del self._entries[oldest]

    def keys(self) -> list[CacheKey]:
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries


@dataclass(order=True)
class _OpenNode:
    f_score: float
    order: int
    position: Point = field(compare=False)
    g_score: float = field(compare=False)
    parent: "_OpenNode | None" = field(compare=False, default=None)


class Pathfinder:
    """A* over an implicit grid of ``path_grid_size`` cells.

    Every call searches from scratch. When the iteration budget runs out the
    degraded two-point path ``[start, goal]`` is returned; it may cross
    obstacles and is never cached.
    """

    def __init__(
        self,
        arena: Arena,
        config: PathfinderConfig,
        rng: random.Random,
        cache: PathCache | None = None,
    ) -> None:
        self.arena = arena
        self.config = config
        self.rng = rng
        self.cache = cache if cache is not None else PathCache(max_size=config.path_cache_size)
        self.searches = 0
        self.fallbacks = 0
        self.last_was_fallback = False

    def cache_key(self, start: Point, goal: Point) -> CacheKey:
        size = self.config.path_grid_size
        start_cell = start.cell(size)
        goal_cell = goal.cell(size)
        return (start_cell[0], start_cell[1], goal_cell[0], goal_cell[1])

    def find_path(self, start: Point, goal: Point, avoid_points: Iterable[Point] = ()) -> list[Point]:
        """Return waypoints from ``start`` to ``goal`` (both included)."""
        key = self.cache_key(start, goal)
        cached = self.cache.get(key)
        if cached is not None and self.rng.random() >= self.config.path_cache_bypass:
            self.last_was_fallback = False
            return list(cached)

        path = self._search(start, goal, tuple(avoid_points))
        if path is None:
            self.fallbacks += 1
            self.last_was_fallback = True
            LOGGER.debug("A* budget exhausted from %s to %s, using direct path", start, goal)
            return [start, goal]

        self.last_was_fallback = False
        smoothed = self.smooth(path)
        self.cache.put(key, smoothed)
        return smoothed

    def _search(self, start: Point, goal: Point, avoid_points: tuple[Point, ...]) -> list[Point] | None:
        self.searches += 1
        grid = self.config.path_grid_size
        goal_radius = self.config.path_goal_factor * grid
        closed_cell = grid / 2.0

        counter = 0
        open_heap: list[_OpenNode] = [
            _OpenNode(f_score=start.distance_to(goal), order=counter, position=start, g_score=0.0)
        ]
        closed: set[tuple[int, int]] = set()
        expansions = 0

        while open_heap and expansions < self.config.path_max_iterations:
            current = heapq.heappop(open_heap)
            cell = current.position.cell(closed_cell)
            if cell in closed:
                continue
            closed.add(cell)
            expansions += 1

            if current.position.distance_to(goal) < goal_radius:
                return self._reconstruct(current, goal)

            for direction in DIRECTIONS:
                step = direction.scaled(grid)
                neighbor = current.position + step
                if neighbor.cell(closed_cell) in closed:
                    continue
                if not self._is_open(neighbor, avoid_points):
                    continue
                counter += 1
                g_score = current.g_score + step.length()
                heapq.heappush(
                    open_heap,
                    _OpenNode(
                        f_score=g_score + neighbor.distance_to(goal),
                        order=counter,
                        position=neighbor,
                        g_score=g_score,
                        parent=current,
                    ),
                )

        return None

    def _is_open(self, point: Point, avoid_points: tuple[Point, ...]) -> bool:
        if not self.arena.is_in_bounds(point):
            return False
        if self.arena.is_inside_obstacle(point, self.config.path_obstacle_margin):
            return False
        radius = self.config.path_avoid_radius
        return all(point.distance_to(danger) >= radius for danger in avoid_points)

    @staticmethod
    def _reconstruct(node: _OpenNode, goal: Point) -> list[Point]:
        reversed_path: list[Point] = []
        current: _OpenNode | None = node
        while current is not None:
            reversed_path.append(current.position)
            current = current.parent
        path = reversed_path[::-1]
        if path[-1] != goal:
            path.append(goal)
        return path

    def smooth(self, path: Sequence[Point]) -> list[Point]:
        """Drop intermediate waypoints, skipping up to the smoothing window.

        A shortcut is refused only when its midpoint lies inside an obstacle,
        so tight geometry can still be cut.
        """
        if len(path) <= 2:
            return list(path)
        window = max(0, int(self.config.path_smoothing_window))
        last = len(path) - 1
        result = [path[0]]
        index = 0
        while index < last:
            jump = min(index + window + 1, last)
            while jump > index + 1:
                midpoint = (path[index] + path[jump]).scaled(0.5)
                if not self.arena.is_inside_obstacle(midpoint, 0.0):
                    break
                jump -= 1
            result.append(path[jump])
            index = jump
        return result
