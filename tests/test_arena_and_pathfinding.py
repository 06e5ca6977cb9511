"""Tests for arena geometry, obstacle generation and the grid A* pathfinder."""

from __future__ import annotations

import random
from dataclasses import replace

import pytest

from simulations.idle_chase.arena import Arena, Obstacle, generate_obstacles
from simulations.idle_chase.geometry import Point, circle_intersects_rect
from simulations.idle_chase.pathfinding import PathCache, Pathfinder
from simulations.idle_chase.settings import ArenaConfig, PathfinderConfig


def _pathfinder(obstacles=(), **overrides) -> Pathfinder:
    config = replace(PathfinderConfig(), path_cache_bypass=0.0, **overrides)
    return Pathfinder(Arena(ArenaConfig(), obstacles), config, random.Random(5))


def test_obstacle_contains_is_inclusive_with_margin() -> None:
    obstacle = Obstacle(x=10.0, y=10.0, width=5.0, height=5.0)

    assert obstacle.contains(Point(15.0, 15.0))
    assert not obstacle.contains(Point(16.0, 12.0))
    assert obstacle.contains(Point(16.0, 12.0), margin=1.0)


@pytest.mark.parametrize("seed", [1, 2, 3, 4, 5, 6, 7, 8])
def test_generated_obstacles_do_not_overlap_or_touch_safe_zones(seed: int) -> None:
    config = ArenaConfig()
    obstacles = generate_obstacles(config, random.Random(seed))
    safe_zones = Arena(config).safe_zones()

    assert len(obstacles) <= config.obstacle_count_max
    for index, first in enumerate(obstacles):
        for second in obstacles[index + 1 :]:
            assert not first.overlaps(second, config.obstacle_gap)
        for zone in safe_zones:
            assert not circle_intersects_rect(
                zone, config.safe_zone_radius, first.x, first.y, first.width, first.height
            )


def test_generation_drops_obstacles_that_cannot_fit() -> None:
    crowded = ArenaConfig(obstacle_count_min=40, obstacle_count_max=40, obstacle_attempts=3)
    obstacles = generate_obstacles(crowded, random.Random(9))

    assert len(obstacles) < 40


def test_find_valid_position_avoids_obstacles() -> None:
    arena = Arena(ArenaConfig(), [Obstacle(20.0, 20.0, 30.0, 30.0)])
    rng = random.Random(4)

    for _ in range(50):
        position = arena.find_valid_position(rng)
        assert not arena.is_inside_obstacle(position, arena.config.spawn_margin)
        assert 10.0 <= position.x <= 90.0 and 10.0 <= position.y <= 90.0


def test_find_valid_position_falls_back_when_budget_exhausted() -> None:
    config = ArenaConfig(spawn_attempts=5)
    arena = Arena(config, [Obstacle(0.0, 0.0, 100.0, 100.0)])

    assert arena.find_valid_position(random.Random(1)) == Point(50.0, 50.0)


def test_find_path_is_deterministic_without_cache_bypass() -> None:
    obstacles = [Obstacle(40.0, 30.0, 5.0, 40.0)]
    start, goal = Point(20.0, 50.0), Point(80.0, 50.0)

    first = _pathfinder(obstacles, path_max_iterations=400).find_path(start, goal)
    second = _pathfinder(obstacles, path_max_iterations=400).find_path(start, goal)

    assert first == second
    assert first[0] == start
    assert first[-1] == goal


def test_repeated_calls_hit_the_cache() -> None:
    finder = _pathfinder(path_max_iterations=200)
    start, goal = Point(20.0, 20.0), Point(60.0, 60.0)

    first = finder.find_path(start, goal)
    second = finder.find_path(start, goal)

    assert first == second
    assert finder.searches == 1
    assert finder.cache.hits == 1


def test_cache_bypass_forces_recompute() -> None:
    finder = _pathfinder(path_max_iterations=200)
    finder.config = replace(finder.config, path_cache_bypass=1.0)
    start, goal = Point(20.0, 20.0), Point(60.0, 60.0)

    finder.find_path(start, goal)
    finder.find_path(start, goal)

    assert finder.searches == 2


def test_walled_off_goal_returns_direct_fallback_and_is_not_cached() -> None:
    wall = Obstacle(45.0, 0.0, 5.0, 100.0)
    finder = _pathfinder([wall], path_max_iterations=20)
    start, goal = Point(20.0, 50.0), Point(80.0, 50.0)

    path = finder.find_path(start, goal)

    assert path == [start, goal]
    assert finder.last_was_fallback
    assert finder.fallbacks == 1
    assert finder.cache_key(start, goal) not in finder.cache


def test_search_waypoints_stay_clear_of_obstacles_and_avoid_points() -> None:
    obstacles = [Obstacle(40.0, 20.0, 5.0, 25.0)]
    finder = _pathfinder(obstacles, path_max_iterations=2000)
    danger = Point(50.0, 60.0)

    path = finder.find_path(Point(20.0, 50.0), Point(80.0, 50.0), [danger])

    assert not finder.last_was_fallback
    for waypoint in path[1:-1]:
        assert not finder.arena.is_inside_obstacle(waypoint, finder.config.path_obstacle_margin)
        assert waypoint.distance_to(danger) >= finder.config.path_avoid_radius


def test_smoothing_skips_up_to_window_and_respects_midpoints() -> None:
    points = [Point(float(x), 50.0) for x in range(10, 80, 10)]

    open_finder = _pathfinder()
    assert open_finder.smooth(points) == [points[0], points[4], points[6]]

    blocked_finder = _pathfinder([Obstacle(28.0, 45.0, 4.0, 10.0)])
    assert blocked_finder.smooth(points) == [points[0], points[3], points[6]]


def test_path_cache_evicts_in_insertion_order() -> None:
    cache = PathCache(max_size=2)
    cache.put((0, 0, 1, 1), [Point(0.0, 0.0)])
    cache.put((0, 0, 2, 2), [Point(0.0, 0.0)])
    cache.put((0, 0, 1, 1), [Point(1.0, 1.0)])
    cache.put((0, 0, 3, 3), [Point(0.0, 0.0)])

    assert cache.keys() == [(0, 0, 2, 2), (0, 0, 3, 3)]
    assert len(cache) == 2
