"""Tests for chaser mode selection/movement and seeker steering."""

from __future__ import annotations

import random

import pytest

from simulations.idle_chase.agents import (
    AgentView,
    CandidateKind,
    Chaser,
    ChaserMode,
    Personality,
    Seeker,
    StuckDetector,
    Target,
)
from simulations.idle_chase.arena import Arena, Obstacle
from simulations.idle_chase.chasers import ChaserBrain
from simulations.idle_chase.geometry import Point
from simulations.idle_chase.pathfinding import Pathfinder
from simulations.idle_chase.seeker import SeekerBrain
from simulations.idle_chase.settings import IdleChaseConfig


def _config(**params) -> IdleChaseConfig:
    return IdleChaseConfig.from_params({"chaser_count": 4, "path_cache_bypass": 0.0, **params})


def _chaser_brain(config: IdleChaseConfig, obstacles=()) -> ChaserBrain:
    arena = Arena(config.arena, obstacles)
    pathfinder = Pathfinder(arena, config.pathfinder, random.Random(2))
    return ChaserBrain(arena, pathfinder, config.chasers, random.Random(3))


def _seeker_brain(config: IdleChaseConfig, obstacles=()) -> SeekerBrain:
    arena = Arena(config.arena, obstacles)
    pathfinder = Pathfinder(arena, config.pathfinder, random.Random(2))
    return SeekerBrain(arena, pathfinder, config.seeker, random.Random(4))


def _chaser(position: Point, personality: Personality = Personality.AGGRESSIVE, **kwargs) -> Chaser:
    return Chaser(
        chaser_id=1,
        position=position,
        direction=Point(1.0, 0.0),
        color="#FF69B4",
        personality=personality,
        **kwargs,
    )


def test_scared_chaser_always_picks_flee() -> None:
    brain = _chaser_brain(_config())
    chaser = _chaser(Point(50.0, 50.0), Personality.AMBUSHER, scared=True)

    for _ in range(20):
        assert brain.pick_mode(chaser) == (ChaserMode.FLEE, 120)


def test_personality_weights_drive_mode_choice() -> None:
    brain = _chaser_brain(_config(mode_weights_aggressive=[1.0, 0.0, 0.0], chase_ticks=[30, 40]))
    chaser = _chaser(Point(50.0, 50.0))

    for _ in range(20):
        mode, duration = brain.pick_mode(chaser)
        assert mode is ChaserMode.CHASE
        assert 30 <= duration <= 40


def test_ambush_point_is_extrapolated_and_clamped() -> None:
    brain = _chaser_brain(_config())
    seeker = AgentView(0, Point(90.0, 50.0), Point(1.0, 0.0))

    assert brain.predict_ambush_point(seeker) == Point(95.0, 50.0)
    centre = AgentView(0, Point(50.0, 50.0), Point(0.0, -2.0))
    assert brain.predict_ambush_point(centre) == Point(50.0, 30.0)


def test_flee_point_mirrors_seeker_through_chaser() -> None:
    brain = _chaser_brain(_config())
    seeker = AgentView(0, Point(50.0, 50.0), Point(1.0, 0.0))

    assert brain.flee_point(_chaser(Point(60.0, 55.0)), seeker) == Point(70.0, 60.0)
    assert brain.flee_point(_chaser(Point(90.0, 50.0)), seeker) == Point(95.0, 50.0)


def test_scared_chasers_move_slower() -> None:
    brain = _chaser_brain(_config())
    normal = _chaser(Point(50.0, 50.0))
    scared = _chaser(Point(50.0, 50.0), scared=True)

    assert brain.speed_for(scared) < brain.speed_for(normal)
    assert brain.speed_for(normal) == pytest.approx(14.0)


def test_chasing_chaser_closes_distance() -> None:
    brain = _chaser_brain(_config())
    chaser = _chaser(Point(20.0, 50.0), mode=ChaserMode.CHASE, mode_timer=100)
    seeker = AgentView(0, Point(60.0, 50.0), Point(1.0, 0.0))
    before = chaser.position.distance_to(seeker.position)

    for _ in range(10):
        brain.update([chaser], seeker, 0.05)

    assert chaser.position.distance_to(seeker.position) < before
    assert chaser.mode_timer == 90


def test_blocked_move_stalls_instead_of_sliding() -> None:
    config = _config(chaser_turn_blend=0.0)
    brain = _chaser_brain(config, [Obstacle(51.0, 40.0, 10.0, 20.0)])
    chaser = _chaser(Point(49.5, 50.0), mode=ChaserMode.RANDOM, mode_timer=100)
    seeker = AgentView(0, Point(10.0, 10.0), Point(1.0, 0.0))

    brain.update([chaser], seeker, 0.05)

    assert chaser.position == Point(49.5, 50.0)
    assert chaser.direction != Point(1.0, 0.0)


def test_seeker_prefers_weighted_special_targets() -> None:
    brain = _seeker_brain(_config())
    seeker = Seeker(position=Point(50.0, 50.0))
    targets = [
        Target(1, Point(60.0, 50.0), "cake"),
        Target(2, Point(70.0, 50.0), "star", is_special=True),
    ]

    ranked = brain.candidates(seeker, targets, [], power_active=False)

    assert [candidate.ref_id for candidate in ranked] == [2, 1]


def test_scared_chasers_become_candidates_only_in_power_mode() -> None:
    brain = _seeker_brain(_config())
    seeker = Seeker(position=Point(50.0, 50.0))
    targets = [Target(1, Point(60.0, 50.0), "cake")]
    chasers = [AgentView(7, Point(55.0, 50.0), Point(1.0, 0.0), scared=True)]

    assert len(brain.candidates(seeker, targets, chasers, power_active=False)) == 1
    ranked = brain.candidates(seeker, targets, chasers, power_active=True)
    assert ranked[0].kind is CandidateKind.CHASER
    assert ranked[0].ref_id == 7


def test_danger_points_are_nearby_non_scared_chasers() -> None:
    brain = _seeker_brain(_config())
    seeker = Seeker(position=Point(50.0, 50.0))
    chasers = [
        AgentView(1, Point(60.0, 50.0), Point(1.0, 0.0)),
        AgentView(2, Point(55.0, 50.0), Point(1.0, 0.0), scared=True),
        AgentView(3, Point(90.0, 90.0), Point(1.0, 0.0)),
    ]

    assert brain.danger_points(seeker, chasers) == [Point(60.0, 50.0)]


def test_seeker_movement_rejects_only_the_blocked_axis() -> None:
    brain = _seeker_brain(_config(), [Obstacle(42.0, 0.0, 10.0, 100.0)])
    seeker = Seeker(position=Point(40.0, 50.0), direction=Point(1.0, 1.0).normalized())
    seeker.current_path = [Point(80.0, 50.0)]

    brain.move(seeker, 1.5)

    assert seeker.position.x == pytest.approx(40.0)
    assert seeker.position.y > 50.0
    assert seeker.current_path == []


def test_seeker_stays_in_bounds_without_clearing_path() -> None:
    brain = _seeker_brain(_config())
    seeker = Seeker(position=Point(95.0, 50.0), direction=Point(1.0, 0.0))
    seeker.current_path = [Point(95.0, 90.0)]

    brain.move(seeker, 1.5)

    assert seeker.position == Point(95.0, 50.0)
    assert seeker.current_path == [Point(95.0, 90.0)]


def test_seeker_repels_from_nearest_danger_without_a_path() -> None:
    brain = _seeker_brain(_config())
    seeker = Seeker(position=Point(50.0, 50.0))
    chasers = [AgentView(1, Point(45.0, 50.0), Point(1.0, 0.0))]

    brain.update(seeker, [], chasers, power_active=False, dt=0.05)

    assert seeker.direction == Point(1.0, 0.0)
    assert seeker.position.x > 50.0


def test_seeker_follows_path_to_target() -> None:
    brain = _seeker_brain(_config())
    seeker = Seeker(position=Point(20.0, 20.0))
    target = Target(1, Point(40.0, 20.0), "pie")

    for _ in range(10):
        brain.update(seeker, [target], [], power_active=False, dt=0.05)

    assert seeker.position.distance_to(target.position) < 10.0


def test_stuck_detector_counts_consecutive_stalls() -> None:
    detector = StuckDetector(epsilon=0.1, threshold=3)
    for _ in range(4):
        detector.update(Point(10.0, 10.0))
    assert not detector.is_stuck

    detector.update(Point(10.05, 10.0))
    assert detector.is_stuck

    detector.update(Point(12.0, 10.0))
    assert detector.counter == 0
