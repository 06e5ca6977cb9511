"""Seeker target selection, path following and danger avoidance."""

from __future__ import annotations

import random
from typing import Sequence

from simulations.idle_chase.agents import AgentView, CandidateKind, PursuitCandidate, Seeker, Target
from simulations.idle_chase.arena import Arena
from simulations.idle_chase.geometry import Point, random_heading
from simulations.idle_chase.pathfinding import Pathfinder
from simulations.idle_chase.settings import SeekerConfig


class SeekerBrain:
    """One movement update per step for the seeker.

    Order: stuck detection, candidate ranking, optional replanning, path
    following (or repulsion when there is no path), then per-axis movement.
    """

    def __init__(
        self,
        arena: Arena,
        pathfinder: Pathfinder,
        config: SeekerConfig,
        rng: random.Random,
    ) -> None:
        self.arena = arena
        self.pathfinder = pathfinder
        self.config = config
        self.rng = rng

    def candidates(
        self, seeker: Seeker, targets: Sequence[Target], chasers: Sequence[AgentView], power_active: bool
    ) -> list[PursuitCandidate]:
        """Ranked pursuit candidates, best (lowest weighted distance) first."""
        ranked = [
            PursuitCandidate(
                kind=CandidateKind.TARGET,
                ref_id=target.target_id,
                position=target.position,
                priority_weight=self.config.special_target_weight if target.is_special else 1.0,
            )
            for target in targets
        ]
        if power_active:
            ranked.extend(
                PursuitCandidate(
                    kind=CandidateKind.CHASER,
                    ref_id=chaser.agent_id,
                    position=chaser.position,
                    priority_weight=self.config.chaser_target_weight,
                )
                for chaser in chasers
                if chaser.scared
            )
        ranked.sort(key=lambda candidate: candidate.weighted_distance(seeker.position))
        return ranked

    def danger_points(self, seeker: Seeker, chasers: Sequence[AgentView]) -> list[Point]:
        return [
            chaser.position
            for chaser in chasers
            if not chaser.scared
            and chaser.position.distance_to(seeker.position) < self.config.seeker_warning_radius
        ]

    def update(
        self,
        seeker: Seeker,
        targets: Sequence[Target],
        chasers: Sequence[AgentView],
        power_active: bool,
        dt: float,
    ) -> None:
        seeker.stuck.epsilon = self.config.stuck_epsilon
        seeker.stuck.threshold = self.config.stuck_threshold
        seeker.stuck.update(seeker.position)
        stuck = seeker.stuck.is_stuck

        dangers = self.danger_points(seeker, chasers)
        ranked = self.candidates(seeker, targets, chasers, power_active)
        goal = None
        if ranked and ranked[0].weighted_distance(seeker.position) < self.config.seeker_pursuit_range:
            goal = ranked[0]

        replan = (
            not seeker.current_path
            or stuck
            or self.rng.random() < self.config.seeker_replan_probability
        )
        if replan:
            if goal is not None:
                seeker.current_path = self.pathfinder.find_path(seeker.position, goal.position, dangers)
            else:
                seeker.current_path = []

        radius = self.config.waypoint_arrival_radius
        while seeker.current_path and seeker.current_path[0].distance_to(seeker.position) < radius:
            seeker.current_path.pop(0)

        if seeker.current_path:
            seeker.direction = (seeker.current_path[0] - seeker.position).normalized()
        elif dangers:
            nearest = min(dangers, key=seeker.position.distance_to)
            away = (seeker.position - nearest).normalized()
            seeker.direction = away if away.length() > 0 else random_heading(self.rng)
        elif stuck:
            seeker.direction = random_heading(self.rng)

        if stuck:
            seeker.stuck.reset()

        speed = self.config.seeker_power_speed if power_active else self.config.seeker_speed
        self.move(seeker, speed * dt)

    def move(self, seeker: Seeker, distance: float) -> None:
        """Apply movement per axis; a blocked axis is skipped for this step."""
        step = seeker.direction.scaled(distance)
        hit_obstacle = False
        position = seeker.position

        moved_x = Point(position.x + step.x, position.y)
        if self.arena.is_in_bounds(moved_x):
            if self.arena.is_inside_obstacle(moved_x, self.arena.config.agent_margin):
                hit_obstacle = True
            else:
                position = moved_x

        moved_y = Point(position.x, position.y + step.y)
        if self.arena.is_in_bounds(moved_y):
            if self.arena.is_inside_obstacle(moved_y, self.arena.config.agent_margin):
                hit_obstacle = True
            else:
                position = moved_y

        seeker.position = position
        if hit_obstacle:
            seeker.current_path = []
