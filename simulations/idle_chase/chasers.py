"""Personality-driven chaser mode machine layered on the pathfinder."""

from __future__ import annotations

import random
from typing import Sequence

from simulations.idle_chase.agents import AgentView, Chaser, ChaserMode, Personality
from simulations.idle_chase.arena import Arena
from simulations.idle_chase.geometry import Point, blend, random_heading
from simulations.idle_chase.pathfinding import Pathfinder
from simulations.idle_chase.settings import ChaserConfig

# Order of the configured weight triples.
_WEIGHTED_MODES = (ChaserMode.CHASE, ChaserMode.AMBUSH, ChaserMode.RANDOM)


class ChaserBrain:
    """Moves every chaser once per step.

    Chasers only read the seeker snapshot taken at the start of the step and
    only write their own state.
    """

    def __init__(
        self,
        arena: Arena,
        pathfinder: Pathfinder,
        config: ChaserConfig,
        rng: random.Random,
        arrival_radius: float = 2.0,
    ) -> None:
        self.arena = arena
        self.pathfinder = pathfinder
        self.config = config
        self.rng = rng
        self.arrival_radius = arrival_radius

    def update(self, chasers: Sequence[Chaser], seeker: AgentView, dt: float) -> None:
        for chaser in chasers:
            self._advance_mode(chaser)
            desired = self._desired_heading(chaser, seeker)
            if desired is not None:
                chaser.direction = blend(chaser.direction, desired, self.config.chaser_turn_blend)
            self._move(chaser, dt)

    def speed_for(self, chaser: Chaser) -> float:
        if chaser.scared:
            return float(self.config.chaser_scared_speed)
        speeds = {
            Personality.AGGRESSIVE: self.config.chaser_speed_aggressive,
            Personality.SMART: self.config.chaser_speed_smart,
            Personality.RANDOM: self.config.chaser_speed_random,
            Personality.AMBUSHER: self.config.chaser_speed_ambusher,
        }
        return float(speeds[chaser.personality])

    def pick_mode(self, chaser: Chaser) -> tuple[ChaserMode, int]:
        """Next mode and its duration in steps once ``mode_timer`` expires."""
        if chaser.scared:
            return ChaserMode.FLEE, int(self.config.flee_ticks)
        weights = {
            Personality.AGGRESSIVE: self.config.mode_weights_aggressive,
            Personality.SMART: self.config.mode_weights_smart,
            Personality.RANDOM: self.config.mode_weights_random,
            Personality.AMBUSHER: self.config.mode_weights_ambusher,
        }[chaser.personality]
        mode = self.rng.choices(_WEIGHTED_MODES, weights=weights, k=1)[0]
        low, high = {
            ChaserMode.CHASE: self.config.chase_ticks,
            ChaserMode.AMBUSH: self.config.ambush_ticks,
            ChaserMode.RANDOM: self.config.random_ticks,
        }[mode]
        return mode, self.rng.randint(low, high)

    def predict_ambush_point(self, seeker: AgentView) -> Point:
        heading = seeker.direction.normalized()
        ahead = seeker.position + heading.scaled(self.config.ambush_lookahead)
        return self.arena.clamp(ahead)

    def flee_point(self, chaser: Chaser, seeker: AgentView) -> Point:
        """Reflect the seeker through the chaser: the spot directly away."""
        mirrored = chaser.position.scaled(2.0) - seeker.position
        return self.arena.clamp(mirrored)

    def _advance_mode(self, chaser: Chaser) -> None:
        chaser.mode_timer -= 1
        if chaser.mode_timer > 0:
            return
        chaser.mode, chaser.mode_timer = self.pick_mode(chaser)

    def _desired_heading(self, chaser: Chaser, seeker: AgentView) -> Point | None:
        distance = chaser.position.distance_to(seeker.position)
        mode = ChaserMode.FLEE if chaser.scared else chaser.mode

        if mode is ChaserMode.CHASE:
            if 0.0 < distance < self.config.chase_max_distance:
                return self._heading_along_path(chaser.position, seeker.position, ())
            return None

        if mode is ChaserMode.AMBUSH:
            return self._heading_along_path(chaser.position, self.predict_ambush_point(seeker), ())

        if mode is ChaserMode.FLEE:
            if distance < self.config.flee_danger_radius:
                goal = self.flee_point(chaser, seeker)
                return self._heading_along_path(chaser.position, goal, (seeker.position,))
            return None

        if self.rng.random() < self.config.random_turn_probability:
            return random_heading(self.rng)
        return None

    def _heading_along_path(self, start: Point, goal: Point, avoid: tuple[Point, ...]) -> Point | None:
        path = self.pathfinder.find_path(start, goal, avoid)
        for waypoint in path:
            if waypoint.distance_to(start) > self.arrival_radius:
                return (waypoint - start).normalized()
        return None

    def _move(self, chaser: Chaser, dt: float) -> None:
        jitter = 1.0 + self.rng.uniform(0.0, self.config.speed_jitter)
        distance = self.speed_for(chaser) * jitter * dt
        candidate = chaser.position + chaser.direction.normalized().scaled(distance)
        if self.arena.is_walkable(candidate):
            chaser.position = candidate
            return
        # Stall this step; turn so the next step tries a different heading.
        chaser.direction = random_heading(self.rng)
