"""Short-lived feedback particles emitted on pickups."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Any

from simulations.idle_chase.geometry import Point
from simulations.idle_chase.settings import EffectsConfig

NORMAL_BURST = 6
SPECIAL_BURST = 12
CHASER_BURST = 10

NORMAL_BURST_COLOR = "#FFD700"
SPECIAL_BURST_COLOR = "#FF1493"


@dataclass
class Particle:
    x: float
    y: float
    vx: float
    vy: float
    color: str
    life: float = 1.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "position": [float(self.x), float(self.y)],
            "velocity": [float(self.vx), float(self.vy)],
            "color": self.color,
            "life": float(self.life),
        }


class ParticleSystem:
    """Radial bursts under gravity with linear life decay.

    Particles are presentation only; nothing else reads them.
    """

    def __init__(self, config: EffectsConfig, rng: random.Random, arena_size: float = 100.0) -> None:
        self.config = config
        self.rng = rng
        self.arena_size = float(arena_size)
        self.particles: list[Particle] = []

    def burst(self, position: Point, count: int, color: str) -> None:
        for index in range(max(0, int(count))):
            angle = (index / count) * 2.0 * math.pi
            speed = self.rng.uniform(self.config.particle_speed_min, self.config.particle_speed_max)
            self.particles.append(
                Particle(
                    x=position.x,
                    y=position.y,
                    vx=math.cos(angle) * speed,
                    vy=math.sin(angle) * speed,
                    color=color,
                )
            )

    def update(self, dt: float) -> None:
        alive: list[Particle] = []
        for particle in self.particles:
            particle.x += particle.vx * dt
            particle.y += particle.vy * dt
            particle.vy += self.config.particle_gravity * dt
            particle.life -= self.config.particle_decay * dt
            if particle.life <= 0:
                continue
            if not (0.0 < particle.x < self.arena_size and 0.0 < particle.y < self.arena_size):
                continue
            alive.append(particle)
        self.particles = alive

    def clear(self) -> None:
        self.particles = []

    def __len__(self) -> int:
        return len(self.particles)

    def to_list(self) -> list[dict[str, Any]]:
        return [particle.to_dict() for particle in self.particles]
