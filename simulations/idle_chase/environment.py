"""Session state owner for the idle chase screen."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Sequence

from core.deterministic_rng import DeterministicRNG
from core.event_bus import EventBus
from data.high_score_store import HighScoreRepository
from simulations.idle_chase.agents import (
    CHASER_COLORS,
    CHASER_PERSONALITIES,
    NORMAL_TARGET_KINDS,
    SPECIAL_TARGET_KIND,
    AgentView,
    Chaser,
    ChaserMode,
    PendingRespawn,
    Personality,
    Seeker,
    StuckDetector,
    Target,
)
from simulations.idle_chase.arena import Arena, Obstacle, generate_obstacles
from simulations.idle_chase.chasers import ChaserBrain
from simulations.idle_chase.geometry import Point, random_heading
from simulations.idle_chase.particles import (
    CHASER_BURST,
    NORMAL_BURST,
    NORMAL_BURST_COLOR,
    SPECIAL_BURST,
    SPECIAL_BURST_COLOR,
    ParticleSystem,
)
from simulations.idle_chase.pathfinding import Pathfinder
from simulations.idle_chase.scoring import (
    CollisionResolver,
    MessageBoard,
    MilestoneTracker,
    PassiveScore,
    PowerMode,
    Scoreboard,
)
from simulations.idle_chase.seeker import SeekerBrain
from simulations.idle_chase.settings import IdleChaseConfig

LOGGER = logging.getLogger(__name__)

_EPSILON = 1e-9
SEEKER_ID = 0


class SessionPhase(str, enum.Enum):
    TITLE = "title"
    RUNNING = "running"


@dataclass
class SimulationState:
    """Everything one idle-screen session mutates, owned by one session."""

    arena: Arena
    seeker: Seeker
    scoreboard: Scoreboard
    power: PowerMode
    milestones: MilestoneTracker
    targets: list[Target] = field(default_factory=list)
    chasers: list[Chaser] = field(default_factory=list)
    pending_respawns: list[PendingRespawn] = field(default_factory=list)
    phase: SessionPhase = SessionPhase.TITLE
    tick_index: int = 0
    elapsed: float = 0.0
    exit_requested: bool = False
    eating_remaining: float = 0.0
    mouth_open: bool = True
    mouth_timer: float = 0.0
    spawn_timer: float = 0.0

    @property
    def score(self) -> int:
        return self.scoreboard.score

    @property
    def high_score(self) -> int:
        return self.scoreboard.high_score

    @property
    def power_mode_active(self) -> bool:
        return self.power.active

    @property
    def power_time_remaining(self) -> int:
        return self.power.time_remaining

    @property
    def obstacles(self) -> tuple[Obstacle, ...]:
        return self.arena.obstacles

    @property
    def eating(self) -> bool:
        return self.eating_remaining > 0


class IdleChaseSession:
    """Controller with an explicit ``start()`` / ``tick()`` / ``dispose()`` lifecycle.

    Each tick runs the subsystems in a fixed order: chasers, seeker,
    collisions, timers, particles. Chasers see the seeker as it was before
    the tick and the seeker sees the chasers as they were before the tick.
    """

    def __init__(
        self,
        config: IdleChaseConfig,
        rng: DeterministicRNG,
        high_scores: HighScoreRepository | None = None,
        event_bus: EventBus | None = None,
        auto_start: bool = False,
    ) -> None:
        self.config = config
        self.rng = rng
        self.high_scores = high_scores if high_scores is not None else HighScoreRepository()
        self.event_bus = event_bus
        self.auto_start = auto_start
        self.state: SimulationState | None = None
        self.pathfinder: Pathfinder | None = None
        self.chaser_brain: ChaserBrain | None = None
        self.seeker_brain: SeekerBrain | None = None
        self.collisions = CollisionResolver(config.scoring)
        self.particles = ParticleSystem(config.effects, rng.stream("particles"), config.arena.arena_size)
        self.messages = MessageBoard(rng.stream("messages"))
        self.passive = PassiveScore(config.scoring.passive_points, config.scoring.passive_interval)
        self._spawner_rng = rng.stream("spawner")
        self._next_target_id = 1
        self._next_chaser_id = 1
        self._announced_high = False
        self._disposed = False

    # lifecycle

    def start(self, obstacles: Sequence[Obstacle] | None = None) -> SimulationState:
        """Build a fresh session; ``obstacles`` overrides random generation."""
        if obstacles is None:
            obstacles = generate_obstacles(self.config.arena, self.rng.stream("arena"))
        arena = Arena(self.config.arena, obstacles)

        self.pathfinder = Pathfinder(arena, self.config.pathfinder, self.rng.stream("pathfinder"))
        self.chaser_brain = ChaserBrain(
            arena,
            self.pathfinder,
            self.config.chasers,
            self.rng.stream("chasers"),
            arrival_radius=self.config.seeker.waypoint_arrival_radius,
        )
        self.seeker_brain = SeekerBrain(arena, self.pathfinder, self.config.seeker, self.rng.stream("seeker"))
        self.particles.clear()
        self.messages.clear()
        self.passive = PassiveScore(self.config.scoring.passive_points, self.config.scoring.passive_interval)
        self._next_target_id = 1
        self._next_chaser_id = 1
        self._announced_high = False
        self._disposed = False

        seeker_config = self.config.seeker
        self.state = SimulationState(
            arena=arena,
            seeker=Seeker(
                position=arena.center,
                stuck=StuckDetector(epsilon=seeker_config.stuck_epsilon, threshold=seeker_config.stuck_threshold),
            ),
            scoreboard=Scoreboard(high_score=self.high_scores.load(), on_new_high=self._on_new_high),
            power=PowerMode(),
            milestones=MilestoneTracker(interval=int(self.config.scoring.milestone_interval)),
            phase=SessionPhase.RUNNING if self.auto_start else SessionPhase.TITLE,
        )

        for _ in range(max(0, int(self.config.scoring.initial_targets))):
            self.spawn_target()

        anchors = arena.safe_zones()[1:]
        for index in range(max(0, int(self.config.chasers.chaser_count))):
            slot = index % len(CHASER_PERSONALITIES)
            self.state.chasers.append(
                self._make_chaser(anchors[index % len(anchors)], CHASER_PERSONALITIES[slot], CHASER_COLORS[slot])
            )

        LOGGER.info(
            "Session started: %d obstacles, %d targets, %d chasers, high score %d",
            len(arena.obstacles),
            len(self.state.targets),
            len(self.state.chasers),
            self.state.high_score,
        )
        return self.state

    def tick(self, dt: float) -> None:
        """Advance one fixed step; a no-op before start, on the title, or after dispose."""
        state = self.state
        if state is None or self._disposed or state.phase is not SessionPhase.RUNNING:
            return
        assert self.chaser_brain is not None and self.seeker_brain is not None

        state.tick_index += 1
        state.elapsed += dt

        seeker_view = AgentView(SEEKER_ID, state.seeker.position, state.seeker.direction)
        chaser_views = [
            AgentView(chaser.chaser_id, chaser.position, chaser.direction, chaser.scared)
            for chaser in state.chasers
        ]

        self.chaser_brain.update(state.chasers, seeker_view, dt)
        self.seeker_brain.update(state.seeker, state.targets, chaser_views, state.power.active, dt)
        self._resolve_collisions()
        self._update_timers(dt)
        self.particles.update(dt)

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self.particles.clear()
        self.messages.clear()
        if self.pathfinder is not None:
            self.pathfinder.cache.clear()
        state = self.state
        if state is None:
            return
        state.pending_respawns.clear()
        LOGGER.info(
            "Session disposed after %d ticks: score %d, high score %d",
            state.tick_index,
            state.score,
            state.high_score,
        )

    @property
    def disposed(self) -> bool:
        return self._disposed

    def handle_input(self, action: str = "dismiss") -> None:
        """Title: any trigger starts the run. Running: any trigger requests exit."""
        state = self.state
        if state is None or self._disposed:
            return
        if state.phase is SessionPhase.TITLE:
            state.phase = SessionPhase.RUNNING
            LOGGER.info("Title dismissed by '%s'", action)
            self._publish("phase", {"phase": state.phase.value})
            return
        state.exit_requested = True
        self._publish("exit", {"action": action, "score": state.score, "high_score": state.high_score})

    # targets and chasers

    def spawn_target(self) -> Target:
        """Add a target at a random valid position."""
        assert self.state is not None
        position = self.state.arena.find_valid_position(self._spawner_rng)
        special = self._spawner_rng.random() < self.config.scoring.special_target_chance
        return self.place_target(position, special)

    def place_target(self, position: Point, special: bool = False) -> Target:
        assert self.state is not None
        kind = SPECIAL_TARGET_KIND if special else self._spawner_rng.choice(NORMAL_TARGET_KINDS)
        target = Target(target_id=self._next_target_id, position=position, kind=kind, is_special=special)
        self._next_target_id += 1
        self.state.targets.append(target)
        return target

    def _make_chaser(self, position: Point, personality: Personality, color: str) -> Chaser:
        chaser = Chaser(
            chaser_id=self._next_chaser_id,
            position=position,
            direction=random_heading(self._spawner_rng),
            color=color,
            personality=personality,
        )
        self._next_chaser_id += 1
        return chaser

    # power mode

    def activate_power_mode(self) -> None:
        """Start (or restart) power mode and scare every active chaser."""
        assert self.state is not None
        duration = int(self.config.scoring.power_mode_duration)
        self.state.power.activate(duration)
        for chaser in self.state.chasers:
            self._scare(chaser)
        LOGGER.info("Power mode on for %d s", duration)
        self._publish("power_mode", {"active": True, "time_remaining": duration})

    def _scare(self, chaser: Chaser) -> None:
        chaser.scared = True
        chaser.mode = ChaserMode.FLEE
        chaser.mode_timer = int(self.config.chasers.flee_ticks)

    def _expire_power_mode(self) -> None:
        assert self.state is not None and self.chaser_brain is not None
        low, high = self.config.chasers.random_ticks
        for chaser in self.state.chasers:
            chaser.scared = False
            chaser.mode = ChaserMode.RANDOM
            chaser.mode_timer = self.chaser_brain.rng.randint(low, high)
        LOGGER.info("Power mode expired")
        self._publish("power_mode", {"active": False, "time_remaining": 0})

    # per-tick subsystems

    def _resolve_collisions(self) -> None:
        state = self.state
        assert state is not None
        position = state.seeker.position

        for target in self.collisions.target_hits(position, state.targets):
            state.targets.remove(target)
            self._award(self.collisions.target_points(target))
            if target.is_special:
                self.particles.burst(target.position, SPECIAL_BURST, SPECIAL_BURST_COLOR)
                self.activate_power_mode()
            else:
                self.particles.burst(target.position, NORMAL_BURST, NORMAL_BURST_COLOR)
            state.eating_remaining = self.config.effects.eating_duration

        for chaser in self.collisions.chaser_hits(position, state.chasers, state.power.active):
            state.chasers.remove(chaser)
            self._award(int(self.config.scoring.chaser_points))
            self.particles.burst(chaser.position, CHASER_BURST, chaser.color)
            state.pending_respawns.append(
                PendingRespawn(
                    personality=chaser.personality,
                    color=chaser.color,
                    remaining=float(self.config.chasers.chaser_respawn_delay),
                )
            )
            state.eating_remaining = self.config.effects.eating_duration
            LOGGER.info("Chaser %d (%s) eaten", chaser.chaser_id, chaser.personality.value)
            self._publish(
                "chaser_eaten",
                {"id": chaser.chaser_id, "personality": chaser.personality.value, "score": state.score},
            )

    def _award(self, points: int) -> None:
        state = self.state
        assert state is not None
        state.scoreboard.add(points)
        milestone = state.milestones.check(state.score)
        if milestone is None:
            return
        message = self.messages.show_random(self.config.scoring.message_duration, milestone)
        LOGGER.info("Milestone %d: %s", milestone, message.text)
        self._publish("message", message.to_dict())

    def _on_new_high(self, high_score: int, previous: int) -> None:
        self.high_scores.save(high_score)
        if not self._announced_high:
            self._announced_high = True
            LOGGER.info("New high score %d (previous %d)", high_score, previous)
        self._publish("high_score", {"high_score": high_score, "previous": previous})

    def _update_timers(self, dt: float) -> None:
        state = self.state
        assert state is not None

        if state.power.update(dt):
            self._expire_power_mode()

        self._update_respawns(dt)

        interval = self.config.scoring.target_spawn_interval
        if interval > 0:
            state.spawn_timer += dt
            while state.spawn_timer + _EPSILON >= interval:
                state.spawn_timer -= interval
                if len(state.targets) < self.config.scoring.target_cap:
                    self.spawn_target()

        earned = self.passive.update(dt)
        if earned:
            self._award(earned)

        self.messages.update(dt)

        if state.eating_remaining > 0:
            state.eating_remaining = max(0.0, state.eating_remaining - dt)
        effects = self.config.effects
        mouth_interval = effects.mouth_interval_eating if state.eating else effects.mouth_interval
        state.mouth_timer += dt
        if state.mouth_timer + _EPSILON >= mouth_interval:
            state.mouth_timer = 0.0
            state.mouth_open = not state.mouth_open

    def _update_respawns(self, dt: float) -> None:
        state = self.state
        assert state is not None
        waiting: list[PendingRespawn] = []
        for pending in state.pending_respawns:
            pending.remaining -= dt
            if pending.remaining > _EPSILON:
                waiting.append(pending)
                continue
            position = state.arena.find_valid_position(self._spawner_rng, self.config.arena.spawn_margin)
            chaser = self._make_chaser(position, pending.personality, pending.color)
            if state.power.active:
                self._scare(chaser)
            state.chasers.append(chaser)
            LOGGER.debug("Chaser %d (%s) respawned at %s", chaser.chaser_id, chaser.personality.value, position)
        state.pending_respawns = waiting

    def _publish(self, event_type: str, payload: dict[str, Any]) -> None:
        if self.event_bus is not None:
            self.event_bus.publish(event_type, payload)

    # snapshots

    def get_render_state(self) -> dict[str, Any]:
        """Return full JSON-serializable session state."""
        state = self.state
        if state is None:
            return {"simulation": "idle_chase", "phase": "stopped"}
        message = self.messages.current
        return {
            "simulation": "idle_chase",
            "tick": int(state.tick_index),
            "elapsed": float(state.elapsed),
            "phase": state.phase.value,
            "exit_requested": bool(state.exit_requested),
            "arena": {
                "size": float(self.config.arena.arena_size),
                "bounds": [float(state.arena.bounds_min), float(state.arena.bounds_max)],
            },
            "obstacles": state.arena.to_list(),
            "targets": [target.to_dict() for target in state.targets],
            "chasers": [chaser.to_dict() for chaser in state.chasers],
            "seeker": {
                **state.seeker.to_dict(),
                "mouth_open": bool(state.mouth_open),
                "eating": bool(state.eating),
            },
            "particles": self.particles.to_list(),
            "score": int(state.score),
            "high_score": int(state.high_score),
            "power_mode": {
                "active": bool(state.power.active),
                "time_remaining": int(state.power.time_remaining),
            },
            "message": message.to_dict() if message is not None else None,
            "pending_respawns": len(state.pending_respawns),
        }

    def get_metrics(self) -> dict[str, float]:
        state = self.state
        if state is None:
            return {}
        cache = self.pathfinder.cache if self.pathfinder is not None else None
        return {
            "tick": float(state.tick_index),
            "score": float(state.score),
            "high_score": float(state.high_score),
            "power_mode_active": 1.0 if state.power.active else 0.0,
            "power_time_remaining": float(state.power.time_remaining),
            "targets": float(len(state.targets)),
            "chasers": float(len(state.chasers)),
            "pending_respawns": float(len(state.pending_respawns)),
            "particles": float(len(self.particles)),
            "path_searches": float(self.pathfinder.searches if self.pathfinder is not None else 0),
            "path_fallbacks": float(self.pathfinder.fallbacks if self.pathfinder is not None else 0),
            "path_cache_size": float(len(cache) if cache is not None else 0),
            "path_cache_hits": float(cache.hits if cache is not None else 0),
        }
