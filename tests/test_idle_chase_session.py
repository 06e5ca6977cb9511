"""Integration tests for the idle_chase session lifecycle and tick order."""

from __future__ import annotations

import pytest

from core.deterministic_rng import DeterministicRNG
from core.event_bus import EventBus
from data.high_score_store import HighScoreRepository, MemoryStore
from simulations.idle_chase.agents import ChaserMode, Personality
from simulations.idle_chase.environment import IdleChaseSession, SessionPhase
from simulations.idle_chase.geometry import Point
from simulations.idle_chase.settings import IdleChaseConfig

DT = 0.05


def _session(
    seed: int = 3,
    auto_start: bool = True,
    event_bus: EventBus | None = None,
    high_scores: HighScoreRepository | None = None,
    **params,
) -> IdleChaseSession:
    quiet = {"initial_targets": 0, "target_spawn_interval": 1000.0, "passive_points": 0}
    quiet.update(params)
    return IdleChaseSession(
        IdleChaseConfig.from_params(quiet),
        DeterministicRNG(seed),
        high_scores=high_scores,
        event_bus=event_bus,
        auto_start=auto_start,
    )


def _record(bus: EventBus, event_type: str) -> list:
    seen: list = []
    bus.subscribe(event_type, seen.append)
    return seen


def test_start_builds_session_from_safe_zones() -> None:
    session = _session(initial_targets=12)
    state = session.start()

    assert state.seeker.position == Point(50.0, 50.0)
    assert len(state.targets) == 12
    assert [c.personality for c in state.chasers] == [
        Personality.AGGRESSIVE,
        Personality.SMART,
        Personality.RANDOM,
        Personality.AMBUSHER,
    ]
    assert [c.position for c in state.chasers] == state.arena.safe_zones()[1:]
    for target in state.targets:
        assert not state.arena.is_inside_obstacle(target.position, 5.0)


def test_tick_is_noop_on_title_and_after_dispose() -> None:
    session = _session(auto_start=False)
    state = session.start()

    session.tick(DT)
    assert state.tick_index == 0

    session.handle_input("tap")
    session.tick(DT)
    assert state.tick_index == 1

    session.dispose()
    session.tick(DT)
    assert state.tick_index == 1
    assert session.disposed


def test_title_then_exit_inputs_publish_events() -> None:
    bus = EventBus()
    phases = _record(bus, "phase")
    exits = _record(bus, "exit")
    session = _session(auto_start=False, event_bus=bus)
    state = session.start()

    session.handle_input("key")
    assert state.phase is SessionPhase.RUNNING
    assert phases == [{"phase": "running"}]
    assert not state.exit_requested

    session.handle_input("tap")
    assert state.exit_requested
    assert exits[0]["action"] == "tap"


def test_single_pickup_removes_one_target_and_scores() -> None:
    session = _session(chaser_count=0)
    state = session.start(obstacles=[])
    session.place_target(state.seeker.position)
    far = session.place_target(Point(90.0, 90.0))

    session.tick(DT)

    assert state.score == 10
    assert state.targets == [far]
    assert state.eating
    assert len(session.particles) == 6


def test_special_target_triggers_power_mode_and_scares_chasers() -> None:
    bus = EventBus()
    power_events = _record(bus, "power_mode")
    session = _session(
        event_bus=bus,
        chaser_speed_aggressive=1.0,
        chaser_speed_smart=1.0,
        chaser_speed_random=1.0,
        chaser_speed_ambusher=1.0,
    )
    state = session.start(obstacles=[])
    state.seeker.position = Point(10.0, 10.0)
    for chaser, spot in zip(state.chasers, [(90.0, 10.0), (90.0, 90.0), (10.0, 90.0), (50.0, 90.0)]):
        chaser.position = Point(*spot)
    session.place_target(Point(50.0, 50.0), special=True)

    for _ in range(400):
        session.tick(DT)
        if state.power_mode_active:
            break

    assert state.power_mode_active
    assert state.score == 50
    assert state.high_score == 50
    assert state.power_time_remaining == 10
    assert all(chaser.scared and chaser.mode is ChaserMode.FLEE for chaser in state.chasers)
    assert power_events == [{"active": True, "time_remaining": 10}]


def test_power_mode_expires_after_duration() -> None:
    bus = EventBus()
    power_events = _record(bus, "power_mode")
    session = _session(event_bus=bus, chaser_pickup_radius=0.0)
    state = session.start(obstacles=[])
    session.activate_power_mode()

    for tick in range(1, 200):
        session.tick(DT)
        if tick == 20:
            assert state.power_time_remaining == 9
    assert state.power_mode_active

    session.tick(DT)

    assert not state.power_mode_active
    assert state.power_time_remaining == 0
    assert all(not chaser.scared and chaser.mode is ChaserMode.RANDOM for chaser in state.chasers)
    assert all(100 <= chaser.mode_timer <= 200 for chaser in state.chasers)
    assert power_events[-1] == {"active": False, "time_remaining": 0}


def test_eaten_chaser_respawns_with_same_personality() -> None:
    bus = EventBus()
    eaten = _record(bus, "chaser_eaten")
    session = _session(seed=8, event_bus=bus, chaser_count=1)
    state = session.start()
    session.activate_power_mode()
    state.chasers[0].position = state.seeker.position

    session.tick(DT)

    assert state.chasers == []
    assert len(state.pending_respawns) == 1
    assert state.score == 200
    assert eaten[0]["personality"] == "aggressive"

    waited = 0
    while not state.chasers and waited < 100:
        session.tick(DT)
        waited += 1

    assert 75 <= waited <= 80
    chaser = state.chasers[0]
    assert chaser.personality is Personality.AGGRESSIVE
    assert chaser.color == "#FF69B4"
    assert chaser.chaser_id == 2
    assert chaser.scared and chaser.mode is ChaserMode.FLEE
    assert not state.arena.is_inside_obstacle(chaser.position, 5.0)
    assert state.pending_respawns == []


def test_milestone_messages_fire_once_per_multiple() -> None:
    bus = EventBus()
    messages = _record(bus, "message")
    session = _session(event_bus=bus, chaser_count=0)
    state = session.start(obstacles=[])

    def eat_one() -> None:
        session.place_target(state.seeker.position)
        session.tick(DT)

    for _ in range(31):
        eat_one()
    assert state.score == 310
    assert len(messages) == 1
    assert messages[0]["milestone"] == 300
    assert session.messages.current is not None

    for _ in range(28):
        eat_one()
    assert state.score == 590
    assert len(messages) == 1

    eat_one()
    assert state.score == 600
    assert [message["milestone"] for message in messages] == [300, 600]


def test_high_score_is_monotonic_and_persisted() -> None:
    store = MemoryStore({"idle_high_score": 40})
    bus = EventBus()
    highs = _record(bus, "high_score")
    session = _session(event_bus=bus, high_scores=HighScoreRepository(store), chaser_count=0)
    state = session.start(obstacles=[])

    assert state.high_score == 40
    for _ in range(6):
        session.place_target(state.seeker.position)
        session.tick(DT)

    assert state.score == 60
    assert state.high_score == 60
    assert store.get("idle_high_score") == 60
    assert [event["high_score"] for event in highs] == [50, 60]

    again = _session(high_scores=HighScoreRepository(store), chaser_count=0).start(obstacles=[])
    assert again.score == 0
    assert again.high_score == 60


def test_passive_points_trickle_in() -> None:
    session = _session(chaser_count=0, passive_points=1)
    state = session.start(obstacles=[])

    for _ in range(40):
        session.tick(DT)

    assert state.score == 2


def test_spawner_respects_target_cap() -> None:
    session = _session(chaser_count=0, initial_targets=3, target_cap=3, target_spawn_interval=0.1)
    state = session.start()

    for _ in range(20):
        session.tick(DT)

    assert len(state.targets) <= 3


@pytest.mark.parametrize("seed", [1, 5, 9])
def test_agents_stay_in_bounds_and_out_of_obstacles(seed: int) -> None:
    session = _session(seed=seed, initial_targets=12, target_spawn_interval=1.5, passive_points=1)
    state = session.start()
    arena = state.arena

    for _ in range(600):
        session.tick(DT)
        assert arena.is_in_bounds(state.seeker.position)
        assert not arena.is_inside_obstacle(state.seeker.position)
        for chaser in state.chasers:
            assert arena.is_in_bounds(chaser.position)
            assert not arena.is_inside_obstacle(chaser.position)
        assert len(state.targets) <= 15

    assert state.high_score >= state.score


def test_render_state_and_metrics_are_plain_data() -> None:
    session = _session(initial_targets=2)
    session.start()
    session.tick(DT)

    render = session.get_render_state()
    metrics = session.get_metrics()

    assert render["simulation"] == "idle_chase"
    assert render["phase"] == "running"
    assert render["power_mode"] == {"active": False, "time_remaining": 0}
    assert len(render["chasers"]) == 4
    assert set(render["seeker"]) >= {"position", "direction", "path", "mouth_open", "eating"}
    assert metrics["tick"] == 1.0
    assert all(isinstance(value, float) for value in metrics.values())
