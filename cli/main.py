"""Command-line entry points for running, serving, and viewing the idle chase screen."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path
import sys
from typing import Any

# Allow `python cli/main.py ...` execution from IDEs by adding repo root to sys.path.
if __package__ in {None, ""}:
    repo_root = Path(__file__).resolve().parents[1]
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))

from core.simulator import FORWARDED_EVENTS, Simulator
from data.high_score_store import JsonFileStore
from streaming.websocket_server import RenderStateServer

LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG = "configs/idle_chase.yaml"


def _configure_logging(level: str | None) -> None:
    if level is None:
        level = "INFO"
    logging.basicConfig(level=level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _run_headless(config: str, steps: int, store_path: str | None, log_level: str | None = None) -> dict[str, Any]:
    store = JsonFileStore(store_path) if store_path else None
    simulator = Simulator(config, store=store)
    _configure_logging(log_level or simulator.logging_config["log_level"])
    messages: list[str] = []
    simulator.event_bus.subscribe("message", lambda payload: messages.append(str(payload["text"])))
    metrics = simulator.run(steps)
    final = metrics[-1] if metrics else {}
    return {
        "session_name": simulator.session_name,
        "seed": simulator.seed,
        "steps": simulator.step_index,
        "score": int(final.get("score", 0)),
        "high_score": int(final.get("high_score", simulator.high_scores.load())),
        "messages": messages,
        "metrics": final,
    }


async def _serve(config: str, host: str, port: int, seconds: float, max_fps: int) -> int:
    simulator = Simulator(config)
    server = RenderStateServer(host=host, port=port, max_fps=max_fps)
    frames: list[Any] = []
    events: list[tuple[str, Any]] = []
    simulator.event_bus.subscribe("render_state", frames.append)
    for name in FORWARDED_EVENTS:
        simulator.event_bus.subscribe(name, lambda payload, name=name: events.append((name, payload)))

    await server.start()
    loop = asyncio.get_running_loop()
    started = last = loop.time()
    try:
        while seconds <= 0 or (loop.time() - started) < seconds:
            await asyncio.sleep(simulator.tick_seconds)
            now = loop.time()
            simulator.run_for(now - last)
            last = now
            while events:
                name, payload = events.pop(0)
                await server.broadcast_event(name, payload)
            if frames:
                await server.broadcast(frames[-1])
                frames.clear()
    finally:
        simulator.close()
        await server.stop()
    return 0


def run_cli(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="idle-chase")
    parser.add_argument("--log-level", default=None)
    sub = parser.add_subparsers(dest="command", required=True)

    run_cmd = sub.add_parser("run", help="Run headless for a fixed number of steps")
    run_cmd.add_argument("--config", default=DEFAULT_CONFIG)
    run_cmd.add_argument("--steps", type=int, default=200)
    run_cmd.add_argument("--store", default=None, help="JSON file persisting the high score")

    serve_cmd = sub.add_parser("serve", help="Stream frames over websockets")
    serve_cmd.add_argument("--config", default=DEFAULT_CONFIG)
    serve_cmd.add_argument("--host", default="127.0.0.1")
    serve_cmd.add_argument("--port", type=int, default=8765)
    serve_cmd.add_argument("--seconds", type=float, default=0.0, help="0 runs until interrupted")
    serve_cmd.add_argument("--max-fps", type=int, default=30)

    gui_cmd = sub.add_parser("gui", help="Open the desktop viewer")
    gui_cmd.add_argument("--config", default=DEFAULT_CONFIG)

    args = parser.parse_args(argv)

    if args.command == "run":
        summary = _run_headless(args.config, args.steps, args.store, args.log_level)
        print(json.dumps(summary, sort_keys=True))
        return 0

    if args.command == "serve":
        _configure_logging(args.log_level)
        try:
            return asyncio.run(_serve(args.config, args.host, args.port, args.seconds, args.max_fps))
        except KeyboardInterrupt:
            LOGGER.info("Server interrupted")
            return 0

    if args.command == "gui":
        from ui_desktop.app import main as desktop_main

        forwarded = ["--config", str(args.config)]
        if args.log_level:
            forwarded.extend(["--log-level", str(args.log_level)])
        return int(desktop_main(forwarded))

    return 1


if __name__ == "__main__":
    raise SystemExit(run_cli())
