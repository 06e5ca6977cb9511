"""RenderState websocket streaming server and broadcaster."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any

import websockets

from streaming.state_serializer import serialize_event, serialize_state

LOGGER = logging.getLogger(__name__)

CLIENT_MODES = ("full_state", "hud_only", "agents_only")


@dataclass
class _Client:
    websocket: Any
    mode: str = "full_state"
    queue: asyncio.Queue[bytes] = field(default_factory=lambda: asyncio.Queue(maxsize=1))


def _parse_mode(first_msg: Any) -> str:
    if not isinstance(first_msg, str):
        return "full_state"
    try:
        payload = json.loads(first_msg)
    except json.JSONDecodeError:
        return "full_state"
    mode = payload.get("mode", "full_state") if isinstance(payload, dict) else "full_state"
    return mode if mode in CLIENT_MODES else "full_state"


class RenderStateServer:
    """Broadcast render frames to websocket clients with backpressure control.

    Each client owns a single-slot queue: a slow client only ever receives
    the newest frame.
    """

    def __init__(self, host: str = "127.0.0.1", port: int = 8765, max_fps: int = 30) -> None:
        self.host = host
        self.port = port
        self.max_fps = max(1, max_fps)
        self._min_interval = 1.0 / self.max_fps
        self._last_broadcast = 0.0
        self._clients: list[_Client] = []
        self._server: Any = None

    @property
    def client_count(self) -> int:
        return len(self._clients)

    async def start(self) -> None:
        """Start websocket listener."""

        async def _handler(ws: Any) -> None:
            try:
                first_msg = await asyncio.wait_for(ws.recv(), timeout=1.0)
            except (asyncio.TimeoutError, websockets.ConnectionClosed):
                first_msg = None
            client = _Client(websocket=ws, mode=_parse_mode(first_msg))
            self._clients.append(client)
            LOGGER.info("Client connected in '%s' mode", client.mode)
            sender = asyncio.create_task(self._sender_loop(client))
            try:
                await ws.wait_closed()
            finally:
                if client in self._clients:
                    self._clients.remove(client)
                sender.cancel()
                LOGGER.info("Client disconnected")

        self._server = await websockets.serve(_handler, self.host, self.port)
        LOGGER.info("Render server listening on ws://%s:%d", self.host, self.port)

    async def stop(self) -> None:
        """Stop listener and disconnect clients."""
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()
            self._server = None

    async def _sender_loop(self, client: _Client) -> None:
        while True:
            frame = await client.queue.get()
            try:
                await client.websocket.send(frame)
            except websockets.ConnectionClosed:
                return

    def _enqueue(self, client: _Client, frame: bytes) -> None:
        # No await between the checks, so the slot cannot change underneath.
        if client.queue.full():
            client.queue.get_nowait()
        client.queue.put_nowait(frame)

    async def broadcast(self, render_state: Any) -> None:
        """Broadcast frame to clients, dropping stale frames on backpressure."""
        now = time.monotonic()
        if (now - self._last_broadcast) < self._min_interval:
            return
        self._last_broadcast = now

        for client in list(self._clients):
            self._enqueue(client, serialize_state(self._apply_filter(render_state, client.mode)))

    async def broadcast_event(self, event_type: str, payload: Any) -> None:
        """Push a transient event (not rate limited) to every client."""
        frame = serialize_event(event_type, payload)
        for client in list(self._clients):
            self._enqueue(client, frame)

    def _apply_filter(self, render_state: Any, mode: str) -> Any:
        if mode == "hud_only":
            return {
                "step_index": getattr(render_state, "step_index", 0),
                "hud": getattr(render_state, "hud", None),
                "timestamp": getattr(render_state, "timestamp", 0.0),
            }
        if mode == "agents_only":
            agents = getattr(render_state, "agents", [])
            return {
                "step_index": getattr(render_state, "step_index", 0),
                "agents": [
                    {
                        "id": getattr(a, "id", None),
                        "kind": getattr(a, "kind", None),
                        "position": getattr(a, "position", None),
                        "scared": getattr(a, "scared", False),
                    }
                    for a in agents
                ],
                "timestamp": getattr(render_state, "timestamp", 0.0),
            }
        return render_state
