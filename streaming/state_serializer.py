"""RenderState serialization utilities."""

from __future__ import annotations

import dataclasses
import enum
import json
from typing import Any


MAX_FRAME_BYTES = 10 * 1024 * 1024


def to_payload(value: Any) -> Any:
    """Convert dataclasses, enums and tuples into plain JSON-compatible data."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_payload(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, dict):
        return {str(k): to_payload(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_payload(v) for v in value]
    return value


def serialize_state(render_state: Any) -> bytes:
    """Serialize render state into deterministic JSON bytes."""
    payload = to_payload(render_state)
    data = json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
    if len(data) > MAX_FRAME_BYTES:
        raise ValueError(
            f"Serialized frame exceeds max size ({len(data)} bytes > {MAX_FRAME_BYTES})."
        )
    return data


def serialize_event(event_type: str, payload: Any) -> bytes:
    """Wrap a transient event (message, exit, ...) in a tagged frame."""
    return serialize_state({"event": event_type, "payload": payload})
