"""Small key-value stores for the persisted high score."""

from __future__ import annotations

import json
import logging
import sqlite3
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Mapping

LOGGER = logging.getLogger(__name__)

DEFAULT_KEY = "idle_high_score"


class KeyValueStore(ABC):
    """String-keyed storage of JSON-compatible scalars."""

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Return the stored value or None."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Persist ``value`` under ``key``."""

    def close(self) -> None:
        return None


class MemoryStore(KeyValueStore):
    def __init__(self, initial: Mapping[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Any | None:
        return self._values.get(key)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value


class JsonFileStore(KeyValueStore):
    """One JSON object per file, rewritten atomically on every set."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _read_all(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            LOGGER.warning("Ignoring unreadable store %s: %s", self.path, exc)
            return {}
        if not isinstance(payload, dict):
            LOGGER.warning("Ignoring store %s: top-level value is not an object", self.path)
            return {}
        return payload

    def get(self, key: str) -> Any | None:
        return self._read_all().get(key)

    def set(self, key: str, value: Any) -> None:
        payload = self._read_all()
        payload[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(payload, sort_keys=True), encoding="utf-8")
        tmp_path.replace(self.path)


class SqliteStore(KeyValueStore):
    """Key-value table in a SQLite database."""

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.connection = sqlite3.connect(self.db_path)
        self._ensure_schema()

    def _ensure_schema(self) -> None:
        self.connection.execute(
            """
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
            )
            """
        )
        self.connection.commit()

    def get(self, key: str) -> Any | None:
        row = self.connection.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        if row is None:
            return None
        try:
            return json.loads(row[0])
        except json.JSONDecodeError:
            return row[0]

    def set(self, key: str, value: Any) -> None:
        self.connection.execute(
            "INSERT OR REPLACE INTO kv_store (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP)",
            (key, json.dumps(value)),
        )
        self.connection.commit()

    def close(self) -> None:
        self.connection.close()


class HighScoreRepository:
    """Reads and writes the single persisted high-score integer."""

    def __init__(self, store: KeyValueStore | None = None, key: str = DEFAULT_KEY) -> None:
        self.store = store if store is not None else MemoryStore()
        self.key = key

    def load(self) -> int:
        """Stored high score; missing, corrupt or negative values read as 0."""
        raw = self.store.get(self.key)
        if raw is None:
            return 0
        if isinstance(raw, bool):
            LOGGER.warning("Corrupt high score %r under '%s', using 0", raw, self.key)
            return 0
        try:
            value = int(raw)
        except (TypeError, ValueError, OverflowError):
            LOGGER.warning("Corrupt high score %r under '%s', using 0", raw, self.key)
            return 0
        return max(0, value)

    def save(self, high_score: int) -> None:
        self.store.set(self.key, int(high_score))

    def close(self) -> None:
        self.store.close()


def build_store(storage_config: Mapping[str, Any]) -> KeyValueStore:
    """Create the store named by a validated ``storage`` config section."""
    backend = str(storage_config.get("backend", "memory"))
    if backend == "memory":
        return MemoryStore()
    path = storage_config.get("path")
    if not path:
        raise ValueError(f"Storage backend '{backend}' requires a path.")
    if backend == "json":
        return JsonFileStore(path)
    if backend == "sqlite":
        return SqliteStore(path)
    raise ValueError(f"Unknown storage backend '{backend}'.")
