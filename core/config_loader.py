"""Top-level config loading and validation for plugin-driven simulator."""

from __future__ import annotations

import importlib
from pathlib import Path
from typing import Any, Mapping

import yaml

from core.plugin_registry import get_simulation_class
from core.schema_validator import SchemaValidationError, validate_simulation_params


class ConfigValidationError(ValueError):
    """Raised when runtime config fails validation."""


_REQUIRED_TOP_LEVEL = {"simulation", "params", "session", "logging"}
_OPTIONAL_TOP_LEVEL = {"storage"}
_REQUIRED_SESSION = {
    "random_seed": int,
    "tick_seconds": float,
    "auto_start": bool,
}
_REQUIRED_LOGGING = {
    "log_level": str,
    "snapshot_interval": int,
    "session_name": str,
}
_REQUIRED_STORAGE = {
    "backend": str,
}
_OPTIONAL_STORAGE = {
    "path": str,
    "key": str,
}
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
STORAGE_BACKENDS = {"memory", "json", "sqlite"}
DEFAULT_STORAGE = {"backend": "memory", "key": "idle_high_score"}


def _load_yaml_or_raise(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ConfigValidationError(f"Config file not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        payload = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigValidationError(f"Failed to parse YAML config '{path}': {exc}") from exc

    if not isinstance(payload, Mapping):
        raise ConfigValidationError("Top-level config must be a mapping.")
    return dict(payload)


def _validate_section(
    section_name: str,
    section_value: Any,
    required_fields: Mapping[str, type[Any]],
    optional_fields: Mapping[str, type[Any]] | None = None,
) -> dict[str, Any]:
    if not isinstance(section_value, Mapping):
        raise ConfigValidationError(f"Section '{section_name}' must be a mapping.")

    optional_fields = optional_fields or {}
    section = dict(section_value)
    missing = [key for key in required_fields if key not in section]
    if missing:
        raise ConfigValidationError(
            f"Section '{section_name}' missing required field(s): {missing}."
        )

    extras = [key for key in section if key not in required_fields and key not in optional_fields]
    if extras:
        raise ConfigValidationError(
            f"Section '{section_name}' has unknown field(s): {extras}."
        )

    for key, expected_type in {**required_fields, **optional_fields}.items():
        if key not in section:
            continue
        value = section[key]
        if expected_type is float and type(value) is int:
            section[key] = float(value)
            continue
        if type(value) is not expected_type:
            raise ConfigValidationError(
                f"Field '{section_name}.{key}' expected {expected_type.__name__}, got {type(value).__name__}."
            )

    return section


def _validate_storage(raw: Any) -> dict[str, Any]:
    if raw is None:
        return dict(DEFAULT_STORAGE)
    storage = _validate_section("storage", raw, _REQUIRED_STORAGE, _OPTIONAL_STORAGE)
    backend = storage["backend"]
    if backend not in STORAGE_BACKENDS:
        raise ConfigValidationError(
            f"Unknown storage backend '{backend}'. Expected one of {sorted(STORAGE_BACKENDS)}."
        )
    if backend != "memory" and not storage.get("path"):
        raise ConfigValidationError(f"Storage backend '{backend}' requires 'storage.path'.")
    storage.setdefault("key", DEFAULT_STORAGE["key"])
    return storage


def load_config(path: str, strict: bool = True) -> dict[str, Any]:
    """Load and validate YAML runtime configuration.

    Returns normalized config with keys:
    - simulation
    - simulation_config
    - session_config
    - logging_config
    - storage_config
    - seed
    """
    config = _load_yaml_or_raise(Path(path))

    missing_top = [key for key in sorted(_REQUIRED_TOP_LEVEL) if key not in config]
    if missing_top:
        raise ConfigValidationError(
            f"Missing required top-level section(s): {missing_top}."
        )

    extras_top = [key for key in config if key not in _REQUIRED_TOP_LEVEL | _OPTIONAL_TOP_LEVEL]
    if extras_top:
        raise ConfigValidationError(
            f"Unknown top-level field(s): {extras_top}."
        )

    simulation_name = config.get("simulation")
    if not isinstance(simulation_name, str) or not simulation_name:
        raise ConfigValidationError("Field 'simulation' must be a non-empty string.")

    # registry lookup for descriptive plugin errors
    get_simulation_class(simulation_name)

    session_config = _validate_section("session", config["session"], _REQUIRED_SESSION)
    if session_config["tick_seconds"] <= 0:
        raise ConfigValidationError("Field 'session.tick_seconds' must be > 0.")

    logging_config = _validate_section("logging", config["logging"], _REQUIRED_LOGGING)
    logging_config["log_level"] = logging_config["log_level"].upper()
    if logging_config["log_level"] not in _LOG_LEVELS:
        raise ConfigValidationError(f"Unknown log level '{logging_config['log_level']}'.")
    if logging_config["snapshot_interval"] < 1:
        raise ConfigValidationError("Field 'logging.snapshot_interval' must be >= 1.")

    storage_config = _validate_storage(config.get("storage"))

    raw_params = config["params"] if config["params"] is not None else {}
    if not isinstance(raw_params, Mapping):
        raise ConfigValidationError("Section 'params' must be a mapping.")

    schema_module_name = f"simulations.{simulation_name}.config_schema"
    try:
        schema_module = importlib.import_module(schema_module_name)
    except ImportError as exc:
        raise ConfigValidationError(
            f"Could not load schema for simulation '{simulation_name}' ({schema_module_name})."
        ) from exc

    try:
        simulation_params = validate_simulation_params(
            params=dict(raw_params),
            schema_module=schema_module,
            simulation_name=simulation_name,
            strict=strict,
        )
    except SchemaValidationError as exc:
        raise ConfigValidationError(str(exc)) from exc

    return {
        "simulation": simulation_name,
        "simulation_config": simulation_params,
        "session_config": session_config,
        "logging_config": logging_config,
        "storage_config": storage_config,
        "seed": int(session_config["random_seed"]),
    }
