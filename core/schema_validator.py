"""Checks plugin params against the tables a plugin's ``config_schema`` declares."""

from __future__ import annotations

import warnings
from typing import Any, Mapping


class SchemaValidationError(ValueError):
    """Raised when simulation params fail schema validation."""


_TABLES = ("REQUIRED_PARAMS", "DEFAULTS", "OPTIONAL_PARAMS", "LOWER_BOUNDS")


def _schema_tables(schema_module: Any, simulation_name: str) -> dict[str, Mapping[str, Any]]:
    tables = {name: getattr(schema_module, name, {}) for name in _TABLES}
    malformed = [name for name, table in tables.items() if not isinstance(table, Mapping)]
    if malformed:
        raise SchemaValidationError(
            f"Schema of '{simulation_name}' has non-mapping table(s): {', '.join(malformed)}."
        )
    return tables


def _coerce(key: str, value: Any, declared: type[Any]) -> Any:
    """Accept ``value`` when its type is exactly ``declared``.

    ``bool`` never passes as a number. An ``int`` is widened when ``float`` is
    declared since YAML writes ``100`` and ``100.0`` interchangeably.
    """
    if type(value) is declared:
        return value
    if declared is float and type(value) is int:
        return float(value)
    raise SchemaValidationError(
        f"Parameter '{key}' expected {declared.__name__}, got {type(value).__name__}."
    )


def _check_lower_bound(key: str, value: Any, minimum: float) -> None:
    values = value if isinstance(value, list) else [value]
    for item in values:
        if isinstance(item, (int, float)) and not isinstance(item, bool) and item < minimum:
            raise SchemaValidationError(f"Parameter '{key}' must be >= {minimum:g}, got {item!r}.")


def validate_simulation_params(
    params: dict[str, Any],
    schema_module: Any,
    simulation_name: str,
    strict: bool = True,
) -> dict[str, Any]:
    """Merge ``params`` over the plugin defaults and validate the result.

    Required keys must be present; every declared key must have its exact
    type; numbers (and every number inside list params) must respect
    ``LOWER_BOUNDS``. Undeclared keys raise when ``strict`` and are otherwise
    reported with a warning and dropped.
    """
    tables = _schema_tables(schema_module, simulation_name)
    required = tables["REQUIRED_PARAMS"]
    declared = {**tables["OPTIONAL_PARAMS"], **required}

    merged = {**tables["DEFAULTS"], **params}

    missing = [key for key in required if key not in merged]
    if missing:
        raise SchemaValidationError(
            f"Simulation '{simulation_name}' missing required parameter '{missing[0]}'."
        )

    unknown = [key for key in merged if key not in declared and key not in tables["DEFAULTS"]]
    if unknown:
        message = f"Unknown parameter(s) {unknown} for simulation '{simulation_name}'."
        if strict:
            raise SchemaValidationError(message)
        warnings.warn(message, stacklevel=2)
        for key in unknown:
            del merged[key]

    for key, declared_type in declared.items():
        if key in merged:
            merged[key] = _coerce(key, merged[key], declared_type)

    for key, minimum in tables["LOWER_BOUNDS"].items():
        if key in merged:
            _check_lower_bound(key, merged[key], minimum)

    return merged
