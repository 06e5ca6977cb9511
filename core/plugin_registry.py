"""Finds simulation plugins living under the ``simulations`` package."""

from __future__ import annotations

import importlib
import logging
import pkgutil
from typing import Type

from simulations.base_simulation import Simulation
import simulations

LOGGER = logging.getLogger(__name__)

_DISCOVERED: dict[str, Type[Simulation]] | None = None


class SimulationPluginNotFoundError(LookupError):
    """Raised when requested simulation plugin cannot be resolved."""


def _load_plugin(package_name: str) -> tuple[str, Type[Simulation]] | None:
    """Import ``simulations.<package_name>.sim`` and read its plugin exports."""
    try:
        module = importlib.import_module(f"simulations.{package_name}.sim")
    except ImportError as exc:
        LOGGER.warning("Skipping simulation package '%s': %s", package_name, exc)
        return None

    name = getattr(module, "SIMULATION_NAME", None)
    plugin_class = getattr(module, "SimulationClass", None)
    if not isinstance(name, str) or not isinstance(plugin_class, type) or not issubclass(plugin_class, Simulation):
        LOGGER.debug("Package '%s' has a sim module but no plugin exports", package_name)
        return None
    return name, plugin_class


def discover_simulations(refresh: bool = False) -> dict[str, Type[Simulation]]:
    """Map plugin names to classes, scanning once unless ``refresh`` is set.

    Every public sub-package whose ``sim`` module exports ``SIMULATION_NAME``
    and a :class:`Simulation` subclass as ``SimulationClass`` is a plugin.
    """
    global _DISCOVERED
    if _DISCOVERED is None or refresh:
        found: dict[str, Type[Simulation]] = {}
        for module_info in pkgutil.iter_modules(simulations.__path__):
            if not module_info.ispkg or module_info.name.startswith("_"):
                continue
            plugin = _load_plugin(module_info.name)
            if plugin is not None:
                found[plugin[0]] = plugin[1]
        LOGGER.debug("Discovered simulation plugins: %s", sorted(found))
        _DISCOVERED = found
    return dict(_DISCOVERED)


def get_simulation_class(name: str) -> Type[Simulation]:
    """Return the plugin class registered under ``name``."""
    plugins = discover_simulations()
    try:
        return plugins[name]
    except KeyError:
        known = ", ".join(sorted(plugins)) or "<none>"
        raise SimulationPluginNotFoundError(
            f"Simulation plugin '{name}' not found. Available simulations: {known}"
        ) from None
