"""Simple headless runner for local validation."""

from __future__ import annotations

import json
import logging

from core.simulator import Simulator


def main(config_path: str = "configs/idle_chase.yaml", steps: int = 600) -> dict[str, float]:
    """Run one session headless and return the final metrics."""
    simulator = Simulator(config_path)
    logging.basicConfig(level=simulator.logging_config["log_level"])
    metrics = simulator.run(steps)
    return metrics[-1] if metrics else {}


if __name__ == "__main__":
    print(json.dumps(main(), sort_keys=True))
