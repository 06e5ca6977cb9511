"""Fixed-timestep accumulator driving simulation steps from wall-clock time."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable


StepCallback = Callable[[float], None]


@dataclass
class FixedTimestepScheduler:
    """Turns arbitrary elapsed time into a whole number of fixed steps.

    Leftover time is carried in the accumulator so that the step count over
    a long run matches ``total_elapsed / step_seconds`` regardless of how the
    caller slices wall-clock time. ``max_steps_per_advance`` bounds catch-up
    after a stall (the remainder is dropped, not queued).
    """

    step_seconds: float
    max_steps_per_advance: int = 10
    speed_multiplier: float = 1.0
    _accumulator: float = field(default=0.0, init=False)
    _steps_run: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        if self.step_seconds <= 0:
            raise ValueError("step_seconds must be > 0")
        self.max_steps_per_advance = max(1, int(self.max_steps_per_advance))

    @property
    def steps_run(self) -> int:
        return self._steps_run

    @property
    def pending_time(self) -> float:
        return self._accumulator

    def set_speed(self, multiplier: float) -> None:
        self.speed_multiplier = max(0.01, float(multiplier))

    def advance(self, elapsed: float, step: StepCallback) -> int:
        """Feed ``elapsed`` seconds and run as many fixed steps as fit."""
        self._accumulator += max(0.0, float(elapsed)) * self.speed_multiplier
        ran = 0
        # Small epsilon so 0.1 + 0.05 style float sums do not lose a step.
        while self._accumulator + 1e-9 >= self.step_seconds:
            if ran >= self.max_steps_per_advance:
                self._accumulator = 0.0
                break
            self._accumulator -= self.step_seconds
            step(self.step_seconds)
            ran += 1
        self._accumulator = max(0.0, self._accumulator)
        self._steps_run += ran
        return ran

    def reset(self) -> None:
        self._accumulator = 0.0
        self._steps_run = 0
