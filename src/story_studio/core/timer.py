"""
Pipeline Timer — tracks elapsed time for each stage of a run.

Usage:
    timer = PipelineTimer()
    with timer.step("Story"):
        generate_story(...)
    timer.summary()
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Generator
from contextlib import contextmanager
from dataclasses import dataclass, field

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepTiming:
    """Timing record for a single stage."""

    name: str
    elapsed_seconds: float


@dataclass
class PipelineTimer:
    """Tracks elapsed time per stage; failed stages are recorded too."""

    clock: Callable[[], float] = field(default=time.monotonic, repr=False)
    steps: list[StepTiming] = field(default_factory=list, init=False)
    _start: float = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._start = self.clock()

    @contextmanager
    def step(self, name: str) -> Generator[None, None, None]:
        """Time a stage using a context manager.

        Args:
            name: Display name for the stage.
        """
        started = self.clock()
        try:
            yield
        finally:
            elapsed = self.clock() - started
            self.steps.append(StepTiming(name=name, elapsed_seconds=elapsed))
            log.debug("⏱️  %s took %.1fs", name, elapsed)

    @property
    def total_elapsed(self) -> float:
        """Total elapsed time since timer creation."""
        return self.clock() - self._start

    def summary(self) -> float:
        """Log a formatted timing summary.

        Returns:
            Total elapsed time in seconds.
        """
        total = self.total_elapsed
        log.info("⏱️  Timing: %s | total %.1fs", self._format_steps(), total)
        return total

    def _format_steps(self) -> str:
        return ", ".join(f"{s.name} {s.elapsed_seconds:.1f}s" for s in self.steps) or "-"
