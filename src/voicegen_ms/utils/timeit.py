"""
Timing Utilities.

Measures wall-clock duration of a ``with`` block using perf_counter().
The measurement is taken on every exit path, including exceptions and
task cancellation, so failed and timed-out requests are timed too.

Example Usage:
    with timeit("synthesis") as t:
        outcome = await orchestrator.synthesize(text, config, budget_s)
    print(f"Took {t.seconds:.3f}s")
"""
from __future__ import annotations

from dataclasses import dataclass
from time import perf_counter
from typing import Optional


@dataclass
class Timing:
    """
    Timing measurement result.

    Attributes:
        name: What was timed (e.g. "synthesis", "request_total").
        seconds: Duration in seconds.
    """
    name: str
    seconds: float


class timeit:
    """
    Context manager for timing code blocks.

    Attributes:
        name: Identifier for this timing.
        timing: Result, available after the block exits.
    """

    def __init__(self, name: str):
        self.name = name
        self._t0: Optional[float] = None
        self.timing: Optional[Timing] = None

    def __enter__(self) -> "timeit":
        self._t0 = perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        assert self._t0 is not None
        self.timing = Timing(name=self.name, seconds=perf_counter() - self._t0)

    def elapsed(self) -> float:
        """Seconds since entering the block (works while still inside it)."""
        if self._t0 is None:
            return 0.0
        return perf_counter() - self._t0

    @property
    def seconds(self) -> float:
        """Final duration, or the running elapsed time if not finished."""
        if self.timing is not None:
            return self.timing.seconds
        return self.elapsed()
