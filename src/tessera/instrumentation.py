"""Render timing: DEBUG logging plus opt-in per-render metrics.

Every template render passes through ``benchmark(label, block)``. It logs the
elapsed time at DEBUG and, inside ``profiled_render()``, records it in a
``RenderAccumulator``. Outside of ``profiled_render()`` the only cost is one
ContextVar read.

Example:
    >>> with profiled_render() as metrics:
    ...     view.render(partial="ad", collection=ads)
    >>> metrics.summary()["renders"]["Rendered ads/_ad"]["calls"]
    3

"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from time import perf_counter
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class RenderAccumulator:
    """Timings collected for one profiled render."""

    renders: dict[str, dict[str, float]] = field(default_factory=dict)
    failures: int = 0
    started_at: float = field(default_factory=perf_counter)

    def record_render(self, label: str, elapsed_ms: float) -> None:
        entry = self.renders.setdefault(label, {"calls": 0, "ms": 0.0})
        entry["calls"] += 1
        entry["ms"] += elapsed_ms

    def summary(self) -> dict[str, Any]:
        """Plain-dict snapshot, suitable for ``json.dumps``."""
        return {
            "total_ms": (perf_counter() - self.started_at) * 1000,
            "renders": {label: dict(entry) for label, entry in self.renders.items()},
            "failures": self.failures,
        }


_accumulator: ContextVar[RenderAccumulator | None] = ContextVar(
    "tessera_render_accumulator",
    default=None,
)


def get_accumulator() -> RenderAccumulator | None:
    """Active accumulator, or None when profiling is off."""
    return _accumulator.get()


@contextmanager
def profiled_render() -> Iterator[RenderAccumulator]:
    """Collect render timings for everything rendered inside the block."""
    acc = RenderAccumulator()
    token = _accumulator.set(acc)
    try:
        yield acc
    finally:
        _accumulator.reset(token)


def benchmark(label: str, block: Callable[[], str]) -> str:
    """Run ``block``, timing it under ``label``.

    The block's return value and exceptions pass through unchanged.
    """
    start = perf_counter()
    failed = False
    try:
        return block()
    except BaseException:
        failed = True
        raise
    finally:
        elapsed_ms = (perf_counter() - start) * 1000
        logger.debug(f"{label} ({elapsed_ms:.1f}ms)")
        acc = _accumulator.get()
        if acc is not None:
            acc.record_render(label, elapsed_ms)
            if failed:
                acc.failures += 1
