"""timing.py — stopwatch utilities for the SUSAN edge pipeline

The SUSAN passes are slow by nature (every pixel re‑reads its whole
window, more so with the connectivity refinement), so the driver reports
per‑stage wall time and pixel throughput.

Features
--------
* **Timer** context‑manager – `with Timer("strength", pixels=img.size):`
* **timeit decorator** – `@timeit()` for functions
* Global accumulation per label & pretty summary printer
* Standard library only

Example
-------
```python
from susan_edge_detection.io_utils.timing import Timer

with Timer("strength", pixels=img.shape[0] * img.shape[1]):
    edg = edge_strength(img)

Timer.summary()       # prints cumulative timings
```
"""

from __future__ import annotations


import time
from collections import defaultdict
from functools import wraps
from typing import Callable, Dict, Optional, TypeVar

__all__ = ["Timer", "timeit"]

T = TypeVar("T")

# ----------------------------------------------------------------------------
# Core timer
# ----------------------------------------------------------------------------

class Timer:
    """Context‑manager style stopwatch with global accumulation.

    Parameters
    ----------
    label : str
        Human‑readable name for the timed stage.
    pixels : int | None
        Number of pixels processed by the stage; when given, the end‑of‑block
        message also reports throughput in megapixels per second.
    accumulate : bool, default True
        If *True*, elapsed seconds are added to an internal accumulator
        keyed by *label* so you can print a summary later.
    silent : bool, default False
        If *True*, do **not** print the end‑of‑block message.
    """

    _acc: Dict[str, float] = defaultdict(float)  # cumulative seconds per label

    def __init__(
        self,
        label: str,
        *,
        pixels: Optional[int] = None,
        accumulate: bool = True,
        silent: bool = False,
    ):
        self.label = label
        self.pixels = pixels
        self.accumulate = accumulate
        self.silent = silent
        self._start: float | None = None
        self.elapsed: float | None = None

    # ---------------------------------------------------------------------
    # Context‑manager protocol
    # ---------------------------------------------------------------------

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: D401
        if self._start is None:
            raise RuntimeError("Timer was never started, call __enter__() first")
        self.elapsed = time.perf_counter() - self._start
        if self.accumulate:
            Timer._acc[self.label] += self.elapsed
        if not self.silent:
            print(self.message())

    # ------------------------------------------------------------------
    # Formatting
    # ------------------------------------------------------------------

    # seconds → ms string
    @staticmethod
    def _fmt(seconds: float) -> str:
        return f"{seconds*1000:.2f} ms"

    @property
    def megapixels_per_second(self) -> Optional[float]:
        if not self.pixels or not self.elapsed:
            return None
        return self.pixels / self.elapsed / 1e6

    def message(self) -> str:
        """One‑line ``[TIMER]`` report for the last measurement."""
        if self.elapsed is None:
            return f"[TIMER] {self.label:<20s}: not run"
        msg = f"[TIMER] {self.label:<20s}: {Timer._fmt(self.elapsed)}"
        rate = self.megapixels_per_second
        if rate is not None:
            msg += f" ({rate:.3f} Mpx/s)"
        return msg

    # Public API ---------------------------------------------------------

    @staticmethod
    def stats() -> Dict[str, float]:
        """Return *copy* of cumulative timing dict {label: seconds}."""
        return dict(Timer._acc)

    @staticmethod
    def summary_text() -> str:
        """Cumulative statistics as a printable block."""
        if not Timer._acc:
            return "[TIMER] No measurements recorded.\n"

        width = max(len(k) for k in Timer._acc)
        lines = ["", "========== Timing Summary =========="]
        total = 0.0
        for lbl, sec in Timer._acc.items():
            total += sec
            lines.append(f"{lbl.ljust(width)} : {Timer._fmt(sec)}")
        lines.append("-" * (width + 30))
        lines.append(f"{'Total'.ljust(width)} : {Timer._fmt(total)}")
        lines.append("====================================")
        return "\n".join(lines) + "\n"

    @staticmethod
    def summary(reset: bool = False) -> None:
        """Pretty‑print cumulative statistics and optionally reset them."""
        print(Timer.summary_text())
        if reset:
            Timer.reset()

    @staticmethod
    def reset() -> None:
        """Clear all accumulated statistics."""
        Timer._acc.clear()


# ----------------------------------------------------------------------------
# Decorator convenience
# ----------------------------------------------------------------------------

def timeit(label: Optional[str] = None, *, accumulate: bool = True) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator to time a function call.

    Parameters
    ----------
    label : str | None
        Label under which to accumulate time. If *None*, `func.__name__` is used.
    accumulate : bool
        Accumulate time in :pyclass:`Timer` global stats.
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        name = label or func.__name__

        @wraps(func)
        def wrapper(*args, **kwargs):
            with Timer(name, accumulate=accumulate, silent=True):
                return func(*args, **kwargs)

        return wrapper

    return decorator
