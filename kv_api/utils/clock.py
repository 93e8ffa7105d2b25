"""Millisecond clock sources used for admission window calculations."""

from __future__ import annotations

import time
from typing import Callable

Clock = Callable[[], int]


def wall_clock_ms() -> int:
    """Current UNIX time in whole milliseconds.

    Subject to system clock adjustments; a backward step can make the
    admission window look stale until it catches up.
    """
    return int(time.time() * 1000)


def monotonic_clock_ms() -> int:
    """Milliseconds from an arbitrary but never-decreasing origin."""
    return time.monotonic_ns() // 1_000_000


_CLOCKS: dict[str, Clock] = {
    "wall": wall_clock_ms,
    "monotonic": monotonic_clock_ms,
}


def get_clock(name: str) -> Clock:
    """Resolve a configured clock name.

    Raises:
        ValueError: If the name is not a known clock source.
    """
    try:
        return _CLOCKS[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown clock source: '{name}'. Supported: {', '.join(sorted(_CLOCKS))}"
        ) from None
