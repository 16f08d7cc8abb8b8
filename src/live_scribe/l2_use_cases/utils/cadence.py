"""Pure cadence policy keyed on the live velocity counter (chars/sec)."""

from __future__ import annotations


def refine_threshold(
    velocity: int,
    min_chars: int = 5,
    fast_min_chars: int = 10,
    fast_velocity: int = 30,
) -> int:
    """Minimum unrefined length before a refine call; batches more under fast speech."""
    return fast_min_chars if velocity > fast_velocity else min_chars


def translate_interval(
    velocity: int,
    slow_interval: float = 0.1,
    fast_interval: float = 0.05,
    fast_velocity: int = 40,
) -> float:
    """Poll interval in seconds for the translate stage."""
    return fast_interval if velocity > fast_velocity else slow_interval


def backoff_delays(retries: int = 3, base: float = 1.0) -> list[float]:
    """Delays before each retry: base, 2×base, 4×base, ..."""
    return [base * (2**attempt) for attempt in range(retries)]


def remaining_spacing(now: float, last_dispatch: float | None, min_spacing: float) -> float:
    """Seconds still to wait before another call may be dispatched (0 when free to go)."""
    if last_dispatch is None:
        return 0.0
    return max(0.0, min_spacing - (now - last_dispatch))
