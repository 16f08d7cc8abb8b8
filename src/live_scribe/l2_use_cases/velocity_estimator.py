"""Use case: estimate speech velocity from buffer growth."""

from __future__ import annotations


class VelocityEstimator:
    """Characters of finalized text produced per sampling window.

    Does NO timing itself. The pipeline calls ``sample()`` once per window
    while recording and ``idle()`` otherwise.
    """

    def __init__(self) -> None:
        self._baseline = 0
        self._velocity = 0

    @property
    def velocity(self) -> int:
        return self._velocity

    @property
    def baseline(self) -> int:
        return self._baseline

    def sample(self, current_length: int) -> int:
        """Publish growth since the previous sample and move the baseline."""
        self._velocity = max(0, current_length - self._baseline)
        self._baseline = current_length
        return self._velocity

    def idle(self) -> None:
        """Force velocity to 0 without moving the baseline."""
        self._velocity = 0

    def reset(self, length: int = 0) -> None:
        self._baseline = length
        self._velocity = 0
