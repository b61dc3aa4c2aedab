"""Running mean / standard deviation over rate estimates."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class StatsSummary:
    count: int
    mean: float
    std: float


class RunningStats:
    """Accumulates count, sum and sum of squares.

    ``std = sqrt(E[x^2] - E[x]^2)`` (population). Cancellation can make the
    difference slightly negative, so it is clamped at zero.
    """

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self._count = 0
        self._sum = 0.0
        self._sum_sq = 0.0

    def __len__(self) -> int:
        return self._count

    def record(self, value: float) -> None:
        v = float(value)
        self._count += 1
        self._sum += v
        self._sum_sq += v * v

    def summary(self) -> Optional[StatsSummary]:
        """Return the current summary, or None when nothing was recorded."""
        if self._count == 0:
            return None
        mean = self._sum / self._count
        var = self._sum_sq / self._count - mean * mean
        return StatsSummary(count=self._count, mean=mean, std=math.sqrt(max(0.0, var)))
