"""Fixed-capacity rolling sample buffer."""

from __future__ import annotations

import math
from collections import deque
from itertools import islice
from typing import Deque, Optional

import numpy as np


class RollingBuffer:
    """FIFO window of the most recent samples.

    Backed by a bounded deque, so ``push`` is O(1) and the oldest sample is
    dropped once capacity is reached.
    """

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._data: Deque[float] = deque(maxlen=int(capacity))

    @property
    def capacity(self) -> int:
        return self._data.maxlen or 0

    def __len__(self) -> int:
        return len(self._data)

    def push(self, sample: float) -> None:
        """Append one sample. Non-finite values are rejected with ValueError."""
        v = float(sample)
        if not math.isfinite(v):
            raise ValueError(f"sample must be finite, got {v}")
        self._data.append(v)

    def snapshot(self, n: int) -> Optional[np.ndarray]:
        """Return the last ``n`` samples oldest-first, or None if fewer are held."""
        if n <= 0:
            raise ValueError("snapshot length must be positive")
        if n > len(self._data):
            return None
        skip = len(self._data) - n
        return np.fromiter(islice(self._data, skip, None), dtype=np.float64, count=n)

    def clear(self) -> None:
        self._data.clear()
