"""Frequency bands and center-biased peak selection."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np


@dataclass(frozen=True)
class FrequencyBand:
    name: str
    low_hz: float
    high_hz: float


def band_bins(band: FrequencyBand, sample_rate: float, window_size: int) -> Tuple[int, int]:
    """Inclusive bin range covering the band: ``floor(low/df)..ceil(high/df)``.

    The upper bin is clipped to the Nyquist bin ``window_size // 2``.
    """
    df = sample_rate / window_size
    start = int(math.floor(band.low_hz / df))
    end = int(math.ceil(band.high_hz / df))
    return start, min(end, window_size // 2)


def select_peak(spectrum: np.ndarray, bin_start: int, bin_end: int) -> int:
    """Pick the dominant bin in ``[bin_start, bin_end]`` with a bias toward mid-band.

    Each bin is scored ``exp(-0.5 * ((i - center) / spread)**2) * mag[i]`` with
    ``center`` the band midpoint and ``spread`` the band width. Ties go to the
    lowest index. When every magnitude in range is zero the bin nearest the
    center is returned.
    """
    mag = np.asarray(spectrum, dtype=np.float64)
    if not np.all(np.isfinite(mag)):
        raise ValueError("spectrum contains non-finite values")
    nyquist = mag.size // 2
    bin_end = min(int(bin_end), nyquist)
    bin_start = int(bin_start)
    if bin_start < 0 or bin_end < bin_start:
        raise ValueError(f"invalid bin range [{bin_start}, {bin_end}]")

    idx = np.arange(bin_start, bin_end + 1)
    center = 0.5 * (bin_start + bin_end)
    spread = float(bin_end - bin_start)
    if spread > 0:
        weights = np.exp(-0.5 * ((idx - center) / spread) ** 2)
    else:
        weights = np.ones(1, dtype=np.float64)

    score = weights * mag[idx]
    if not np.any(score > 0):
        return int(idx[np.argmax(weights)])
    return int(idx[np.argmax(score)])
