"""Bin to rate conversion."""

from __future__ import annotations

from typing import Tuple

import numpy as np

from .bands import FrequencyBand, band_bins, select_peak


def to_rate_per_minute(bin_index: int, sample_rate: float, window_size: int) -> float:
    """Convert an FFT bin to cycles per minute (BPM or breaths/min)."""
    return float(bin_index) * sample_rate / window_size * 60.0


def estimate_rate(
    spectrum: np.ndarray,
    band: FrequencyBand,
    sample_rate: float,
) -> Tuple[float, int]:
    """Estimate a rate by the center-biased peak of ``spectrum`` within ``band``.

    Returns (rate_per_minute, bin_index).
    """
    n = int(np.asarray(spectrum).size)
    start, end = band_bins(band, sample_rate, n)
    k = select_peak(spectrum, start, end)
    return to_rate_per_minute(k, sample_rate, n), k
