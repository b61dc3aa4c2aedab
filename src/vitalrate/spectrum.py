"""Spectral estimation: detrend + radix-2 FFT + magnitude.

The transform is an iterative decimation-in-time FFT that works in place on
a pair of float64 arrays (real, imaginary). Each stage evaluates all of its
butterflies at once with numpy, so a 512-point window costs nine vector
passes. ``magnitude_spectrum`` copies its input, so callers never see the
in-place work.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Tuple

import numpy as np
from scipy.signal import detrend as _scipy_detrend

from .config import is_power_of_two
from .errors import ConfigurationError


def detrend(window: np.ndarray) -> np.ndarray:
    """Subtract the arithmetic mean (remove the DC component)."""
    x = np.asarray(window, dtype=np.float64)
    return _scipy_detrend(x, type="constant")


@lru_cache(maxsize=8)
def _bit_reversal(n: int) -> np.ndarray:
    bits = n.bit_length() - 1
    idx = np.arange(n, dtype=np.intp)
    rev = np.zeros(n, dtype=np.intp)
    for b in range(bits):
        rev |= ((idx >> b) & 1) << (bits - 1 - b)
    rev.setflags(write=False)
    return rev


@lru_cache(maxsize=32)
def _twiddles(size: int) -> Tuple[np.ndarray, np.ndarray]:
    angle = -2.0 * np.pi / size
    k = np.arange(size // 2, dtype=np.float64)
    wr = np.cos(angle * k)
    wi = np.sin(angle * k)
    wr.setflags(write=False)
    wi.setflags(write=False)
    return wr, wi


def fft_radix2(re: np.ndarray, im: np.ndarray) -> None:
    """In-place radix-2 DIT FFT.

    Args:
        re: real parts, 1D contiguous float64, length a power of two.
        im: imaginary parts, same shape as ``re``.

    Raises:
        ConfigurationError: if the length is not a power of two.
    """
    n = int(re.size)
    if not is_power_of_two(n):
        raise ConfigurationError(f"FFT length must be a power of two, got {n}")
    if re.shape != (n,) or im.shape != (n,):
        raise ValueError("re and im must be 1D arrays of equal length")
    if not (re.flags.c_contiguous and im.flags.c_contiguous):
        raise ValueError("re and im must be contiguous")

    rev = _bit_reversal(n)
    re[:] = re[rev]
    im[:] = im[rev]

    size = 2
    while size <= n:
        half = size // 2
        wr, wi = _twiddles(size)
        # one row per butterfly group
        r = re.reshape(-1, size)
        i = im.reshape(-1, size)
        ur = r[:, :half].copy()
        ui = i[:, :half].copy()
        vr = r[:, half:] * wr - i[:, half:] * wi
        vi = r[:, half:] * wi + i[:, half:] * wr
        r[:, :half] = ur + vr
        i[:, :half] = ui + vi
        r[:, half:] = ur - vr
        i[:, half:] = ui - vi
        size *= 2


def magnitude_spectrum(window: np.ndarray) -> np.ndarray:
    """Detrend a window and return ``|FFT|`` for every bin (length N).

    Only bins ``0..N/2`` carry information for real input.
    """
    x = np.asarray(window, dtype=np.float64)
    if x.ndim != 1:
        raise ValueError("window must be 1D")
    if not is_power_of_two(x.size):
        raise ConfigurationError(f"window length must be a power of two, got {x.size}")
    re = np.ascontiguousarray(detrend(x), dtype=np.float64).copy()
    im = np.zeros_like(re)
    fft_radix2(re, im)
    return np.sqrt(re * re + im * im)

