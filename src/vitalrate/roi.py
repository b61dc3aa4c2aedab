"""Weighted elliptical ROI and green-channel sampling.

The mask keeps pixels inside the ellipse inscribed in the ROI rectangle and
weights them by ``0.5 + 0.5 * exp(-4 r^2)``, where ``r`` is the normalized
radial distance from the ellipse center. Center pixels count twice as much
as boundary pixels.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .config import RegionGeometry

GREEN = 1  # same index in RGB, RGBA and BGR frames


@dataclass(frozen=True)
class WeightedRegionMask:
    geometry: RegionGeometry
    xs: np.ndarray  # column indices
    ys: np.ndarray  # row indices
    weights: np.ndarray

    def __len__(self) -> int:
        return int(self.weights.size)

    @property
    def total_weight(self) -> float:
        return float(self.weights.sum())


def compute_mask(geometry: RegionGeometry) -> WeightedRegionMask:
    """Enumerate ROI pixels inside the inscribed ellipse with their weights.

    Pixels are listed row by row. Distances are measured from pixel centers.

    Raises:
        ConfigurationError: if the region has non-positive width or height.
    """
    geometry.check()
    ax = 0.5 * geometry.width
    ay = 0.5 * geometry.height
    cx = geometry.x + ax
    cy = geometry.y + ay

    cols = np.arange(geometry.x, geometry.x + geometry.width)
    rows = np.arange(geometry.y, geometry.y + geometry.height)
    yy, xx = np.meshgrid(rows, cols, indexing="ij")
    r2 = ((xx + 0.5 - cx) / ax) ** 2 + ((yy + 0.5 - cy) / ay) ** 2
    inside = r2 <= 1.0

    xs = xx[inside].astype(np.intp)
    ys = yy[inside].astype(np.intp)
    weights = 0.5 + 0.5 * np.exp(-4.0 * r2[inside])
    for arr in (xs, ys, weights):
        arr.setflags(write=False)
    return WeightedRegionMask(geometry=geometry, xs=xs, ys=ys, weights=weights)


def sample(frame: np.ndarray, mask: WeightedRegionMask, channel: int = GREEN) -> float:
    """Weighted mean of one color channel over the mask.

    Args:
        frame: HxWxC pixel array (uint8 or float). Must cover the mask's ROI.
        mask: precomputed mask from compute_mask.
        channel: channel index to sample, green by default.

    Returns:
        ``sum(w * v) / sum(w)`` as a float.
    """
    if frame.ndim != 3:
        raise ValueError("frame must be HxWxC array")
    values = frame[mask.ys, mask.xs, channel].astype(np.float64)
    return float(np.dot(mask.weights, values) / mask.total_weight)
