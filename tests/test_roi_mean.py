from __future__ import annotations

import numpy as np
import pytest

from vitalrate.config import RegionGeometry
from vitalrate.errors import ConfigurationError
from vitalrate.roi import compute_mask, sample


def _r2(geom: RegionGeometry, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
    ax, ay = geom.width / 2.0, geom.height / 2.0
    cx, cy = geom.x + ax, geom.y + ay
    return ((xs + 0.5 - cx) / ax) ** 2 + ((ys + 0.5 - cy) / ay) ** 2


def test_mask_weights_bounded_and_decreasing_with_radius() -> None:
    geom = RegionGeometry(x=3, y=5, width=21, height=15)
    mask = compute_mask(geom)
    assert 0 < len(mask) < geom.width * geom.height
    assert np.all(mask.weights >= 0.5)
    assert np.all(mask.weights <= 1.0)
    r2 = _r2(geom, mask.xs, mask.ys)
    assert np.all(r2 <= 1.0)
    order = np.argsort(r2, kind="stable")
    assert np.all(np.diff(mask.weights[order]) <= 1e-12)
    # all pixels lie inside the rectangle
    assert mask.xs.min() >= 3 and mask.xs.max() < 3 + 21
    assert mask.ys.min() >= 5 and mask.ys.max() < 5 + 15


def test_center_pixel_has_full_weight() -> None:
    mask = compute_mask(RegionGeometry(0, 0, 11, 11))
    i = int(np.argmax(mask.weights))
    assert (int(mask.xs[i]), int(mask.ys[i])) == (5, 5)
    assert mask.weights[i] == pytest.approx(1.0)


def test_mask_is_immutable() -> None:
    mask = compute_mask(RegionGeometry(0, 0, 8, 8))
    with pytest.raises(ValueError):
        mask.weights[0] = 0.0


def test_invalid_geometry_rejected() -> None:
    with pytest.raises(ConfigurationError):
        compute_mask(RegionGeometry(0, 0, 0, 10))
    with pytest.raises(ConfigurationError):
        compute_mask(RegionGeometry(0, 0, 10, -1))


def test_sample_uses_green_channel_only() -> None:
    frame = np.zeros((20, 20, 3), dtype=np.uint8)
    frame[..., 0] = 255
    frame[..., 1] = 10
    mask = compute_mask(RegionGeometry(2, 2, 12, 10))
    assert sample(frame, mask) == pytest.approx(10.0)


def test_sample_is_weighted_mean() -> None:
    # green = column index; weights are symmetric about the ROI center
    frame = np.zeros((16, 16, 4), dtype=np.float32)
    frame[..., 1] = np.arange(16, dtype=np.float32)[None, :]
    mask = compute_mask(RegionGeometry(x=2, y=1, width=10, height=12))
    assert sample(frame, mask) == pytest.approx(6.5)

    frame[..., 1] = 0.0
    frame[7, 7, 1] = 100.0
    expected = 100.0 * float(mask.weights[(mask.xs == 7) & (mask.ys == 7)][0]) / mask.total_weight
    assert sample(frame, mask) == pytest.approx(expected)


def test_sample_rejects_non_color_frames() -> None:
    mask = compute_mask(RegionGeometry(0, 0, 4, 4))
    with pytest.raises(ValueError):
        sample(np.zeros((4, 4)), mask)
