"""Session parameters.

All values are fixed when a session is constructed; invalid combinations
raise ConfigurationError immediately.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple, Union

from .errors import ConfigurationError

SAMPLE_RATE_HZ = 30.0
WINDOW_SIZE = 512
BUFFER_CAPACITY = 600
HEART_BAND_HZ = (0.8, 3.5)  # 48..210 BPM
RESPIRATION_BAND_HZ = (0.15, 0.4)  # 9..24 breaths/min


@dataclass(frozen=True)
class RegionGeometry:
    """Rectangular ROI in pixel coordinates; the sampled ellipse is inscribed in it."""

    x: int
    y: int
    width: int
    height: int

    def check(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ConfigurationError(
                f"region must have positive size, got {self.width}x{self.height}"
            )
        if self.x < 0 or self.y < 0:
            raise ConfigurationError(f"region origin must be non-negative, got ({self.x}, {self.y})")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "RegionGeometry":
        try:
            return cls(
                x=int(data["x"]),
                y=int(data["y"]),
                width=int(data["width"]),
                height=int(data["height"]),
            )
        except KeyError as exc:
            raise ConfigurationError(f"region is missing key {exc}") from exc


def is_power_of_two(n: int) -> bool:
    return n > 0 and (n & (n - 1)) == 0


# camelCase option names accepted by from_mapping
_ALIASES = {
    "sampleRateHz": "sample_rate_hz",
    "windowSize": "window_size",
    "bufferCapacity": "buffer_capacity",
    "heartBandHz": "heart_band_hz",
    "respirationBandHz": "respiration_band_hz",
    "historyLimit": "history_limit",
}


@dataclass(frozen=True)
class PipelineConfig:
    sample_rate_hz: float = SAMPLE_RATE_HZ
    window_size: int = WINDOW_SIZE
    buffer_capacity: int = BUFFER_CAPACITY
    heart_band_hz: Tuple[float, float] = HEART_BAND_HZ
    respiration_band_hz: Tuple[float, float] = RESPIRATION_BAND_HZ
    region: Optional[RegionGeometry] = field(default=None)
    history_limit: Optional[int] = None  # None keeps every estimate

    def __post_init__(self) -> None:
        if self.sample_rate_hz <= 0:
            raise ConfigurationError(f"sample rate must be positive, got {self.sample_rate_hz}")
        if not is_power_of_two(int(self.window_size)) or int(self.window_size) != self.window_size:
            raise ConfigurationError(f"window size must be a power of two, got {self.window_size}")
        if self.buffer_capacity < self.window_size:
            raise ConfigurationError(
                f"buffer capacity {self.buffer_capacity} is smaller than window size {self.window_size}"
            )
        nyquist = 0.5 * self.sample_rate_hz
        for name, band in (
            ("heart", self.heart_band_hz),
            ("respiration", self.respiration_band_hz),
        ):
            low, high = band
            if not (0.0 <= low < high <= nyquist):
                raise ConfigurationError(
                    f"{name} band {tuple(band)} must satisfy 0 <= low < high <= {nyquist}"
                )
        if self.region is not None:
            self.region.check()
        if self.history_limit is not None and self.history_limit <= 0:
            raise ConfigurationError(f"history limit must be positive, got {self.history_limit}")

    @property
    def bin_width_hz(self) -> float:
        return self.sample_rate_hz / self.window_size

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PipelineConfig":
        """Build a config from plain options (snake_case or camelCase keys)."""
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            name = _ALIASES.get(key, key)
            if name not in known:
                raise ConfigurationError(f"unknown option: {key}")
            if name == "region" and value is not None and not isinstance(value, RegionGeometry):
                value = RegionGeometry.from_mapping(value)
            elif name in ("heart_band_hz", "respiration_band_hz"):
                value = tuple(float(v) for v in value)
                if len(value) != 2:
                    raise ConfigurationError(f"{key} must have exactly two bounds")
            kwargs[name] = value
        return cls(**kwargs)


def load_config(path: Union[str, Path], defaults: Optional[Mapping[str, Any]] = None) -> PipelineConfig:
    """Read options from a JSON object file; keys in the file override ``defaults``.

    Raises:
        ConfigurationError: if the file is unreadable, not a JSON object, or invalid.
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ConfigurationError(f"cannot read config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"config file {path} must contain a JSON object")
    merged: dict[str, Any] = {}
    for key, value in {**(defaults or {}), **data}.items():
        merged[_ALIASES.get(key, key)] = value
    return PipelineConfig.from_mapping(merged)
