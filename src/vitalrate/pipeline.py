"""Per-session measurement pipeline.

One ``VitalsSession`` owns all mutable state of a measurement: the rolling
sample buffer, and a rate history plus running statistics per band. Each
call to ``process_frame`` runs the whole chain synchronously:

    sample -> buffer -> magnitude spectrum -> peak per band -> rate -> stats

Nothing is shared between sessions.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, List, Optional

import numpy as np

from .bands import FrequencyBand
from .bpm import estimate_rate
from .buffer import RollingBuffer
from .config import PipelineConfig
from .errors import ConfigurationError
from .roi import WeightedRegionMask, compute_mask, sample
from .spectrum import magnitude_spectrum
from .stats import RunningStats, StatsSummary

logger = logging.getLogger(__name__)

HEART = "heart"
RESPIRATION = "respiration"


@dataclass(frozen=True)
class RateEstimate:
    value: float  # per minute
    tick: int


@dataclass(frozen=True)
class FrameResult:
    heart_rate: Optional[float]  # None while pending
    respiration_rate: Optional[float]

    @property
    def pending(self) -> bool:
        return self.heart_rate is None


@dataclass(frozen=True)
class Summaries:
    heart: Optional[StatsSummary]  # None when empty
    respiration: Optional[StatsSummary]


class VitalsSession:
    """Heart/respiration rate estimation over a sliding window of samples."""

    def __init__(self, config: Optional[PipelineConfig] = None) -> None:
        self.config = config or PipelineConfig()
        cfg = self.config
        self._bands = {
            HEART: FrequencyBand(HEART, *cfg.heart_band_hz),
            RESPIRATION: FrequencyBand(RESPIRATION, *cfg.respiration_band_hz),
        }
        self._mask: Optional[WeightedRegionMask] = (
            compute_mask(cfg.region) if cfg.region is not None else None
        )
        self._buffer = RollingBuffer(cfg.buffer_capacity)
        self._history: Dict[str, Deque[RateEstimate]] = {
            name: deque(maxlen=cfg.history_limit) for name in self._bands
        }
        self._stats: Dict[str, RunningStats] = {name: RunningStats() for name in self._bands}
        self._last = FrameResult(None, None)
        self._last_tick: Optional[int] = None
        self._lock = threading.Lock()
        logger.info(
            "session created: fs=%.2f Hz, window=%d, capacity=%d, heart=%s Hz, resp=%s Hz",
            cfg.sample_rate_hz,
            cfg.window_size,
            cfg.buffer_capacity,
            cfg.heart_band_hz,
            cfg.respiration_band_hz,
        )

    @property
    def mask(self) -> Optional[WeightedRegionMask]:
        return self._mask

    @property
    def samples_needed(self) -> int:
        """Samples still missing before the first estimate."""
        with self._lock:
            return max(0, self.config.window_size - len(self._buffer))

    @property
    def last_result(self) -> FrameResult:
        with self._lock:
            return self._last

    @property
    def last_tick(self) -> Optional[int]:
        with self._lock:
            return self._last_tick

    def process_frame(self, frame_sample: float, now_tick: int) -> FrameResult:
        """Push one sample and, once the window is full, estimate both rates.

        Raises:
            ValueError: if ``frame_sample`` is NaN or infinite. The session is left unchanged.
        """
        cfg = self.config
        with self._lock:
            self._buffer.push(frame_sample)
            self._last_tick = now_tick
            window = self._buffer.snapshot(cfg.window_size)
            if window is None:
                self._last = FrameResult(None, None)
                return self._last

            spectrum = magnitude_spectrum(window)
            rates = {}
            for name, band in self._bands.items():
                rate, k = estimate_rate(spectrum, band, cfg.sample_rate_hz)
                self._history[name].append(RateEstimate(rate, now_tick))
                self._stats[name].record(rate)
                rates[name] = rate
                logger.debug("tick %d: %s bin %d -> %.1f/min", now_tick, name, k, rate)
            if len(self._stats[HEART]) == 1:
                logger.info(
                    "first estimate at tick %d: heart %.1f BPM, respiration %.1f/min",
                    now_tick,
                    rates[HEART],
                    rates[RESPIRATION],
                )
            self._last = FrameResult(rates[HEART], rates[RESPIRATION])
            return self._last

    def process_pixels(self, frame: np.ndarray, now_tick: int) -> FrameResult:
        """Sample the configured ROI of a raw frame and process it."""
        if self._mask is None:
            raise ConfigurationError("session has no region configured")
        return self.process_frame(sample(frame, self._mask), now_tick)

    def get_summaries(self) -> Summaries:
        with self._lock:
            return Summaries(
                heart=self._stats[HEART].summary(),
                respiration=self._stats[RESPIRATION].summary(),
            )

    def history(self, band: str) -> List[RateEstimate]:
        """Copy of the rate history for ``band`` ("heart" or "respiration").

        Only the last ``config.history_limit`` estimates are kept when a limit is set;
        the summaries still cover every estimate.
        """
        if band not in self._history:
            raise KeyError(f"unknown band: {band}")
        with self._lock:
            return list(self._history[band])

    def reset_session(self) -> None:
        """Clear buffered samples, rate histories and statistics."""
        with self._lock:
            self._buffer.clear()
            for name in self._bands:
                self._history[name].clear()
                self._stats[name].reset()
            self._last = FrameResult(None, None)
            self._last_tick = None
        logger.info("session reset")
