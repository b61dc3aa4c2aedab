"""Heart and respiration rate estimation from a video intensity signal.

The pipeline samples a weighted elliptical ROI on the green channel, keeps
a rolling buffer of samples, and picks one spectral peak per band.
"""

from .config import PipelineConfig, RegionGeometry
from .errors import ConfigurationError
from .pipeline import FrameResult, Summaries, VitalsSession
from .stats import StatsSummary

__all__ = [
    "ConfigurationError",
    "FrameResult",
    "PipelineConfig",
    "RegionGeometry",
    "StatsSummary",
    "Summaries",
    "VitalsSession",
]

__version__ = "0.1.0"
