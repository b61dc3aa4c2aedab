"""Error types."""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Invalid session parameters (window size, bands, region geometry)."""
