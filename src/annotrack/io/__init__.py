"""File decoding for sensor and video sources.

Submodules expose the concrete loaders, e.g.
``from annotrack.io.sensors import load_sensor_time_series``.
"""

from __future__ import annotations

__all__ = ["DecodeError"]


class DecodeError(ValueError):
    """Raised when a source file cannot be decoded into time series."""

    def __init__(self, path, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Cannot decode {self.path}: {reason}")
