"""Pick a decoder for a source file by its suffix."""

from __future__ import annotations

from pathlib import Path

from annotrack.core.model import TimeSeries
from annotrack.io import DecodeError
from annotrack.io.sensors import load_sensor_time_series
from annotrack.io.video import VIDEO_SUFFIXES, load_video_time_series

__all__ = ["SENSOR_SUFFIXES", "is_sensor_file", "is_video_file", "load_content_from_file"]

SENSOR_SUFFIXES = frozenset({".tsv"})


def is_sensor_file(path) -> bool:
    return Path(path).suffix.lower() in SENSOR_SUFFIXES


def is_video_file(path) -> bool:
    return Path(path).suffix.lower() in VIDEO_SUFFIXES


def load_content_from_file(path) -> list[TimeSeries]:
    """Decode ``path``: a sensor file may yield several series, a video one."""

    if is_sensor_file(path):
        return list(load_sensor_time_series(path))
    if is_video_file(path):
        return [load_video_time_series(path)]
    raise DecodeError(path, f"unsupported file type {Path(path).suffix or '(none)'}")
