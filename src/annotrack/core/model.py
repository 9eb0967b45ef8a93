# AnnoTrack
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Tracks, aligned time series and the content decoded from their sources."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from enum import IntEnum
from typing import Union

import numpy as np

__all__ = [
    "TimeSeriesKind",
    "SensorTimeSeries",
    "VideoTimeSeries",
    "RawTimeSeries",
    "TimeSeries",
    "AlignedTimeSeries",
    "Track",
    "Label",
    "MappedLabel",
    "clone_track",
    "attempt_names",
]


class TimeSeriesKind(IntEnum):
    # Stored in saved files; do not renumber.
    TEMPERATURE = 1
    PRESSURE = 2
    BUTTON = 3
    GYROSCOPE = 4
    ACCELEROMETER = 5
    MAGNETOMETER = 6
    RAW = 7
    VIDEO = 100


@dataclass
class SensorTimeSeries:
    """One column of a sensor file, in the file's own (local) time base."""

    name: str
    timestamp_start: float
    timestamp_end: float
    sample_rate: float
    dimensions: list[np.ndarray]
    scales: list[tuple[float, float]]
    kind: TimeSeriesKind = TimeSeriesKind.ACCELEROMETER


@dataclass
class VideoTimeSeries:
    name: str
    filename: str
    timestamp_start: float
    timestamp_end: float
    width: int
    height: int
    video_duration: float
    kind: TimeSeriesKind = TimeSeriesKind.VIDEO


@dataclass
class RawTimeSeries:
    """Unparsed sensor rows kept for label export."""

    name: str
    timestamp_start: float
    timestamp_end: float
    time_column: np.ndarray
    raw_data: list[list[str]]
    kind: TimeSeriesKind = TimeSeriesKind.RAW

    @property
    def row_count(self) -> int:
        return len(self.raw_data)


TimeSeries = Union[SensorTimeSeries, VideoTimeSeries]


@dataclass(eq=False)
class AlignedTimeSeries:
    """Loaded content placed on the reference timeline.

    ``track_id`` is a lookup key into the project store's track index; the
    owning :class:`Track` holds the series, never the other way round.
    Loaded content is shared between clones because it is never mutated.
    """

    id: str
    track_id: str
    reference_start: float
    reference_end: float
    source: str
    aligned: bool = False
    time_series: list[TimeSeries] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.reference_end < self.reference_start:
            raise ValueError(
                f"referenceEnd ({self.reference_end}) precedes referenceStart "
                f"({self.reference_start}) for series {self.id!r}"
            )

    @property
    def local_start(self) -> float:
        return float(self.time_series[0].timestamp_start)

    @property
    def local_end(self) -> float:
        return float(self.time_series[0].timestamp_end)

    @property
    def duration(self) -> float:
        return self.reference_end - self.reference_start

    def clone(self, track_id: str | None = None) -> AlignedTimeSeries:
        return replace(
            self,
            track_id=self.track_id if track_id is None else track_id,
            time_series=list(self.time_series),
        )


@dataclass(eq=False)
class Track:
    id: str
    aligned_time_series: list[AlignedTimeSeries] = field(default_factory=list)
    minimized: bool = False

    def __str__(self) -> str:
        return self.id


def clone_track(track: Track | None) -> Track | None:
    """Return a structural copy of ``track`` that shares no mutable state."""

    if track is None:
        return None
    return Track(
        id=track.id,
        aligned_time_series=[series.clone(track.id) for series in track.aligned_time_series],
        minimized=track.minimized,
    )


@dataclass
class Label:
    """A class annotation over a reference-time interval."""

    class_name: str
    timestamp_start: float
    timestamp_end: float
    suggestion_generation: int | None = None
    suggestion_confidence: float | None = None

    def to_dict(self) -> dict:
        data: dict = {
            "className": self.class_name,
            "timestampStart": self.timestamp_start,
            "timestampEnd": self.timestamp_end,
        }
        if self.suggestion_generation is not None:
            data["suggestionGeneration"] = self.suggestion_generation
        if self.suggestion_confidence is not None:
            data["suggestionConfidence"] = self.suggestion_confidence
        return data

    @classmethod
    def from_dict(cls, data: dict) -> Label:
        return cls(
            class_name=str(data["className"]),
            timestamp_start=float(data["timestampStart"]),
            timestamp_end=float(data["timestampEnd"]),
            suggestion_generation=data.get("suggestionGeneration"),
            suggestion_confidence=data.get("suggestionConfidence"),
        )


@dataclass(frozen=True)
class MappedLabel:
    """A label projected into one series' local time base."""

    class_name: str
    timestamp_start: float
    timestamp_end: float


def attempt_names(prefix: str, is_free: Callable[[str], bool]) -> str:
    """Probe ``prefix1``, ``prefix2``, ... until ``is_free`` accepts one."""

    index = 1
    while True:
        candidate = f"{prefix}{index}"
        if is_free(candidate):
            return candidate
        index += 1
