"""Pydantic schema of the JSON project file."""

from __future__ import annotations

import time
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

__all__ = [
    "SavedAlignedTimeSeries",
    "SavedTrack",
    "SavedMetadata",
    "SavedUIState",
    "SavedProject",
    "DEFAULT_PROJECT_NAME",
]

DEFAULT_PROJECT_NAME: Final[str] = "MyProject"


class _Saved(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class SavedAlignedTimeSeries(_Saved):
    id: str
    track_id: str = Field(alias="trackID")
    reference_start: float = Field(alias="referenceStart")
    reference_end: float = Field(alias="referenceEnd")
    source: str
    aligned: bool = False

    @model_validator(mode="after")
    def _bounds_ordered(self) -> SavedAlignedTimeSeries:
        if self.reference_end < self.reference_start:
            raise ValueError("referenceEnd must be >= referenceStart")
        return self


class SavedTrack(_Saved):
    id: str
    minimized: bool = False
    time_series: list[SavedAlignedTimeSeries] = Field(default_factory=list, alias="timeSeries")


class SavedMetadata(_Saved):
    name: str = DEFAULT_PROJECT_NAME
    time_saved: float = Field(default_factory=time.time, alias="timeSaved")


class SavedUIState(_Saved):
    current_tab: str = Field(default="alignment", alias="currentTab")
    reference_view_start: float = Field(default=0.0, alias="referenceViewStart")
    reference_view_pps: float = Field(default=1.0, alias="referenceViewPPS")

    @field_validator("reference_view_pps")
    def _pps_positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("referenceViewPPS must be > 0")
        return value


class SavedProject(_Saved):
    reference_track: SavedTrack | None = Field(default=None, alias="referenceTrack")
    tracks: list[SavedTrack] = Field(default_factory=list)
    metadata: SavedMetadata = Field(default_factory=SavedMetadata)
    alignment: dict[str, Any] = Field(default_factory=dict)
    labeling: dict[str, Any] = Field(default_factory=dict)
    ui: SavedUIState = Field(default_factory=SavedUIState)

    @model_validator(mode="after")
    def _unique_ids(self) -> SavedProject:
        tracks = ([self.reference_track] if self.reference_track else []) + self.tracks
        track_ids = [track.id for track in tracks]
        series_ids = [series.id for track in tracks for series in track.time_series]
        if len(set(track_ids)) != len(track_ids):
            raise ValueError("duplicate track id")
        if len(set(series_ids)) != len(series_ids):
            raise ValueError("duplicate time series id")
        return self

    def iter_series(self):
        tracks = ([self.reference_track] if self.reference_track else []) + self.tracks
        for track in tracks:
            yield from track.time_series
