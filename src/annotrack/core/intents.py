"""Intents accepted by :meth:`annotrack.core.project_store.ProjectStore.dispatch`."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Union

from .model import Track

__all__ = [
    "NewProject",
    "LoadReferenceTrack",
    "LoadVideoTrack",
    "LoadSensorTrack",
    "DeleteTrack",
    "SaveProject",
    "LoadProject",
    "ExportLabels",
    "AlignmentUndo",
    "AlignmentRedo",
    "LabelingUndo",
    "LabelingRedo",
    "Intent",
]


@dataclass(frozen=True)
class NewProject:
    pass


@dataclass(frozen=True)
class LoadReferenceTrack:
    file_name: str


@dataclass(frozen=True)
class LoadVideoTrack:
    file_name: str


@dataclass(frozen=True)
class LoadSensorTrack:
    file_name: str


@dataclass(frozen=True)
class DeleteTrack:
    track: Track | str


@dataclass(frozen=True)
class SaveProject:
    file_name: str


@dataclass(frozen=True)
class LoadProject:
    file_name: str
    on_loaded: Callable[[], None] | None = None


@dataclass(frozen=True)
class ExportLabels:
    file_name: str


@dataclass(frozen=True)
class AlignmentUndo:
    pass


@dataclass(frozen=True)
class AlignmentRedo:
    pass


@dataclass(frozen=True)
class LabelingUndo:
    pass


@dataclass(frozen=True)
class LabelingRedo:
    pass


Intent = Union[
    NewProject,
    LoadReferenceTrack,
    LoadVideoTrack,
    LoadSensorTrack,
    DeleteTrack,
    SaveProject,
    LoadProject,
    ExportLabels,
    AlignmentUndo,
    AlignmentRedo,
    LabelingUndo,
    LabelingRedo,
]
