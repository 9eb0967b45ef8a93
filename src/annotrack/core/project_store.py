# AnnoTrack
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Canonical project model: tracks, persistence, undo/redo and export.

The store owns the reference track and the ordered list of other tracks,
keeps the id -> entity indices in step with them, and records alignment
and labeling snapshots into two independent histories. Every public
mutation reindexes before it notifies observers through Qt signals.
"""

from __future__ import annotations

import copy
import logging
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Any, assert_never

from PyQt5.QtCore import QObject, pyqtSignal

from annotrack.app import flags
from annotrack.io.content import is_sensor_file, load_content_from_file
from annotrack.io.sensors import load_raw_sensor_time_series, load_sensor_time_series
from annotrack.io.video import load_video_time_series
from annotrack.pkg.models import (
    DEFAULT_PROJECT_NAME,
    SavedAlignedTimeSeries,
    SavedMetadata,
    SavedProject,
    SavedTrack,
    SavedUIState,
)
from annotrack.pkg.project_file import ProjectLoadError, read_project_file, write_project_file
from annotrack.services.loader import DecodeScheduler, ThreadPoolLoader
from annotrack.services.recent_projects import RecentProjects

from .alignment import DegenerateAlignmentError
from .alignment_store import AlignmentStore
from .barrier import JoinBarrier
from .export import annotated_lines, write_annotated_rows
from .history import HistoryTracker
from .intents import (
    AlignmentRedo,
    AlignmentUndo,
    DeleteTrack,
    ExportLabels,
    Intent,
    LabelingRedo,
    LabelingUndo,
    LoadProject,
    LoadReferenceTrack,
    LoadSensorTrack,
    LoadVideoTrack,
    NewProject,
    SaveProject,
)
from .labeling_store import LabelingStore
from .model import AlignedTimeSeries, TimeSeries, Track, attempt_names, clone_track
from .ui_state import ProjectUiState, normalize_tab

__all__ = [
    "ProjectStore",
    "AlignmentSnapshot",
    "LabelingSnapshot",
    "TrackNotFoundError",
    "ProjectLoadError",
]

log = logging.getLogger(__name__)

DEFAULT_REFERENCE_START = 0.0
DEFAULT_REFERENCE_END = 100.0


class TrackNotFoundError(KeyError):
    """Raised when a track to delete is not part of the track list."""


@dataclass(frozen=True)
class AlignmentSnapshot:
    reference_track: Track | None
    tracks: tuple[Track, ...]
    alignment: dict[str, Any]


@dataclass(frozen=True)
class LabelingSnapshot:
    labeling: dict[str, Any]


class ProjectStore(QObject):
    """Owns the live project model; all mutation goes through this class."""

    tracks_changed = pyqtSignal()
    recent_projects_changed = pyqtSignal()
    project_loaded = pyqtSignal(str)
    load_failed = pyqtSignal(str, str)
    history_changed = pyqtSignal()

    def __init__(
        self,
        loader: DecodeScheduler | None = None,
        recent_projects: RecentProjects | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._loader = loader if loader is not None else ThreadPoolLoader(parent=self)
        self._recent = recent_projects if recent_projects is not None else RecentProjects()

        self._reference_track: Track | None = None
        self._tracks: list[Track] = []
        self._tracks_by_id: dict[str, Track] = {}
        self._series_by_id: dict[str, AlignedTimeSeries] = {}
        self.project_file_location: str | None = None

        self._alignment_history: HistoryTracker[AlignmentSnapshot] = HistoryTracker()
        self._labeling_history: HistoryTracker[LabelingSnapshot] = HistoryTracker()

        self.alignment_store = AlignmentStore(self)
        self.labeling_store = LabelingStore(self.labeling_history_record)
        self.ui_state = ProjectUiState()

    # ------------------------------------------------------------------ model access
    @property
    def reference_track(self) -> Track | None:
        return self._reference_track

    @property
    def tracks(self) -> tuple[Track, ...]:
        return tuple(self._tracks)

    def get_track_by_id(self, track_id: str) -> Track | None:
        return self._tracks_by_id.get(track_id)

    def get_time_series_by_id(self, series_id: str) -> AlignedTimeSeries | None:
        return self._series_by_id.get(series_id)

    @property
    def track_ids(self) -> set[str]:
        return set(self._tracks_by_id)

    @property
    def time_series_ids(self) -> set[str]:
        return set(self._series_by_id)

    def new_track_id(self) -> str:
        return attempt_names("track-", lambda name: name not in self._tracks_by_id)

    def new_time_series_id(self) -> str:
        return attempt_names("series-", lambda name: name not in self._series_by_id)

    @property
    def reference_timestamp_start(self) -> float:
        if self._reference_track is None or not self._reference_track.aligned_time_series:
            return DEFAULT_REFERENCE_START
        return min(s.reference_start for s in self._reference_track.aligned_time_series)

    @property
    def reference_timestamp_end(self) -> float:
        if self._reference_track is None or not self._reference_track.aligned_time_series:
            return DEFAULT_REFERENCE_END
        return max(s.reference_end for s in self._reference_track.aligned_time_series)

    @property
    def recent_projects(self) -> list[str]:
        return self._recent.paths

    def reindex(self) -> None:
        """Rebuild both id indices from the reference track and the track list."""

        tracks_by_id: dict[str, Track] = {}
        series_by_id: dict[str, AlignedTimeSeries] = {}
        for track in self._all_tracks():
            tracks_by_id[track.id] = track
            for series in track.aligned_time_series:
                series_by_id[series.id] = series
        self._tracks_by_id = tracks_by_id
        self._series_by_id = series_by_id

    def _all_tracks(self) -> list[Track]:
        head = [self._reference_track] if self._reference_track is not None else []
        return head + self._tracks

    # ------------------------------------------------------------------ structure
    def new_project(self) -> None:
        self.project_file_location = None
        self._reference_track = None
        self._tracks = []
        self.reindex()
        self.alignment_store.reset()
        self.labeling_store.reset()
        self.ui_state.reset()
        self._alignment_history.reset()
        self._labeling_history.reset()
        log.info("Started a new project")
        self.tracks_changed.emit()
        self.history_changed.emit()

    def load_reference_track(self, file_name: str) -> None:
        self._load_track(file_name, partial(load_content_from_file, file_name), reference=True)

    def load_video_track(self, file_name: str) -> None:
        job = partial(_as_list, load_video_time_series, file_name)
        self._load_track(file_name, job, reference=False)

    def load_sensor_track(self, file_name: str) -> None:
        job = partial(load_sensor_time_series, file_name)
        self._load_track(file_name, job, reference=False)

    def _load_track(
        self, file_name: str, job: Callable[[], list[TimeSeries]], *, reference: bool
    ) -> None:
        """Record an alignment snapshot, then decode ``file_name`` with ``job``.

        The snapshot is taken before the decode starts so that an undo issued
        while the decode is pending still returns to the pre-load state. It is
        kept when the decode fails: the redo stack is already cleared at that
        point and undoing the entry restores an identical model.
        """
        self.alignment_history_record()
        self._loader.submit(
            job,
            partial(self._install_track, str(file_name), reference=reference),
            partial(self._report_decode_failure, str(file_name)),
        )

    def _install_track(self, file_name: str, content: list[TimeSeries], *, reference: bool) -> None:
        first = content[0]
        track = Track(self.new_track_id())
        track.aligned_time_series.append(
            AlignedTimeSeries(
                id=self.new_time_series_id(),
                track_id=track.id,
                reference_start=0.0,
                reference_end=float(first.timestamp_end - first.timestamp_start),
                source=file_name,
                time_series=list(content),
            )
        )
        if reference:
            self._reference_track = track
        else:
            self._tracks.append(track)
        self.reindex()
        self.alignment_store.on_tracks_changed()
        log.info(
            "Loaded %s track %s from %s", "reference" if reference else "data", track.id, file_name
        )
        self.tracks_changed.emit()

    def _report_decode_failure(self, file_name: str, exc: Exception) -> None:
        # The history entry recorded by _load_track stays in place.
        log.error("Failed to load %s: %s", file_name, exc)
        self.load_failed.emit(file_name, str(exc))

    def delete_track(self, track: Track | str) -> None:
        """Remove ``track`` (or the track with that id) from the track list.

        Raises:
            TrackNotFoundError: If the track is not in the list. Nothing is
                recorded or changed in that case.
        """

        if isinstance(track, str):
            target = self._tracks_by_id.get(track)
        else:
            target = track
        if target is None or not any(t is target for t in self._tracks):
            raise TrackNotFoundError(track if isinstance(track, str) else track.id)

        self.alignment_history_record()
        self._tracks = [t for t in self._tracks if t is not target]
        self.reindex()
        self.alignment_store.on_tracks_changed()
        log.debug("Deleted track %s", target.id)
        self.tracks_changed.emit()

    # ------------------------------------------------------------------ persistence
    def saved_project(self, name: str = DEFAULT_PROJECT_NAME) -> SavedProject:
        return SavedProject(
            reference_track=_save_track(self._reference_track) if self._reference_track else None,
            tracks=[_save_track(track) for track in self._tracks],
            metadata=SavedMetadata(name=name),
            alignment=self.alignment_store.save_state(),
            labeling=self.labeling_store.save_state(),
            ui=SavedUIState(
                current_tab=self.ui_state.current_tab,
                reference_view_start=self.ui_state.reference_view_start,
                reference_view_pps=self.ui_state.reference_view_pps,
            ),
        )

    def save_project(self, file_name: str, name: str = DEFAULT_PROJECT_NAME) -> Path:
        path = write_project_file(self.saved_project(name), file_name)
        self.project_file_location = str(file_name)
        self._remember(str(file_name))
        return path

    def load_project(self, file_name: str, on_loaded: Callable[[], None] | None = None) -> None:
        """Decode every series of the project file, then install it in one step.

        Failures leave the current model and both histories as they were and
        are reported through :attr:`load_failed`.
        """

        path = str(file_name)
        try:
            project = read_project_file(path)
        except ProjectLoadError as exc:
            self._report_load_failure(exc)
            return

        barrier = JoinBarrier()
        failures: list[str] = []

        def load_series(saved: SavedAlignedTimeSeries, track_id: str) -> AlignedTimeSeries:
            series = AlignedTimeSeries(
                id=saved.id,
                track_id=track_id,
                reference_start=saved.reference_start,
                reference_end=saved.reference_end,
                source=saved.source,
                aligned=saved.aligned,
            )
            done = barrier.register()

            def on_success(content: list[TimeSeries]) -> None:
                series.time_series = list(content)
                done()

            def on_error(exc: Exception) -> None:
                failures.append(str(exc))
                done()

            self._loader.submit(partial(load_content_from_file, saved.source), on_success, on_error)
            return series

        def load_track(saved: SavedTrack) -> Track:
            track = Track(id=saved.id, minimized=saved.minimized)
            track.aligned_time_series = [load_series(s, track.id) for s in saved.time_series]
            return track

        reference = load_track(project.reference_track) if project.reference_track else None
        tracks = [load_track(saved) for saved in project.tracks]
        log.debug("Waiting on %d decodes for %s", barrier.waiting, path)

        def commit() -> None:
            if failures:
                self._report_load_failure(ProjectLoadError(path, "; ".join(failures)))
                return
            self._alignment_history.reset()
            self._labeling_history.reset()
            self._reference_track = reference
            self._tracks = tracks
            self.reindex()
            self.alignment_store.load_state(project.alignment)
            self.labeling_store.reset()
            self.labeling_store.load_state(project.labeling)
            self.ui_state.set_reference_view_zooming(
                project.ui.reference_view_start, project.ui.reference_view_pps
            )
            self.ui_state.current_tab = normalize_tab(project.ui.current_tab)
            self.project_file_location = path
            self._remember(path)
            log.info("Loaded project %s (%d tracks)", path, len(tracks))
            self.tracks_changed.emit()
            self.history_changed.emit()
            self.project_loaded.emit(path)
            if on_loaded is not None:
                on_loaded()

        barrier.on_complete(commit)

    def _report_load_failure(self, exc: ProjectLoadError) -> None:
        log.error("%s", exc)
        self.load_failed.emit(exc.path, str(exc))

    def _remember(self, path: str) -> None:
        self._recent.add(path)
        self.recent_projects_changed.emit()

    def export_labels(self, file_name: str) -> list[Path]:
        """Write the labels onto the rows of every sensor series.

        With a single sensor series the output goes to ``file_name``.
        Otherwise each series is written beside it as
        ``<stem>.<track-id><suffix>``, with ``.<series-id>`` appended to the
        track id when one track holds several sensor series. Tracks that
        share a source file each get their own output, mapped through their
        own bounds.
        """

        dest = Path(file_name)
        use_cached = flags.is_enabled(flags.EXPORT_CACHED_BOUNDS)
        targets: list[tuple[Track, AlignedTimeSeries]] = []
        for track in self._tracks:
            for series in track.aligned_time_series:
                if not is_sensor_file(series.source):
                    log.debug("Skipping export of non-sensor source %s", series.source)
                    continue
                targets.append((track, series))
        per_track = Counter(track.id for track, _series in targets)

        written: list[Path] = []
        for track, series in targets:
            raw = load_raw_sensor_time_series(series.source)
            bounds = None
            if use_cached and series.time_series:
                bounds = (series.local_start, series.local_end)
            try:
                lines = annotated_lines(
                    raw,
                    self.labeling_store.labels,
                    series.reference_start,
                    series.reference_end,
                    local_bounds=bounds,
                )
            except DegenerateAlignmentError as exc:
                log.warning("Skipping export of %s: %s", series.source, exc)
                continue
            out = dest
            if len(targets) > 1:
                tag = track.id
                if per_track[track.id] > 1:
                    tag = f"{track.id}.{series.id}"
                out = dest.with_name(f"{dest.stem}.{tag}{dest.suffix}")
            written.append(write_annotated_rows(lines, out))
        return written

    # ------------------------------------------------------------------ history
    def get_alignment_snapshot(self) -> AlignmentSnapshot:
        return AlignmentSnapshot(
            reference_track=clone_track(self._reference_track),
            tracks=tuple(clone_track(track) for track in self._tracks),
            alignment=copy.deepcopy(self.alignment_store.save_state()),
        )

    def load_alignment_snapshot(self, snapshot: AlignmentSnapshot) -> None:
        self._reference_track = clone_track(snapshot.reference_track)
        self._tracks = [clone_track(track) for track in snapshot.tracks]
        self.reindex()
        self.alignment_store.load_state(copy.deepcopy(snapshot.alignment))
        self.tracks_changed.emit()

    def get_labeling_snapshot(self) -> LabelingSnapshot:
        return LabelingSnapshot(labeling=copy.deepcopy(self.labeling_store.save_state()))

    def load_labeling_snapshot(self, snapshot: LabelingSnapshot) -> None:
        self.labeling_store.load_state(copy.deepcopy(snapshot.labeling))

    def alignment_history_record(self) -> None:
        self._alignment_history.add(self.get_alignment_snapshot())
        self.history_changed.emit()

    def labeling_history_record(self) -> None:
        self._labeling_history.add(self.get_labeling_snapshot())
        self.history_changed.emit()

    @property
    def can_undo_alignment(self) -> bool:
        return self._alignment_history.can_undo

    @property
    def can_redo_alignment(self) -> bool:
        return self._alignment_history.can_redo

    @property
    def can_undo_labeling(self) -> bool:
        return self._labeling_history.can_undo

    @property
    def can_redo_labeling(self) -> bool:
        return self._labeling_history.can_redo

    def alignment_undo(self) -> None:
        snapshot = self._alignment_history.undo(self.get_alignment_snapshot())
        if snapshot is not None:
            self.load_alignment_snapshot(snapshot)
            self.history_changed.emit()

    def alignment_redo(self) -> None:
        snapshot = self._alignment_history.redo(self.get_alignment_snapshot())
        if snapshot is not None:
            self.load_alignment_snapshot(snapshot)
            self.history_changed.emit()

    def labeling_undo(self) -> None:
        snapshot = self._labeling_history.undo(self.get_labeling_snapshot())
        if snapshot is not None:
            self.load_labeling_snapshot(snapshot)
            self.history_changed.emit()

    def labeling_redo(self) -> None:
        snapshot = self._labeling_history.redo(self.get_labeling_snapshot())
        if snapshot is not None:
            self.load_labeling_snapshot(snapshot)
            self.history_changed.emit()

    # ------------------------------------------------------------------ intents
    def dispatch(self, intent: Intent) -> None:
        match intent:
            case NewProject():
                self.new_project()
            case LoadReferenceTrack(file_name=file_name):
                self.load_reference_track(file_name)
            case LoadVideoTrack(file_name=file_name):
                self.load_video_track(file_name)
            case LoadSensorTrack(file_name=file_name):
                self.load_sensor_track(file_name)
            case DeleteTrack(track=track):
                self.delete_track(track)
            case SaveProject(file_name=file_name):
                self.save_project(file_name)
            case LoadProject(file_name=file_name, on_loaded=on_loaded):
                self.load_project(file_name, on_loaded)
            case ExportLabels(file_name=file_name):
                self.export_labels(file_name)
            case AlignmentUndo():
                self.alignment_undo()
            case AlignmentRedo():
                self.alignment_redo()
            case LabelingUndo():
                self.labeling_undo()
            case LabelingRedo():
                self.labeling_redo()
            case _:
                assert_never(intent)


def _as_list(loader: Callable[[str], TimeSeries], file_name: str) -> list[TimeSeries]:
    return [loader(file_name)]


def _save_track(track: Track) -> SavedTrack:
    return SavedTrack(
        id=track.id,
        minimized=track.minimized,
        time_series=[
            SavedAlignedTimeSeries(
                id=series.id,
                track_id=track.id,
                reference_start=series.reference_start,
                reference_end=series.reference_end,
                source=series.source,
                aligned=series.aligned,
            )
            for series in track.aligned_time_series
        ],
    )
