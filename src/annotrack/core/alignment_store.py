# AnnoTrack
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Alignment markers, correspondences between them, and realignment."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from .alignment import least_squares, solve_k_and_b, to_reference_time
from .model import AlignedTimeSeries, Track

__all__ = ["Marker", "MarkerCorrespondence", "AlignmentStore", "TrackSource"]

log = logging.getLogger(__name__)


class TrackSource(Protocol):
    """What the alignment store needs from its owner."""

    @property
    def reference_track(self) -> Track | None: ...

    @property
    def tracks(self) -> Sequence[Track]: ...

    def get_track_by_id(self, track_id: str) -> Track | None: ...

    def get_time_series_by_id(self, series_id: str) -> AlignedTimeSeries | None: ...

    def alignment_history_record(self) -> None: ...


@dataclass(eq=False)
class Marker:
    time_series_id: str
    local_timestamp: float


@dataclass(eq=False)
class MarkerCorrespondence:
    marker1: Marker
    marker2: Marker

    def other(self, series_id: str) -> tuple[Marker, Marker] | None:
        """Return ``(this, other)`` markers when the link touches ``series_id``."""

        if self.marker1.time_series_id == series_id:
            return self.marker1, self.marker2
        if self.marker2.time_series_id == series_id:
            return self.marker2, self.marker1
        return None


class AlignmentStore:
    def __init__(self, owner: TrackSource) -> None:
        self._owner = owner
        self.markers: list[Marker] = []
        self.correspondences: list[MarkerCorrespondence] = []
        # Per-series view state (rangeStart / pixelsPerSecond), persisted as-is.
        self.view_states: dict[str, dict[str, float | None]] = {}

    # ------------------------------------------------------------------ edits
    def add_marker(self, marker: Marker) -> None:
        self._owner.alignment_history_record()
        self.markers.append(marker)

    def update_marker(
        self,
        marker: Marker,
        local_timestamp: float,
        *,
        recompute: bool = True,
        record: bool = True,
    ) -> None:
        if record:
            self._owner.alignment_history_record()
        marker.local_timestamp = float(local_timestamp)
        if recompute:
            self.align_all_time_series()

    def delete_marker(self, marker: Marker) -> None:
        if marker not in self.markers:
            return
        self._owner.alignment_history_record()
        self.markers = [m for m in self.markers if m is not marker]
        self.correspondences = [
            c for c in self.correspondences if c.marker1 is not marker and c.marker2 is not marker
        ]
        self.align_all_time_series()

    def add_correspondence(self, marker1: Marker, marker2: Marker) -> MarkerCorrespondence:
        if marker1.time_series_id == marker2.time_series_id:
            raise ValueError("cannot link two markers on the same series")
        self._owner.alignment_history_record()
        self.correspondences = [
            c for c in self.correspondences if not _conflicts(c, marker1, marker2)
        ]
        correspondence = MarkerCorrespondence(marker1, marker2)
        self.correspondences.append(correspondence)
        self.align_all_time_series()
        return correspondence

    def delete_correspondence(self, correspondence: MarkerCorrespondence) -> None:
        if correspondence not in self.correspondences:
            return
        self._owner.alignment_history_record()
        self.correspondences = [c for c in self.correspondences if c is not correspondence]
        self.align_all_time_series()

    # ------------------------------------------------------------------ alignment
    def align_time_series(self, target: AlignedTimeSeries) -> tuple[float, float] | None:
        """Solve new reference bounds for ``target`` from links to the previous track."""

        tracks = list(self._owner.tracks)
        track = self._owner.get_track_by_id(target.track_id)
        if track is None or track not in tracks:
            return None
        index = tracks.index(track)
        previous = self._owner.reference_track if index == 0 else tracks[index - 1]
        if previous is None:
            return None
        previous_ids = {series.id for series in previous.aligned_time_series}

        pairs: list[tuple[float, float]] = []
        for correspondence in self.correspondences:
            ends = correspondence.other(target.id)
            if ends is None:
                continue
            this_marker, other_marker = ends
            if other_marker.time_series_id not in previous_ids:
                continue
            other = self._owner.get_time_series_by_id(other_marker.time_series_id)
            if other is None:
                continue
            if other.local_end == other.local_start:
                log.warning("Skipping link to zero-length series %s", other.id)
                continue
            k, b = solve_k_and_b(
                other.local_start, other.reference_start, other.local_end, other.reference_end
            )
            pairs.append(
                (to_reference_time(other_marker.local_timestamp, k, b), this_marker.local_timestamp)
            )

        fit = least_squares(pairs)
        if fit is None:
            return None
        k, b = fit
        start = k * target.local_start + b
        end = k * target.local_end + b
        if end < start:
            log.warning("Rejecting reversed alignment for %s (k=%.4g)", target.id, k)
            return None
        return start, end

    def align_all_time_series(self) -> None:
        for track in self._owner.tracks:
            for series in track.aligned_time_series:
                solved = self.align_time_series(series)
                if solved is not None:
                    series.reference_start, series.reference_end = solved
        self._update_aligned_flags()

    def connected_series(self, series_id: str) -> set[str]:
        """IDs of every series reachable from ``series_id`` through correspondences."""

        block = {series_id}
        added = True
        while added:
            added = False
            for c in self.correspondences:
                has1 = c.marker1.time_series_id in block
                has2 = c.marker2.time_series_id in block
                if has1 != has2:
                    block.add(c.marker2.time_series_id if has1 else c.marker1.time_series_id)
                    added = True
        return block

    def aligned_blocks(self) -> list[set[str]]:
        blocks: list[set[str]] = []
        visited: set[str] = set()
        for track in self._owner.tracks:
            for series in track.aligned_time_series:
                if series.id in visited:
                    continue
                block = self.connected_series(series.id)
                blocks.append(block)
                visited |= block
        return blocks

    def is_block_aligned(self, block: set[str]) -> bool:
        reference = self._owner.reference_track
        if reference is None:
            return False
        return any(series.id in block for series in reference.aligned_time_series)

    def _update_aligned_flags(self) -> None:
        for block in self.aligned_blocks():
            aligned = self.is_block_aligned(block)
            for series_id in block:
                series = self._owner.get_time_series_by_id(series_id)
                if series is not None and series.track_id != _reference_id(self._owner):
                    series.aligned = aligned

    def on_tracks_changed(self) -> None:
        """Drop markers on series that no longer exist and realign."""

        self.markers = [
            m
            for m in self.markers
            if self._owner.get_time_series_by_id(m.time_series_id) is not None
        ]
        kept = {id(m) for m in self.markers}
        self.correspondences = [
            c for c in self.correspondences if id(c.marker1) in kept and id(c.marker2) in kept
        ]
        self.view_states = {
            key: value
            for key, value in self.view_states.items()
            if self._owner.get_time_series_by_id(key) is not None
        }
        self.align_all_time_series()

    # ------------------------------------------------------------------ state
    def save_state(self) -> dict[str, Any]:
        marker_ids: dict[int, str] = {}
        saved_markers = []
        for index, marker in enumerate(self.markers, start=1):
            marker_id = f"marker{index}"
            marker_ids[id(marker)] = marker_id
            saved_markers.append(
                {
                    "id": marker_id,
                    "timeSeriesID": marker.time_series_id,
                    "localTimestamp": marker.local_timestamp,
                }
            )
        saved_correspondences = [
            {"marker1ID": marker_ids[id(c.marker1)], "marker2ID": marker_ids[id(c.marker2)]}
            for c in self.correspondences
            if id(c.marker1) in marker_ids and id(c.marker2) in marker_ids
        ]
        states: dict[str, dict[str, float | None]] = {}
        for track in _all_tracks(self._owner):
            for series in track.aligned_time_series:
                view = self.view_states.get(series.id, {})
                states[series.id] = {
                    "referenceStart": series.reference_start,
                    "referenceEnd": series.reference_end,
                    "rangeStart": view.get("rangeStart"),
                    "pixelsPerSecond": view.get("pixelsPerSecond"),
                }
        return {
            "markers": saved_markers,
            "correspondences": saved_correspondences,
            "timeSeriesStates": states,
        }

    def load_state(self, state: Mapping[str, Any]) -> None:
        self.markers = []
        self.correspondences = []
        self.view_states = {}

        by_id: dict[str, Marker] = {}
        for saved in state.get("markers", []):
            marker = Marker(str(saved["timeSeriesID"]), float(saved["localTimestamp"]))
            self.markers.append(marker)
            by_id[str(saved["id"])] = marker
        for saved in state.get("correspondences", []):
            marker1 = by_id.get(str(saved["marker1ID"]))
            marker2 = by_id.get(str(saved["marker2ID"]))
            if marker1 is None or marker2 is None:
                log.warning("Dropping correspondence with unknown marker: %s", saved)
                continue
            self.correspondences.append(MarkerCorrespondence(marker1, marker2))

        for series_id, saved in (state.get("timeSeriesStates") or {}).items():
            series = self._owner.get_time_series_by_id(series_id)
            if series is None:
                log.warning("Saved alignment state refers to unknown series %s", series_id)
                continue
            start = float(saved["referenceStart"])
            end = float(saved["referenceEnd"])
            if end >= start:
                series.reference_start, series.reference_end = start, end
            self.view_states[series_id] = {
                "rangeStart": saved.get("rangeStart"),
                "pixelsPerSecond": saved.get("pixelsPerSecond"),
            }
        self.on_tracks_changed()

    def reset(self) -> None:
        self.markers = []
        self.correspondences = []
        self.view_states = {}
        self.align_all_time_series()


def _all_tracks(owner: TrackSource) -> list[Track]:
    reference = owner.reference_track
    return ([reference] if reference is not None else []) + list(owner.tracks)


def _reference_id(owner: TrackSource) -> str | None:
    reference = owner.reference_track
    return reference.id if reference is not None else None


def _conflicts(existing: MarkerCorrespondence, marker1: Marker, marker2: Marker) -> bool:
    """True when ``existing`` must go to make room for ``marker1 <-> marker2``."""

    s1, s2 = marker1.time_series_id, marker2.time_series_id
    e1, e2 = existing.marker1, existing.marker2
    # A marker links at most once to any given series.
    if e1 is marker1 and e2.time_series_id == s2:
        return True
    if e1 is marker2 and e2.time_series_id == s1:
        return True
    if e2 is marker1 and e1.time_series_id == s2:
        return True
    if e2 is marker2 and e1.time_series_id == s1:
        return True
    # Links between the same pair of series may not cross.
    if e1.time_series_id == s1 and e2.time_series_id == s2:
        if (e1.local_timestamp - marker1.local_timestamp) * (
            e2.local_timestamp - marker2.local_timestamp
        ) < 0:
            return True
    if e1.time_series_id == s2 and e2.time_series_id == s1:
        if (e1.local_timestamp - marker2.local_timestamp) * (
            e2.local_timestamp - marker1.local_timestamp
        ) < 0:
            return True
    return False
