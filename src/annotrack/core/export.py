# AnnoTrack
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Project reference-time labels back onto a sensor file's own rows."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

import numpy as np

from .alignment import solve_k_and_b, to_local_time
from .model import Label, MappedLabel, RawTimeSeries

__all__ = ["map_labels", "annotate_times", "annotated_lines", "write_annotated_rows"]

log = logging.getLogger(__name__)


def map_labels(labels: Iterable[Label], k: float, b: float) -> list[MappedLabel]:
    """Map reference-time labels into local time, sorted by local start."""

    mapped = [
        MappedLabel(
            label.class_name,
            float(to_local_time(label.timestamp_start, k, b)),
            float(to_local_time(label.timestamp_end, k, b)),
        )
        for label in labels
    ]
    mapped.sort(key=lambda label: label.timestamp_start)
    return mapped


def annotate_times(times: Sequence[float] | np.ndarray, mapped: Sequence[MappedLabel]) -> list[str]:
    """Return one class name (or ``""``) per timestamp.

    A row belongs to a label when ``start < t <= end``. Rows are walked in
    order and the active label advances once ``t`` reaches its end.
    """

    annotations: list[str] = []
    if not mapped:
        return [""] * len(times)
    index = 0
    current = mapped[0]
    for t in times:
        inside = current.timestamp_start < t <= current.timestamp_end
        annotations.append(current.class_name if inside else "")
        if t >= current.timestamp_end and index + 1 < len(mapped):
            index += 1
            current = mapped[index]
    return annotations


def annotated_lines(
    raw: RawTimeSeries,
    labels: Iterable[Label],
    reference_start: float,
    reference_end: float,
    *,
    local_bounds: tuple[float, float] | None = None,
) -> list[str]:
    """Build the export lines for one sensor file aligned at the given bounds."""

    local_start, local_end = (
        local_bounds if local_bounds is not None else (raw.timestamp_start, raw.timestamp_end)
    )
    k, b = solve_k_and_b(local_start, reference_start, local_end, reference_end)
    mapped = map_labels(labels, k, b)
    annotations = annotate_times(raw.time_column, mapped)
    return [
        "\t".join(str(cell) for cell in row) + "\t" + annotation
        for row, annotation in zip(raw.raw_data, annotations, strict=True)
    ]


def write_annotated_rows(lines: Sequence[str], destination: str | Path) -> Path:
    path = Path(destination)
    path.write_text("\n".join(lines), encoding="utf-8")
    log.info("Exported %d labelled rows to %s", len(lines), path)
    return path
