# AnnoTrack
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Helper routines for loading tab-separated sensor recordings.

The first column holds timestamps in milliseconds; every other column is one
sensor channel. Files carry no header row.
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import pandas as pd

from annotrack.core.model import RawTimeSeries, SensorTimeSeries, TimeSeriesKind
from annotrack.io import DecodeError

__all__ = ["load_sensor_time_series", "load_raw_sensor_time_series"]

log = logging.getLogger(__name__)

MS_PER_SECOND = 1000.0


def _read_rows(file_path) -> tuple[list[list[str]], np.ndarray]:
    """Return the non-blank rows as strings plus their gap-filled numeric values.

    Rows keep their own field count; shorter rows are padded only in the
    numeric matrix, where the missing cells are NaN.
    """

    path = Path(file_path)
    log.debug("Reading sensor rows from %s", path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DecodeError(path, str(exc)) from exc

    rows = [line.split("\t") for line in text.splitlines()]
    rows = [row for row in rows if "".join(row) != ""]
    if not rows:
        raise DecodeError(path, "file contains no rows")

    frame = pd.DataFrame(rows, dtype=object).fillna("")
    values = frame.apply(pd.to_numeric, errors="coerce").to_numpy(dtype=float)
    filled = values.copy()
    if len(values) > 2:
        # Interior gaps take the mean of their neighbours to keep the sample rate.
        middle = values[1:-1]
        neighbours = (values[:-2] + values[2:]) / 2.0
        filled[1:-1] = np.where(np.isnan(middle), neighbours, middle)

    time_column = filled[:, 0]
    if not (np.isfinite(time_column[0]) and np.isfinite(time_column[-1])):
        raise DecodeError(path, "first and last rows need numeric timestamps")
    return rows, filled


def load_sensor_time_series(file_path) -> list[SensorTimeSeries]:
    """Load every valid channel of ``file_path`` as a :class:`SensorTimeSeries`.

    Raises:
        DecodeError: If the file cannot be read or has no numeric channel.
    """

    _rows, filled = _read_rows(file_path)
    time_ms = filled[:, 0]
    start = time_ms[0] / MS_PER_SECOND
    end = time_ms[-1] / MS_PER_SECOND
    rows = len(time_ms)
    sample_rate = (end - start) / (rows - 1) if rows > 1 else 0.0

    series: list[SensorTimeSeries] = []
    for column in range(1, filled.shape[1]):
        channel = filled[:, column]
        if np.all(np.isnan(channel)):
            continue
        series.append(
            SensorTimeSeries(
                name=f"{file_path}.col{column}",
                timestamp_start=float(start),
                timestamp_end=float(end),
                sample_rate=float(sample_rate),
                dimensions=[channel.astype(np.float32)],
                scales=[(float(np.nanmin(channel)), float(np.nanmax(channel)))],
                kind=TimeSeriesKind.ACCELEROMETER,
            )
        )
    if not series:
        raise DecodeError(file_path, "no numeric sensor columns")
    log.info("Loaded %d sensor channels (%d rows) from %s", len(series), rows, file_path)
    return series


def load_raw_sensor_time_series(file_path) -> RawTimeSeries:
    """Load the rows of ``file_path`` untouched, with the time column in seconds."""

    rows, filled = _read_rows(file_path)
    time_seconds = filled[:, 0] / MS_PER_SECOND
    return RawTimeSeries(
        name=f"{file_path}.Raw",
        timestamp_start=float(time_seconds[0]),
        timestamp_end=float(time_seconds[-1]),
        time_column=time_seconds,
        raw_data=rows,
    )
