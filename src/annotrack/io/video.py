"""FFprobe wrapper for reading video container metadata."""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path

from annotrack.core.model import TimeSeriesKind, VideoTimeSeries
from annotrack.io import DecodeError

__all__ = ["probe_video", "load_video_time_series", "VIDEO_SUFFIXES"]

log = logging.getLogger(__name__)

VIDEO_SUFFIXES = frozenset({".webm", ".mp4", ".mov"})


def probe_video(path: Path | str) -> dict:
    """Run FFprobe on ``path`` and return its parsed JSON report."""

    path = Path(path)
    if not path.exists():
        raise DecodeError(path, "file not found")
    try:
        result = subprocess.run(
            [
                "ffprobe",
                "-v", "quiet",
                "-print_format", "json",
                "-show_format",
                "-show_streams",
                str(path),
            ],
            capture_output=True,
            text=True,
            check=True,
        )
    except FileNotFoundError as exc:
        raise DecodeError(path, "ffprobe is not installed") from exc
    except subprocess.CalledProcessError as exc:
        raise DecodeError(path, f"ffprobe exited with status {exc.returncode}") from exc
    try:
        return json.loads(result.stdout)
    except json.JSONDecodeError as exc:
        raise DecodeError(path, "ffprobe returned malformed output") from exc


def load_video_time_series(path: Path | str) -> VideoTimeSeries:
    """Describe a video file as a single time series spanning its duration."""

    data = probe_video(path)
    video_stream = next(
        (stream for stream in data.get("streams", []) if stream.get("codec_type") == "video"),
        None,
    )
    if video_stream is None:
        raise DecodeError(path, "no video stream")

    fmt = data.get("format", {})
    try:
        duration = float(fmt.get("duration", video_stream.get("duration", 0)))
    except (TypeError, ValueError) as exc:
        raise DecodeError(path, "unreadable duration") from exc
    if duration <= 0:
        raise DecodeError(path, "video has no duration")

    log.info("Probed video %s (%.3f s)", path, duration)
    return VideoTimeSeries(
        name=str(path),
        filename=str(path),
        timestamp_start=0.0,
        timestamp_end=duration,
        width=int(video_stream.get("width", 0)),
        height=int(video_stream.get("height", 0)),
        video_duration=duration,
        kind=TimeSeriesKind.VIDEO,
    )
