import subprocess

import pytest

from annotrack.core.model import TimeSeriesKind
from annotrack.io import DecodeError
from annotrack.io.video import load_video_time_series


def test_video_spans_its_duration(video_file, fake_ffprobe):
    fake_ffprobe[video_file.name] = 12.5
    video = load_video_time_series(video_file)
    assert video.timestamp_start == 0.0
    assert video.timestamp_end == 12.5
    assert video.video_duration == 12.5
    assert (video.width, video.height) == (640, 480)
    assert video.kind is TimeSeriesKind.VIDEO


def test_missing_video_file(tmp_path, fake_ffprobe):
    with pytest.raises(DecodeError):
        load_video_time_series(tmp_path / "absent.mp4")


def test_ffprobe_not_installed(tmp_path, monkeypatch):
    path = tmp_path / "clip.webm"
    path.write_bytes(b"")

    def missing(*args, **kwargs):
        raise FileNotFoundError("ffprobe")

    monkeypatch.setattr(subprocess, "run", missing)
    with pytest.raises(DecodeError, match="not installed"):
        load_video_time_series(path)


def test_ffprobe_failure(tmp_path, monkeypatch):
    path = tmp_path / "clip.mov"
    path.write_bytes(b"")

    def failing(cmd, **kwargs):
        raise subprocess.CalledProcessError(1, cmd)

    monkeypatch.setattr(subprocess, "run", failing)
    with pytest.raises(DecodeError, match="status 1"):
        load_video_time_series(path)


def test_container_without_video_stream(tmp_path, monkeypatch):
    path = tmp_path / "audio.mp4"
    path.write_bytes(b"")

    def audio_only(cmd, **kwargs):
        stdout = '{"streams": [{"codec_type": "audio"}], "format": {"duration": "3.0"}}'
        return subprocess.CompletedProcess(cmd, 0, stdout=stdout, stderr="")

    monkeypatch.setattr(subprocess, "run", audio_only)
    with pytest.raises(DecodeError, match="no video stream"):
        load_video_time_series(path)
