import json
import subprocess
from pathlib import Path

import numpy as np
import pandas as pd
import pytest
from PyQt5.QtCore import QCoreApplication, QSettings

from annotrack.app import flags
from annotrack.core.project_store import ProjectStore
from annotrack.services.loader import ImmediateLoader
from annotrack.services.recent_projects import RecentProjects


class DeferredLoader:
    """Hold decode jobs until the test runs them, in any order."""

    def __init__(self):
        self.jobs = []

    @property
    def pending(self):
        return len(self.jobs)

    def submit(self, job, on_success, on_error):
        self.jobs.append((job, on_success, on_error))

    def run(self, index=0):
        job, on_success, on_error = self.jobs.pop(index)
        try:
            result = job()
        except Exception as exc:
            on_error(exc)
            return
        on_success(result)

    def run_all(self):
        while self.jobs:
            self.run()


def write_sensor_tsv(path: Path, times_ms, *columns) -> Path:
    frame = pd.DataFrame({"t": np.asarray(times_ms)})
    for index, values in enumerate(columns, start=1):
        frame[f"c{index}"] = np.asarray(values)
    frame.to_csv(path, sep="\t", header=False, index=False)
    return path


@pytest.fixture(scope="session")
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture(autouse=True)
def _clean_flags(monkeypatch):
    monkeypatch.delenv(flags.FEATURES_ENV, raising=False)
    flags.reload()
    yield
    flags.reload()


@pytest.fixture
def settings(tmp_path):
    return QSettings(str(tmp_path / "settings.ini"), QSettings.IniFormat)


@pytest.fixture
def recent(settings):
    return RecentProjects(settings)


@pytest.fixture
def store(qapp, recent):
    return ProjectStore(loader=ImmediateLoader(), recent_projects=recent)


@pytest.fixture
def sensor_file(tmp_path):
    return write_sensor_tsv(
        tmp_path / "walk.tsv",
        [0, 1000, 2000, 3000],
        [0.1, 0.2, 0.3, 0.4],
        [1.0, 2.0, 3.0, 4.0],
    )


@pytest.fixture
def fake_ffprobe(monkeypatch):
    """Answer ffprobe calls with a 640x480 video of ``durations[name]`` seconds."""

    durations = {}

    def fake_run(cmd, capture_output, text, check):
        path = Path(cmd[-1])
        payload = {
            "streams": [
                {"codec_type": "audio"},
                {"codec_type": "video", "width": 640, "height": 480},
            ],
            "format": {"duration": str(durations.get(path.name, 10.0))},
        }
        return subprocess.CompletedProcess(cmd, 0, stdout=json.dumps(payload), stderr="")

    monkeypatch.setattr(subprocess, "run", fake_run)
    return durations


@pytest.fixture
def video_file(tmp_path, fake_ffprobe):
    path = tmp_path / "reference.mp4"
    path.write_bytes(b"")
    return path


@pytest.fixture
def make_sensor_file():
    return write_sensor_tsv


@pytest.fixture
def deferred_loader():
    return DeferredLoader()
