import pytest

from annotrack import cli
from annotrack.core.model import Label
from annotrack.services.recent_projects import RecentProjects


@pytest.fixture
def saved_project(store, sensor_file, tmp_path):
    store.load_sensor_track(str(sensor_file))
    store.labeling_store.add_label(Label("Positive", 0.5, 2.0))
    path = tmp_path / "project.json"
    store.save_project(str(path))
    return path


@pytest.fixture(autouse=True)
def _isolated_recents(monkeypatch, settings):
    monkeypatch.setattr(cli, "RecentProjects", lambda: RecentProjects(settings))


def test_info_lists_tracks(saved_project, sensor_file, capsys):
    assert cli.main(["info", str(saved_project)]) == 0
    out = capsys.readouterr().out
    assert "track-1" in out
    assert str(sensor_file) in out
    assert "1 labels" in out


def test_export_writes_labelled_rows(saved_project, tmp_path, capsys):
    out_path = tmp_path / "labels.tsv"
    assert cli.main(["export", str(saved_project), str(out_path)]) == 0
    assert f"Wrote {out_path}" in capsys.readouterr().out
    annotations = [line.split("\t")[-1] for line in out_path.read_text(encoding="utf-8").split("\n")]
    assert annotations == ["", "Positive", "Positive", ""]


def test_missing_project_exits_with_error(tmp_path, capsys, qapp):
    assert cli.main(["info", str(tmp_path / "absent.json")]) == 1
    assert "Cannot load project file" in capsys.readouterr().err
