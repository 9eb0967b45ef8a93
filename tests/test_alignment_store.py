import pytest

from annotrack.core.alignment_store import Marker
from annotrack.core.project_store import ProjectStore
from annotrack.services.loader import ImmediateLoader


@pytest.fixture
def aligned(store, video_file, sensor_file):
    store.load_reference_track(str(video_file))
    store.load_sensor_track(str(sensor_file))
    reference = store.reference_track.aligned_time_series[0]
    sensor = store.tracks[0].aligned_time_series[0]
    return store, reference, sensor


def _link(store, series_a, t_a, series_b, t_b):
    first = Marker(series_a.id, t_a)
    second = Marker(series_b.id, t_b)
    store.alignment_store.add_marker(first)
    store.alignment_store.add_marker(second)
    return store.alignment_store.add_correspondence(first, second)


def test_single_link_translates_series(aligned):
    store, reference, sensor = aligned
    assert not sensor.aligned
    _link(store, reference, 5.0, sensor, 1.0)
    assert sensor.reference_start == pytest.approx(4.0)
    assert sensor.reference_end == pytest.approx(7.0)
    assert sensor.aligned


def test_two_links_fit_scale_and_offset(aligned):
    store, reference, sensor = aligned
    _link(store, reference, 5.0, sensor, 1.0)
    _link(store, reference, 9.0, sensor, 2.0)
    assert sensor.reference_start == pytest.approx(1.0)
    assert sensor.reference_end == pytest.approx(13.0)


def test_crossing_link_replaces_existing(aligned):
    store, reference, sensor = aligned
    _link(store, reference, 5.0, sensor, 1.0)
    newer = _link(store, reference, 3.0, sensor, 2.0)
    assert store.alignment_store.correspondences == [newer]
    assert sensor.reference_start == pytest.approx(1.0)


def test_marker_links_once_per_series(aligned):
    store, reference, sensor = aligned
    anchor = Marker(reference.id, 5.0)
    store.alignment_store.add_marker(anchor)
    first = Marker(sensor.id, 1.0)
    second = Marker(sensor.id, 1.5)
    store.alignment_store.add_marker(first)
    store.alignment_store.add_marker(second)
    store.alignment_store.add_correspondence(anchor, first)
    latest = store.alignment_store.add_correspondence(anchor, second)
    assert store.alignment_store.correspondences == [latest]


def test_markers_on_same_series_cannot_link(aligned):
    store, _, sensor = aligned
    with pytest.raises(ValueError):
        store.alignment_store.add_correspondence(Marker(sensor.id, 0.0), Marker(sensor.id, 1.0))


def test_moving_marker_realigns(aligned):
    store, reference, sensor = aligned
    correspondence = _link(store, reference, 5.0, sensor, 1.0)
    store.alignment_store.update_marker(correspondence.marker1, 6.0)
    assert sensor.reference_start == pytest.approx(5.0)


def test_undo_link_restores_bounds(aligned):
    store, reference, sensor = aligned
    _link(store, reference, 5.0, sensor, 1.0)
    store.alignment_undo()
    restored = store.tracks[0].aligned_time_series[0]
    assert store.alignment_store.correspondences == []
    assert len(store.alignment_store.markers) == 2
    assert (restored.reference_start, restored.reference_end) == (0.0, pytest.approx(3.0))
    assert not restored.aligned


def test_deleting_track_prunes_markers(aligned):
    store, reference, sensor = aligned
    _link(store, reference, 5.0, sensor, 1.0)
    store.delete_track(store.tracks[0])
    assert [m.time_series_id for m in store.alignment_store.markers] == [reference.id]
    assert store.alignment_store.correspondences == []


def test_delete_marker_drops_its_links(aligned):
    store, reference, sensor = aligned
    correspondence = _link(store, reference, 5.0, sensor, 1.0)
    store.alignment_store.delete_marker(correspondence.marker2)
    assert store.alignment_store.correspondences == []
    assert len(store.alignment_store.markers) == 1


def test_removing_an_absent_marker_or_link_leaves_history_alone(aligned):
    store, reference, sensor = aligned
    correspondence = _link(store, reference, 5.0, sensor, 1.0)
    store.alignment_store.delete_marker(correspondence.marker2)
    store.alignment_undo()
    assert store.can_redo_alignment

    alignment = store.alignment_store
    alignment.delete_marker(Marker(sensor.id, 2.5))
    alignment.delete_correspondence(correspondence)
    assert store.can_redo_alignment
    assert len(alignment.correspondences) == 1


def test_alignment_survives_save_and_load(aligned, recent, tmp_path):
    store, reference, sensor = aligned
    _link(store, reference, 5.0, sensor, 1.0)
    store.alignment_store.view_states[sensor.id] = {"rangeStart": 2.0, "pixelsPerSecond": 50.0}
    path = tmp_path / "aligned.json"
    store.save_project(str(path))

    state = store.alignment_store.save_state()
    assert [m["id"] for m in state["markers"]] == ["marker1", "marker2"]
    assert state["correspondences"] == [{"marker1ID": "marker1", "marker2ID": "marker2"}]

    loaded = ProjectStore(loader=ImmediateLoader(), recent_projects=recent)
    loaded.load_project(str(path))
    series = loaded.tracks[0].aligned_time_series[0]
    assert len(loaded.alignment_store.correspondences) == 1
    assert series.reference_start == pytest.approx(4.0)
    assert series.aligned
    assert loaded.alignment_store.view_states[series.id]["pixelsPerSecond"] == 50.0


def test_zero_length_series_link_is_skipped(store, video_file, tmp_path, make_sensor_file):
    store.load_reference_track(str(video_file))
    flat = make_sensor_file(tmp_path / "flat.tsv", [1000, 1000], [1, 2])
    store.load_sensor_track(str(flat))
    store.load_sensor_track(str(make_sensor_file(tmp_path / "next.tsv", [0, 1000], [1, 2])))
    flat_series = store.tracks[0].aligned_time_series[0]
    follower = store.tracks[1].aligned_time_series[0]

    _link(store, flat_series, 1.0, follower, 0.5)
    assert (follower.reference_start, follower.reference_end) == (0.0, pytest.approx(1.0))
