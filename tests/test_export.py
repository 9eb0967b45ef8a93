import numpy as np
import pytest

from annotrack.core.export import annotate_times, annotated_lines, map_labels, write_annotated_rows
from annotrack.core.model import Label, MappedLabel, RawTimeSeries


def _raw(times):
    return RawTimeSeries(
        name="raw",
        timestamp_start=float(times[0]),
        timestamp_end=float(times[-1]),
        time_column=np.asarray(times, dtype=float),
        raw_data=[[str(int(t * 1000)), f"v{i}"] for i, t in enumerate(times)],
    )


def test_rows_inside_open_closed_interval_get_the_class():
    mapped = [MappedLabel("walk", 1.0, 3.0)]
    assert annotate_times([0, 1, 2, 3], mapped) == ["", "", "walk", "walk"]


def test_no_labels_gives_empty_annotations():
    assert annotate_times([0.0, 0.5, 1.0], []) == ["", "", ""]


def test_walk_advances_to_next_label():
    mapped = [MappedLabel("a", 0.0, 1.0), MappedLabel("b", 2.0, 4.0)]
    assert annotate_times([0.5, 1.0, 1.5, 3.0, 4.0, 5.0], mapped) == ["a", "a", "", "b", "b", ""]


def test_map_labels_inverts_and_sorts():
    labels = [Label("late", 30.0, 40.0), Label("early", 10.0, 20.0)]
    mapped = map_labels(labels, k=2.0, b=10.0)
    assert [m.class_name for m in mapped] == ["early", "late"]
    assert mapped[0].timestamp_start == pytest.approx(0.0)
    assert mapped[0].timestamp_end == pytest.approx(5.0)
    assert mapped[1].timestamp_end == pytest.approx(15.0)


def test_annotated_lines_keep_row_count_and_order():
    raw = _raw([0.0, 1.0, 2.0, 3.0])
    lines = annotated_lines(raw, [Label("walk", 11.0, 13.0)], 10.0, 13.0)
    assert lines == ["0\tv0\t", "1000\tv1\t", "2000\tv2\twalk", "3000\tv3\twalk"]


def test_annotated_lines_with_explicit_local_bounds():
    raw = _raw([1.0, 2.0, 3.0, 4.0])
    lines = annotated_lines(raw, [Label("walk", 1.0, 3.0)], 0.0, 3.0, local_bounds=(0.0, 3.0))
    assert [line.split("\t")[-1] for line in lines] == ["", "walk", "walk", ""]


def test_write_annotated_rows(tmp_path):
    dest = write_annotated_rows(["a\t", "b\tx"], tmp_path / "out.tsv")
    assert dest.read_text(encoding="utf-8") == "a\t\nb\tx"
