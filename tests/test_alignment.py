import numpy as np
import pytest

from annotrack.core.alignment import (
    DegenerateAlignmentError,
    least_squares,
    solve_k_and_b,
    to_local_time,
    to_reference_time,
)


def test_solve_two_point_relation():
    k, b = solve_k_and_b(0.0, 10.0, 2.0, 14.0)
    assert k == pytest.approx(2.0)
    assert b == pytest.approx(10.0)
    assert to_reference_time(1.0, k, b) == pytest.approx(12.0)


def test_reference_local_round_trip():
    k, b = solve_k_and_b(1.5, -3.0, 7.25, 40.0)
    for reference in [-3.0, 0.0, 12.345, 40.0, 1e4]:
        assert to_reference_time(to_local_time(reference, k, b), k, b) == pytest.approx(reference)


def test_mapping_accepts_arrays():
    times = np.array([0.0, 1.0, 2.0])
    np.testing.assert_allclose(to_reference_time(times, 2.0, 1.0), [1.0, 3.0, 5.0])


def test_coincident_local_timestamps_are_rejected():
    with pytest.raises(DegenerateAlignmentError):
        solve_k_and_b(3.0, 0.0, 3.0, 10.0)


def test_zero_scale_cannot_be_inverted():
    with pytest.raises(DegenerateAlignmentError):
        to_local_time(5.0, 0.0, 1.0)


def test_least_squares_single_pair_is_translation():
    assert least_squares([(5.0, 1.0)]) == (1.0, 4.0)


def test_least_squares_fits_exact_line():
    k, b = least_squares([(5.0, 1.0), (9.0, 2.0), (13.0, 3.0)])
    assert k == pytest.approx(4.0)
    assert b == pytest.approx(1.0)


def test_least_squares_degenerate_falls_back_to_mean_offset():
    assert least_squares([(5.0, 1.0), (7.0, 1.0)]) == (1.0, pytest.approx(5.0))


def test_least_squares_without_pairs():
    assert least_squares([]) is None
