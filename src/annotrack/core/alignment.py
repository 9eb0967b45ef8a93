# AnnoTrack
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Affine mapping between a series' local time and the reference timeline.

``reference = k * local + b``
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

__all__ = [
    "DegenerateAlignmentError",
    "solve_k_and_b",
    "to_reference_time",
    "to_local_time",
    "least_squares",
]


class DegenerateAlignmentError(ValueError):
    """Raised when a mapping cannot be solved or inverted."""


def solve_k_and_b(
    local_start: float, reference_start: float, local_end: float, reference_end: float
) -> tuple[float, float]:
    """Solve the two-point relation for ``(k, b)``.

    Raises:
        DegenerateAlignmentError: If the two local timestamps coincide.
    """

    if local_end == local_start:
        raise DegenerateAlignmentError(
            f"cannot solve alignment for zero-length local interval at {local_start}"
        )
    k = (reference_end - reference_start) / (local_end - local_start)
    b = reference_start - k * local_start
    return k, b


def to_reference_time(local_time, k: float, b: float):
    """Map local time (scalar or array) onto the reference timeline."""

    return k * local_time + b


def to_local_time(reference_time, k: float, b: float):
    """Invert the mapping: ``local = (reference - b) / k``."""

    if k == 0:
        raise DegenerateAlignmentError("scale k is zero; mapping is not invertible")
    return (reference_time - b) / k


def least_squares(pairs: Sequence[tuple[float, float]]) -> tuple[float, float] | None:
    """Fit ``reference = k * local + b`` over ``(reference, local)`` pairs.

    A single pair yields a pure translation. Pairs whose local timestamps all
    coincide fall back to a translation by the mean offset.
    """

    if not pairs:
        return None
    data = np.asarray(pairs, dtype=float)
    y = data[:, 0]
    x = data[:, 1]
    if len(pairs) == 1:
        return 1.0, float(y[0] - x[0])
    n = len(pairs)
    denom = float(np.sum(x * x) - np.sum(x) ** 2 / n)
    if denom == 0.0:
        return 1.0, float(np.mean(y - x))
    k = float((np.sum(x * y) - np.sum(x) * np.sum(y) / n) / denom)
    b = float((np.sum(y) - k * np.sum(x)) / n)
    return k, b
