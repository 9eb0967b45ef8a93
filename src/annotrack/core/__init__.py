"""In-memory project model and the operations that edit it."""

from annotrack.core.alignment import (
    DegenerateAlignmentError,
    least_squares,
    solve_k_and_b,
    to_local_time,
    to_reference_time,
)
from annotrack.core.barrier import JoinBarrier
from annotrack.core.history import HistoryTracker
from annotrack.core.model import AlignedTimeSeries, Label, MappedLabel, Track

__all__ = [
    "AlignedTimeSeries",
    "DegenerateAlignmentError",
    "HistoryTracker",
    "JoinBarrier",
    "Label",
    "MappedLabel",
    "Track",
    "least_squares",
    "solve_k_and_b",
    "to_local_time",
    "to_reference_time",
]
