"""Project-level UI state that is persisted with the project file."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

__all__ = ["TabID", "ProjectUiState", "normalize_tab"]

TabID = Literal["file", "alignment", "labeling", "deploying"]

_TABS = ("file", "alignment", "labeling", "deploying")


def normalize_tab(tab: str | None) -> TabID:
    """Map a saved tab value onto a current one (``file`` became ``alignment``)."""

    if tab is None or tab == "file" or tab not in _TABS:
        return "alignment"
    return tab  # type: ignore[return-value]


@dataclass
class ProjectUiState:
    current_tab: TabID = "alignment"
    reference_view_start: float = 0.0
    reference_view_pps: float = 1.0

    def set_reference_view_zooming(self, start: float, pixels_per_second: float) -> None:
        if pixels_per_second <= 0:
            raise ValueError("pixels_per_second must be > 0")
        self.reference_view_start = float(start)
        self.reference_view_pps = float(pixels_per_second)

    def reset(self) -> None:
        self.current_tab = "alignment"
        self.set_reference_view_zooming(0.0, 1.0)
