# AnnoTrack
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Labels and label classes, expressed in reference time."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from matplotlib import colormaps
from matplotlib.colors import to_hex

from .model import Label

__all__ = ["LabelingStore", "IGNORE_CLASS", "DEFAULT_CLASSES"]

log = logging.getLogger(__name__)

IGNORE_CLASS = "IGNORE"
IGNORE_COLOR = "#cccccc"
DEFAULT_CLASSES = (IGNORE_CLASS, "Positive")

_LABEL_FIELDS = {
    "class_name",
    "timestamp_start",
    "timestamp_end",
    "suggestion_generation",
    "suggestion_confidence",
}


def _palette() -> list[str]:
    colors = [to_hex(c) for c in colormaps["tab10"].colors]
    colors += [to_hex(c) for c in colormaps["tab20"].colors if to_hex(c) not in colors]
    return colors


class LabelingStore:
    """Own the label set, the class list and the class colormap.

    Every mutating call invokes ``record_history`` first so the owner can
    snapshot the state being replaced.
    """

    def __init__(self, record_history: Callable[[], None] | None = None) -> None:
        self._record_history = record_history
        self.labels: list[Label] = []
        self.classes: list[str] = list(DEFAULT_CLASSES)
        self.class_colormap: dict[str, str] = {}
        self._update_colors()

    # ------------------------------------------------------------------ queries
    @property
    def current_class(self) -> str | None:
        for name in self.classes:
            if name != IGNORE_CLASS:
                return name
        return None

    def labels_in_range(self, tmin: float, tmax: float) -> list[Label]:
        return [
            label
            for label in self.labels
            if label.timestamp_end >= tmin and label.timestamp_start <= tmax
        ]

    # ------------------------------------------------------------------ label edits
    def add_label(self, label: Label) -> None:
        self._record()
        self.labels.append(label)

    def remove_label(self, label: Label) -> None:
        self._record()
        self.labels = [existing for existing in self.labels if existing is not label]

    def update_label(self, label: Label, **changes: Any) -> None:
        unknown = set(changes) - _LABEL_FIELDS
        if unknown:
            raise TypeError(f"unknown label fields: {sorted(unknown)}")
        self._record()
        for key, value in changes.items():
            setattr(label, key, value)

    def remove_all_labels(self) -> None:
        self._record()
        self.labels = []

    # ------------------------------------------------------------------ class edits
    def add_class(self, class_name: str) -> None:
        self._record()
        if class_name not in self.classes:
            self.classes.append(class_name)
            self._update_colors()

    def remove_class(self, class_name: str) -> None:
        self._record()
        self.labels = [label for label in self.labels if label.class_name != class_name]
        if class_name in self.classes:
            self.classes.remove(class_name)
            self._update_colors()

    def rename_class(self, old_name: str, new_name: str) -> None:
        if new_name in self.classes or old_name not in self.classes:
            log.debug("Ignoring class rename %r -> %r", old_name, new_name)
            return
        self._record()
        for label in self.labels:
            if label.class_name == old_name:
                label.class_name = new_name
        self.classes[self.classes.index(old_name)] = new_name
        if old_name in self.class_colormap:
            self.class_colormap[new_name] = self.class_colormap.pop(old_name)
        self._update_colors()

    # ------------------------------------------------------------------ state
    def save_state(self) -> dict[str, Any]:
        return {
            "labels": [label.to_dict() for label in self.labels],
            "classes": list(self.classes),
            "classColormap": dict(self.class_colormap),
        }

    def load_state(self, state: Mapping[str, Any]) -> None:
        if "classes" in state:
            self.classes = [str(name) for name in state["classes"] or []]
            self.class_colormap = dict(state.get("classColormap") or {})
        else:
            self.classes = list(DEFAULT_CLASSES)
            self.class_colormap = {}
        self._update_colors()
        self.labels = [Label.from_dict(item) for item in state.get("labels", [])]

    def reset(self) -> None:
        self.labels = []
        self.classes = list(DEFAULT_CLASSES)
        self._update_colors()

    # ------------------------------------------------------------------ helpers
    def _record(self) -> None:
        if self._record_history is not None:
            self._record_history()

    def _update_colors(self) -> None:
        # Keep colors of surviving classes; hand out unused palette colors.
        colormap = {
            name: self.class_colormap[name] for name in self.classes if name in self.class_colormap
        }
        used = set(colormap.values())
        free = [color for color in _palette() if color not in used]
        for name in self.classes:
            if name in colormap:
                continue
            if name == IGNORE_CLASS:
                colormap[name] = IGNORE_COLOR
            elif free:
                colormap[name] = free.pop(0)
            else:
                colormap[name] = "#000000"
        self.class_colormap = colormap
