"""Most-recently-used project paths, kept in QSettings."""

from __future__ import annotations

from PyQt5.QtCore import QSettings

__all__ = ["RecentProjects", "RECENT_PROJECTS_KEY", "MAX_RECENT_PROJECTS"]

RECENT_PROJECTS_KEY = "recentProjects"
MAX_RECENT_PROJECTS = 10


class RecentProjects:
    def __init__(self, settings: QSettings | None = None, limit: int = MAX_RECENT_PROJECTS):
        self.settings = settings if settings is not None else QSettings("AnnoTrack", "AnnoTrack")
        self.limit = limit

    @property
    def paths(self) -> list[str]:
        value = self.settings.value(RECENT_PROJECTS_KEY, [])
        if value is None:
            return []
        # INI-backed settings hand a one-element list back as a bare string.
        if isinstance(value, str):
            return [value] if value else []
        return [str(path) for path in value]

    def add(self, path: str) -> list[str]:
        """Move ``path`` to the front, dropping any older duplicate."""

        recent = [path] + [p for p in self.paths if p != path]
        self._store(recent[: self.limit])
        return self.paths

    def remove(self, path: str) -> None:
        recent = self.paths
        if path in recent:
            self._store([p for p in recent if p != path])

    def clear(self) -> None:
        self._store([])

    def _store(self, paths: list[str]) -> None:
        self.settings.setValue(RECENT_PROJECTS_KEY, paths)
        self.settings.sync()
