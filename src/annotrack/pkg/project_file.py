# AnnoTrack
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Read and write project JSON files."""

from __future__ import annotations

import contextlib
import json
import logging
import os
from pathlib import Path

from pydantic import ValidationError

from .models import SavedProject

__all__ = ["ProjectLoadError", "read_project_file", "write_project_file"]

log = logging.getLogger(__name__)


class ProjectLoadError(RuntimeError):
    """Raised when a project file (or one of its sources) cannot be loaded."""

    def __init__(self, path: str | Path, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Cannot load project file {self.path}: {reason}")


def read_project_file(path: str | Path) -> SavedProject:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ProjectLoadError(path, str(exc)) from exc
    try:
        return SavedProject.model_validate(json.loads(text))
    except json.JSONDecodeError as exc:
        raise ProjectLoadError(path, f"invalid JSON ({exc})") from exc
    except ValidationError as exc:
        reason = f"invalid project structure ({exc.error_count()} errors)"
        raise ProjectLoadError(path, reason) from exc


def write_project_file(project: SavedProject, path: str | Path) -> Path:
    """Write ``project`` as indented UTF-8 JSON, replacing ``path`` atomically."""

    dest = Path(path)
    tmp_dest = dest.with_suffix(dest.suffix + ".tmp")
    payload = project.model_dump(mode="json", by_alias=True)
    try:
        tmp_dest.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        os.replace(tmp_dest, dest)
    finally:
        with contextlib.suppress(OSError):
            if tmp_dest.exists():
                tmp_dest.unlink()
    log.info("Saved project to %s", dest)
    return dest
