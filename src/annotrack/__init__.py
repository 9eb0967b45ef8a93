# AnnoTrack
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Project state for aligning and labelling multi-track time series."""

__version__ = "0.1.0"

from annotrack.core.project_store import ProjectStore, TrackNotFoundError
from annotrack.pkg.project_file import ProjectLoadError

__all__ = ["ProjectStore", "ProjectLoadError", "TrackNotFoundError", "__version__"]
