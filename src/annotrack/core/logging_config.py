# AnnoTrack
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Rotating-file logging for the application and the command line."""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

__all__ = ["setup_production_logging", "get_log_directory"]

PACKAGE_LOGGER = "annotrack"
DETAILED_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
SIMPLE_FORMAT = "%(levelname)-8s | %(name)s | %(message)s"


def setup_production_logging(
    app_name: str = "AnnoTrack", console_level: int = logging.INFO
) -> Path:
    """
    Configure logging for an AnnoTrack process.

    Writes two rotating files in the platform log directory:
    - annotrack.log: everything the ``annotrack`` package logs (10 MB x 5)
    - errors.log: ERROR and above from any logger (5 MB x 3)

    Console output goes to stdout at ``console_level``.

    Returns:
        Path to the log directory
    """
    log_dir = _get_log_directory(app_name)
    log_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)
    root_logger.handlers.clear()

    detailed_formatter = logging.Formatter(DETAILED_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(logging.DEBUG)
    package_logger.handlers.clear()

    app_log_path = log_dir / "annotrack.log"
    app_handler = RotatingFileHandler(
        app_log_path,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    app_handler.setLevel(logging.DEBUG)
    app_handler.setFormatter(detailed_formatter)
    package_logger.addHandler(app_handler)

    error_log_path = log_dir / "errors.log"
    error_handler = RotatingFileHandler(
        error_log_path,
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(detailed_formatter)
    root_logger.addHandler(error_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter(SIMPLE_FORMAT))
    package_logger.addHandler(console_handler)

    # Per-file DEBUG lines from the decoders are dropped.
    for name in ("annotrack.io.sensors", "annotrack.io.video", "annotrack.services.loader"):
        logging.getLogger(name).setLevel(logging.INFO)

    log = logging.getLogger(__name__)
    log.info("%s logging initialized", app_name)
    log.info("Main log: %s", app_log_path)
    log.info("Error log: %s", error_log_path)
    log.info("Platform: %s, Python: %s", sys.platform, sys.version.split()[0])

    return log_dir


def _get_log_directory(app_name: str) -> Path:
    """
    Platform log directory.

    - Windows: %LOCALAPPDATA%\\AppName\\logs
    - macOS: ~/Library/Logs/AppName
    - Linux: $XDG_DATA_HOME/AppName/logs
    """
    home = Path.home()

    if sys.platform == "win32":
        base = Path(os.environ.get("LOCALAPPDATA", home / "AppData" / "Local"))
        return base / app_name / "logs"

    if sys.platform == "darwin":
        return home / "Library" / "Logs" / app_name

    xdg_data_home = os.environ.get("XDG_DATA_HOME", home / ".local" / "share")
    return Path(xdg_data_home) / app_name / "logs"


def get_log_directory(app_name: str = "AnnoTrack") -> Path:
    """Log directory path, without configuring anything."""
    return _get_log_directory(app_name)
