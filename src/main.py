# AnnoTrack
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Entry point for running AnnoTrack commands with file logging enabled."""

from __future__ import annotations

import logging
import sys

from annotrack.cli import main as cli_main
from annotrack.core.logging_config import setup_production_logging

log = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)

    try:
        setup_production_logging(app_name="AnnoTrack", console_level=logging.WARNING)
    except OSError as e:
        # Fall back to console logging when the log directory is not writable
        logging.basicConfig(level=logging.INFO)
        log.error("Failed to setup production logging: %s", e, exc_info=True)

    log.info("Running annotrack %s", " ".join(argv))
    try:
        return cli_main(argv)
    except Exception as e:
        log.critical("AnnoTrack crashed: %s", e, exc_info=True)
        raise


if __name__ == "__main__":  # pragma: no cover - import guard
    sys.exit(main())
