"""Logging setup for the salat command-line application."""

import logging
import os
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LOG_LEVEL_ENV = "SALAT_LOG_LEVEL"


def setup_logging(level: str | None = None) -> None:
    """
    Configure root logging to stdout.

    ``level`` falls back to $SALAT_LOG_LEVEL, then WARNING, so the
    schedule table is not buried under INFO lines by default.
    """
    if level is None:
        level = os.getenv(LOG_LEVEL_ENV, "WARNING")
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
