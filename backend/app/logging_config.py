"""Logging setup for the listing service."""

from __future__ import annotations

import logging


def configure_logging(level: str | int = "INFO") -> None:
    """Root logging config; unknown level names fall back to INFO."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
