"""Idempotent stderr logging setup."""

from __future__ import annotations

import logging
import sys

_CONFIGURED = False


def setup_logging(level: int = logging.INFO) -> None:
    """Configure seeker logging to stderr. Safe to call multiple times.

    A repeat call only adjusts the level.
    """
    global _CONFIGURED  # noqa: PLW0603
    logger = logging.getLogger("seeker")
    if _CONFIGURED:
        logger.setLevel(level)
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    )

    logger.setLevel(level)
    logger.addHandler(handler)
    logger.propagate = False

    _CONFIGURED = True
