"""Logging setup for BackpropNets."""

from __future__ import annotations

import logging
import sys

DEBUG_FORMAT = "%(asctime)s %(levelname)8s [%(module)12s.%(funcName)-12s:%(lineno)4d] %(message)s"
SCREEN_FORMAT = "%(asctime)s | %(message)s"


def setup_logging(name: str = "backpropnets", level: str | int = "INFO") -> logging.Logger:
    """Attach a single stdout handler to the ``name`` logger and return it.

    Calling this again replaces the handler rather than stacking duplicates.
    """

    if isinstance(level, str):
        level = level.upper()
    log = logging.getLogger(name)
    log.handlers = []

    handler = logging.StreamHandler(sys.stdout)
    verbose = level in ("DEBUG", logging.DEBUG)
    handler.setFormatter(logging.Formatter(DEBUG_FORMAT if verbose else SCREEN_FORMAT, datefmt="%H:%M:%S"))
    handler.setLevel(level)
    log.addHandler(handler)
    log.setLevel(level)
    log.propagate = False
    return log


__all__ = ["setup_logging"]
