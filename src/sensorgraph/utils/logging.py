"""Minimal logging helpers for the project."""

from __future__ import annotations

import logging

DEFAULT_FORMAT = "%(asctime)s %(levelname)s:%(name)s:%(message)s"


def level_for(verbose: int) -> int:
    """Map a ``-v`` count onto a logging level (0 → WARNING)."""

    if verbose <= 0:
        return logging.WARNING
    if verbose == 1:
        return logging.INFO
    return logging.DEBUG


def get_logger(
    name: str = "sensorgraph",
    level: int | str = logging.INFO,
    fmt: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Return a configured :class:`logging.Logger` instance.

    Child loggers of the package (``sensorgraph.graph`` etc.) propagate to
    the logger returned here.  A ``StreamHandler`` is attached only once so
    repeated calls do not duplicate log lines.
    """

    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt))
        logger.addHandler(handler)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    return logger
