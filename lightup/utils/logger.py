"""Logging utilities for the Light Up engine."""

from __future__ import annotations

import logging
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def configure_logging(level: int = logging.INFO) -> None:
    """Configure root logging with the engine's formatter.

    Solver and advisor internals log at DEBUG since a single engine turn may
    run dozens of oracle checks; game transitions and generation attempts log
    at INFO. Hosts embedding the engine can call this again to change level.
    """

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt="%H:%M:%S"))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)


def parse_log_level(name: str) -> int:
    """Map a ``--log-level`` value to a :mod:`logging` level.

    Case-insensitive, with ``WARN`` accepted as an alias. Anything outside
    :data:`LOG_LEVELS` raises ``ValueError`` so argparse can reject it.
    """

    key = name.strip().upper()
    if key == "WARN":
        key = "WARNING"
    if key not in LOG_LEVELS:
        raise ValueError(f"Unknown log level {name!r}; expected one of {', '.join(LOG_LEVELS)}")
    return getattr(logging, key)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a namespaced logger, configuring defaults if needed."""

    if not logging.getLogger().handlers:
        configure_logging()
    return logging.getLogger(name or "lightup")
