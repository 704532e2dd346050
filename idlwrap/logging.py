"""Logging for idlwrap builds.

Each build phase logs under its own child of the ``idlwrap`` logger so a
single phase can be switched to debug output (for example ``model`` to see
which definitions relaxed mode skipped) without flooding the console with
per-file messages from the others.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

_LOGGER_NAME = "idlwrap"

PHASES = ("sources", "model", "generation", "emit", "transformer")

CONSOLE_FORMAT = "[idlwrap] %(levelname)s %(message)s"
DEBUG_CONSOLE_FORMAT = "[idlwrap:%(phase)s] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(phase: str | None = None) -> logging.Logger:
    """Return the logger of one build phase, or the idlwrap root logger."""
    if phase is None:
        return logging.getLogger(_LOGGER_NAME)
    if phase not in PHASES:
        raise ValueError(f"Unknown logging phase {phase!r}; expected one of {', '.join(PHASES)}")
    return logging.getLogger(f"{_LOGGER_NAME}.{phase}")


class _PhaseFilter(logging.Filter):
    """Adds a ``phase`` attribute naming the build phase of each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        _, _, phase = record.name.partition(".")
        record.phase = phase or _LOGGER_NAME
        return True


def configure_logging(
    *,
    verbose: bool = False,
    debug_phases: Iterable[str] = (),
    log_file: Path | None = None,
) -> logging.Logger:
    """Route idlwrap logging to the console and an optional file.

    ``verbose`` turns on debug output for every phase; ``debug_phases`` does
    so for the named phases only.  Calling this again replaces the previous
    handlers and phase levels.
    """
    selected = set(PHASES) if verbose else set(debug_phases)
    unknown = selected.difference(PHASES)
    if unknown:
        raise ValueError(f"Unknown logging phase(s): {', '.join(sorted(unknown))}")

    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False
    for phase in PHASES:
        get_logger(phase).setLevel(logging.DEBUG if phase in selected else logging.NOTSET)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handler_level = logging.DEBUG if selected else logging.INFO
    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(handler_level)
    stream_handler.addFilter(_PhaseFilter())
    stream_handler.setFormatter(logging.Formatter(DEBUG_CONSOLE_FORMAT if selected else CONSOLE_FORMAT))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(handler_level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger


__all__ = ["PHASES", "configure_logging", "get_logger"]
