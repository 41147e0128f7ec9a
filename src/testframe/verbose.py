"""Verbose logging configuration for debug output."""

from __future__ import annotations

import logging
import sys
from pathlib import Path


def setup_logger(
    debug_file: Path, verbose: bool = False, logger_name: str = "testframe"
) -> logging.Logger:
    """
    Configure the run logger.

    Every record goes to debug_file; with verbose=True records are echoed
    to stderr as well. The logger does not propagate to the root logger.

    Args:
        debug_file: Path of the run's debug.log (parents are created)
        verbose: Also echo records to stderr.
        logger_name: Logger to configure; must not already have handlers.

    Raises:
        RuntimeError: if the named logger already has handlers attached.
    """
    logger = logging.getLogger(logger_name)

    if logger.handlers:
        raise RuntimeError(
            f"Logger '{logger_name}' already exists with active handlers; "
            "use a unique logger name or close the previous one"
        )

    logger.disabled = False
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    formatter = logging.Formatter(
        fmt="[%(asctime)s] %(levelname)s %(message)s", datefmt="%Y-%m-%dT%H:%M:%S"
    )

    debug_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(debug_file, mode="a")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    if verbose:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setLevel(logging.DEBUG)
        stderr_handler.setFormatter(formatter)
        logger.addHandler(stderr_handler)

    return logger


def close_logger(logger: logging.Logger) -> None:
    """Flush, close and detach every handler so the name can be reused."""
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
