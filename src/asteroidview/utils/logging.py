"""Console and optional file logging for the pose publisher and viewer loops."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    verbose: bool = False,
    log_file: str | Path | None = None,
    log_format: str | None = None,
) -> logging.Logger:
    """
    Configure logging for the asteroidview package.

    Args:
        verbose: If True, set log level to DEBUG (per-tick output). Otherwise INFO.
        log_file: Optional path of a file to append log records to
        log_format: Override log format string

    Returns:
        The "asteroidview" package logger
    """
    level = logging.DEBUG if verbose else logging.INFO
    if log_format is None:
        log_format = DEFAULT_LOG_FORMAT

    handlers: list[logging.Handler] = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(log_format))
    handlers.append(console_handler)

    if log_file is not None:
        log_path = Path(log_file)
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path, mode="a")
        except OSError as e:
            print(
                f"Warning: Could not setup file logging at {log_path}: {e}",
                file=sys.stderr,
            )
        else:
            file_handler.setLevel(level)
            file_handler.setFormatter(logging.Formatter(log_format))
            handlers.append(file_handler)

    logging.basicConfig(level=level, format=log_format, handlers=handlers, force=True)

    logger = logging.getLogger("asteroidview")
    logger.setLevel(level)
    return logger
