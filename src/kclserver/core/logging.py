"""Logging setup for the kclserver CLI.

Records from ``kclserver.*`` loggers go to stderr through a single handler
on the package logger, so ``kclserver resolve`` and ``kclserver command``
keep stdout for their output.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

PACKAGE_LOGGER_NAME = "kclserver"

_HANDLER_NAME = "kclserver-stderr"


def _level_for(*, debug: bool, verbose: bool, quiet: bool) -> int:
    if quiet:
        return logging.ERROR
    if debug:
        return logging.DEBUG
    if verbose:
        return logging.INFO
    return logging.WARNING


def configure_logging(*, debug: bool = False, verbose: bool = False, quiet: bool = False) -> None:
    """Configure the package logger based on CLI flags.

    Precedence:
    - quiet → ERROR
    - debug → DEBUG
    - verbose → INFO
    - default → WARNING

    Safe to call repeatedly; the stderr handler is installed once and
    re-pointed at the current ``sys.stderr`` on each call.
    """
    level = _level_for(debug=debug, verbose=verbose, quiet=quiet)
    logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    logger.setLevel(level)

    handler = _stderr_handler(logger)
    if handler is None:
        handler = logging.StreamHandler(sys.stderr)
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    else:
        handler.setStream(sys.stderr)
    handler.setLevel(level)


def _stderr_handler(logger: logging.Logger) -> Optional[logging.StreamHandler]:
    for handler in logger.handlers:
        if handler.get_name() == _HANDLER_NAME:
            return handler
    return None


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module-level logger."""

    return logging.getLogger(name if name is not None else __name__)
