#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/stemimg/logging_utils.py
"""Logging setup for the stemimg command-line tool.

Library modules only create loggers. :func:`configure_logging` attaches the
handlers, and is called once by :func:`stemimg.cli.main`.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

CONSOLE_FORMAT = "%(levelname)s: %(message)s"
TRACE_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"
TRACE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# The rendering stack logs font lookups and image encoding at DEBUG
NOISY_LOGGERS = ("matplotlib", "PIL")


def resolve_level(log_level: int | str) -> int:
    """Return a numeric level for a level name, defaulting to INFO for unknown names."""
    if isinstance(log_level, int):
        return log_level
    level = logging.getLevelName(str(log_level).upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(
    log_level: int | str,
    log_file: Optional[str] = None,
    trace_mode: bool = False,
) -> logging.Logger:
    """Attach console and optional file handlers to the root logger.

    Equation rendering output (the JSON tree, the ``--rich`` table) and log
    records both go to the terminal, so the console format stays short unless
    ``trace_mode`` is set. A log file always gets timestamps and logger names.
    Loggers of the rendering libraries are held at WARNING outside trace mode.

    Parameters
    ----------
    log_level : int | str
        Numeric logging level or level name (e.g. "INFO")
    log_file : str, optional
        File that receives a copy of every record, appended to
    trace_mode : bool, default False
        Use the detailed format on the console and let the rendering
        libraries log at the selected level

    Returns
    -------
    logging.Logger
        The configured root logger

    """
    level = resolve_level(log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    trace_formatter = logging.Formatter(TRACE_FORMAT, datefmt=TRACE_DATE_FORMAT)
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(trace_formatter if trace_mode else logging.Formatter(CONSOLE_FORMAT))
    root_logger.addHandler(console_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.NOTSET if trace_mode else max(level, logging.WARNING))

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        except OSError as exc:
            root_logger.warning("Could not open log file %s: %s", log_file, exc)
        else:
            file_handler.setFormatter(trace_formatter)
            root_logger.addHandler(file_handler)
            root_logger.debug("Logging to file: %s", log_file)

    return root_logger
