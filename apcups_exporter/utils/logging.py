"""
Logging configuration for apcups-exporter.

``setup_logging`` installs a single stream handler on the root logger (or
on the logger passed in). Level and output format come from the arguments
when given, otherwise from APCUPS_LOG_LEVEL and APCUPS_LOG_FORMAT
(``text`` or ``json``).
"""
from __future__ import annotations

import logging
import os
from typing import Optional, Union

from pythonjsonlogger import jsonlogger

TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
JSON_FIELDS = "%(asctime)s %(levelname)s %(name)s %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

# Scrapes arrive every few seconds; their access lines only show at DEBUG
ACCESS_LOGGER = "uvicorn.access"


def resolve_level(level: Union[int, str, None] = None) -> int:
    """Turn a level name or number into a logging level, defaulting to INFO."""
    if level is None:
        level = os.getenv("APCUPS_LOG_LEVEL", "INFO")
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    return value if isinstance(value, int) else logging.INFO


def build_formatter(log_format: Optional[str] = None) -> logging.Formatter:
    log_format = (log_format or os.getenv("APCUPS_LOG_FORMAT", "text")).strip().lower()
    if log_format == "json":
        return jsonlogger.JsonFormatter(
            JSON_FIELDS,
            datefmt=DATE_FORMAT,
            rename_fields={"levelname": "level", "name": "logger"},
        )
    return logging.Formatter(TEXT_FORMAT, datefmt=DATE_FORMAT)


def setup_logging(
    force: bool = False,
    *,
    level: Union[int, str, None] = None,
    log_format: Optional[str] = None,
    logger: Optional[logging.Logger] = None,
) -> logging.Logger:
    """Attach the console handler and return the configured logger.

    Does nothing when the logger already has handlers, unless ``force``
    is set, in which case the existing handlers are replaced.
    """
    target = logger or logging.getLogger()
    if target.handlers:
        if not force:
            return target
        for handler in list(target.handlers):
            target.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(build_formatter(log_format))
    target.addHandler(handler)

    resolved = resolve_level(level)
    target.setLevel(resolved)
    logging.getLogger(ACCESS_LOGGER).setLevel(max(resolved, logging.WARNING))
    return target
