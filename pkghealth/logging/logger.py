# SPDX-License-Identifier: MIT

"""
Structured JSON logger for pkghealth.

Every log entry is a single JSON line with a timestamp, level, the source
module and the message. Health check results travel as `extra` fields so a
build pipeline can pick up the conflict map or the offending library paths
straight from the log stream instead of scraping text.

  {"ts": "2026-...", "level": "ERROR", "module": "pkghealth.health.relocation",
   "msg": "Relocation conflicts found", "conflicts": {...}}

`get_logger` is the only way to create loggers in this codebase.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


class JsonFormatter(logging.Formatter):
    """
    Formats log records as single-line JSON objects.

    The four mandatory fields are:
      ts      ISO 8601 UTC timestamp
      level   log level name
      module  the logger name (usually the Python module path)
      msg     the formatted message string

    Anything passed through the `extra` kwarg is merged into the object.
    """

    _STANDARD_ATTRS = frozenset(
        {
            "name",
            "msg",
            "args",
            "created",
            "relativeCreated",
            "exc_info",
            "exc_text",
            "stack_info",
            "lineno",
            "funcName",
            "pathname",
            "filename",
            "module",
            "levelno",
            "levelname",
            "processName",
            "process",
            "threadName",
            "thread",
            "message",
            "msecs",
            "taskName",
        }
    )

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.name,
            "msg": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in self._STANDARD_ATTRS and not key.startswith("_"):
                entry[key] = value

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _resolve_log_level(level_name: str) -> int:
    """Turn a level name string into the corresponding logging constant."""
    upper = level_name.upper()
    if upper not in _VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid log level '{level_name}'. Must be one of: {', '.join(sorted(_VALID_LOG_LEVELS))}"
        )
    return getattr(logging, upper)


def get_logger(
    name: str,
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    Create a structured JSON logger.

    Every module calls this once at import time and keeps the returned
    instance. Calling it again for the same name updates the level but does
    not stack another set of handlers.

    Args:
        name: Logger name, typically __name__ of the calling module.
        log_level: One of DEBUG, INFO, WARNING, ERROR, CRITICAL.
        log_file: Optional path to a log file. If provided, logs go to both
                  stderr and the file.

    Returns:
        A configured logging.Logger that outputs structured JSON.
    """
    logger = logging.getLogger(name)
    level = _resolve_log_level(log_level)
    logger.setLevel(level)

    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    formatter = JsonFormatter()

    # stderr keeps stdout free for whatever the calling pipeline pipes around.
    stream_handler = logging.StreamHandler(stream=sys.stderr)
    stream_handler.setLevel(level)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False

    return logger


def configure_package_logging(log_level: str = "INFO", log_file: Optional[Path] = None) -> None:
    """
    Re-level every pkghealth logger that already exists.

    Module loggers are created at import time with the default level, before
    the CLI has parsed --log-level or loaded the config. This brings them in
    line afterwards.
    """
    names = [
        logger_name
        for logger_name, existing in logging.root.manager.loggerDict.items()
        if isinstance(existing, logging.Logger)
        and (logger_name == "pkghealth" or logger_name.startswith("pkghealth."))
    ]
    for logger_name in sorted(names):
        logger = get_logger(logger_name, log_level=log_level)
        if log_file is not None and not any(
            isinstance(h, logging.FileHandler) for h in logger.handlers
        ):
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
            file_handler.setLevel(logger.level)
            file_handler.setFormatter(JsonFormatter())
            logger.addHandler(file_handler)
