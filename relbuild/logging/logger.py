# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Structured JSON logger for relbuild.

Every log entry is a single JSON line: timestamped, leveled, and tagged with
the source module. Stdout is reserved for build results (artifact paths,
digest lines) so callers can capture them, which means logs go to stderr.

How this works:
  - We use Python's standard `logging` module under the hood, but replace the
    default formatter with JsonFormatter, which serializes every log record
    into a single JSON line.
  - All loggers live under the `relbuild` package logger. Handlers are only
    attached there; module loggers propagate up to it. That way a single
    `configure_logging` call sets the level for every module.
  - `get_logger` is the only way to create loggers.

The JSON structure looks like:
  {"ts": "2026-...", "level": "INFO", "module": "relbuild.build.dist", "msg": "Artifact built", ...}
"""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

ROOT_LOGGER_NAME = "relbuild"

# Attributes every LogRecord carries. Anything else came in through `extra`.
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


class JsonFormatter(logging.Formatter):
    """
    Formats log records as single-line JSON objects.

    Each log entry contains four mandatory fields:
      ts     : ISO 8601 UTC timestamp
      level  : log level name
      module : the logger name (usually the Python module path)
      msg    : the formatted message string

    If the log call includes `extra` keyword args, those get merged into the
    JSON object as additional context fields. This is how the build steps
    attach things like target platform, command line or exit status.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.name,
            "msg": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                entry[key] = value

        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class _StderrHandler(logging.StreamHandler):
    """
    Stream handler bound to whatever sys.stderr is at emit time.

    Binding late keeps the handler working when sys.stderr gets swapped
    (pytest capture, redirect_stderr).
    """

    @property
    def stream(self):  # type: ignore[override]
        return sys.stderr

    @stream.setter
    def stream(self, value: object) -> None:
        pass


_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _resolve_log_level(level_name: str) -> int:
    """Turn a level name string into the corresponding logging constant."""
    upper = level_name.upper()
    if upper not in _VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid log level '{level_name}'. Must be one of: {', '.join(sorted(_VALID_LOG_LEVELS))}"
        )
    return getattr(logging, upper)


def _root_logger() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not root.handlers:
        handler = _StderrHandler()
        handler.setFormatter(JsonFormatter())
        root.addHandler(handler)
        root.setLevel(logging.INFO)
        # Don't propagate to the interpreter's root logger, we handle all output ourselves.
        root.propagate = False
    return root


def configure_logging(log_level: str = "INFO", log_file: Optional[Path] = None) -> None:
    """
    Set the level for every relbuild logger, optionally adding a file sink.

    Args:
        log_level: One of DEBUG, INFO, WARNING, ERROR, CRITICAL.
        log_file: Optional path to a log file. If provided, logs go to both
                  stderr and the file.

    Raises:
        ValueError: On an unknown level name.
    """
    level = _resolve_log_level(log_level)
    root = _root_logger()
    root.setLevel(level)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
        file_handler.setFormatter(JsonFormatter())
        root.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """
    Return a structured JSON logger.

    Every module calls this once at the top, usually with `__name__`. Names
    outside the `relbuild` namespace are nested under it so the package
    handler still sees their records.
    """
    _root_logger()
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
