"""Logging helpers."""

from __future__ import annotations

import json
import logging
import os
import sys
import time
from pathlib import Path
from typing import Any

PRODUCTION_ENV_VAR = "CFDATA_ENV"

_PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_RESERVED_ATTRS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
    "message",
    "asctime",
}


class JsonFormatter(logging.Formatter):
    """Render log records as compact JSON with UTC millisecond timestamps."""

    converter = time.gmtime
    default_time_format = "%Y-%m-%dT%H:%M:%S"
    default_msec_format = "%s.%03dZ"

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extras = {
            key: value for key, value in record.__dict__.items() if key not in _RESERVED_ATTRS
        }
        if extras:
            data.update(extras)

        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)

        return json.dumps(data, ensure_ascii=False, default=str)


def is_production(env: dict[str, str] | None = None) -> bool:
    source = env if env is not None else os.environ
    return source.get(PRODUCTION_ENV_VAR, "").strip().lower() == "production"


def configure_logging(
    *,
    level: int = logging.INFO,
    log_file: Path | None = None,
    console_level: int = logging.DEBUG,
    structured: bool = True,
    console: bool | None = None,
) -> None:
    """Configure root logging.

    JSON records go to ``log_file`` at ``level``. Outside production a console
    handler mirrors everything down to ``console_level``; ``structured``
    selects JSON or plain text for that console stream.
    """

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    if console is None:
        console = not is_production()

    root.setLevel(min(level, console_level) if console else level)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(JsonFormatter())
        root.addHandler(file_handler)

    if console:
        stream_handler = logging.StreamHandler(sys.stdout)
        stream_handler.setLevel(console_level)
        if structured:
            stream_handler.setFormatter(JsonFormatter())
        else:
            stream_handler.setFormatter(logging.Formatter(_PLAIN_FORMAT))
        root.addHandler(stream_handler)

    # requests/urllib3 debug output is noise at the console threshold
    logging.getLogger("urllib3").setLevel(max(level, logging.INFO))
    logging.getLogger("faker").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "is_production", "JsonFormatter"]
