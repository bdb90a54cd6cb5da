"""
Logging setup for the simulator.

Modules grab a logger with ``get_logger(__name__)``; entrypoints call
``configure_logging()`` once at startup. Console output is always on, a log
file is optional, and ``json=True`` switches both handlers to one JSON
object per line.
"""

from __future__ import annotations

import json as _json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from infra.paths import LOG_STORAGE_DIR, STORAGE_DIR

__all__ = ["STORAGE_DIR", "LOG_STORAGE_DIR", "JsonFormatter", "configure_logging", "get_logger"]

_TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

# Attributes every LogRecord carries; anything else was passed via ``extra=``.
_RESERVED_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Render each record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return _json.dumps(payload, default=str, ensure_ascii=False)


def configure_logging(
    level: str | int = "INFO",
    json: bool = False,
    log_file: Optional[str | Path] = None,
) -> None:
    """
    Configure the root logger (console + optional file).

    Calling this again replaces the handlers installed by a previous call,
    so tests and entrypoints can reconfigure freely.

    Args:
        level: Logging level name or number
        json: Emit JSON lines instead of plain text
        log_file: Optional file path; relative paths land in storage/logs
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_survival_handler", False):
            root.removeHandler(handler)
            handler.close()

    formatter: logging.Formatter = JsonFormatter() if json else logging.Formatter(_TEXT_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    console._survival_handler = True  # type: ignore[attr-defined]
    root.addHandler(console)

    if log_file is not None:
        path = Path(log_file)
        if not path.is_absolute():
            path = LOG_STORAGE_DIR / path
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        file_handler._survival_handler = True  # type: ignore[attr-defined]
        root.addHandler(file_handler)

    root.setLevel(level.upper() if isinstance(level, str) else level)


def get_logger(name: str) -> logging.Logger:
    """Return a module logger (configuration is owned by configure_logging)."""
    return logging.getLogger(name)
