"""Logging for openapi-tooldefs.

Thin layer over the standard library ``logging`` module:

- :class:`StructuredLogger` accepts keyword fields (``logger.info("msg", path="/x")``)
  and forwards them as ``extra`` so formatters can render them.
- :class:`JSONFormatter` emits one JSON object per line (for CI pipelines).
- :class:`HumanFormatter` emits short colored-free lines for terminals.

Example:
    >>> from openapi_tooldefs.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG")
    >>> log = get_logger("extractor")
    >>> log.info("Extracted tools", count=12)
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Optional

__all__ = [
    "ROOT_LOGGER_NAME",
    "StructuredLogger",
    "JSONFormatter",
    "HumanFormatter",
    "configure_logging",
    "get_logger",
]

ROOT_LOGGER_NAME = "openapi_tooldefs"

# Attributes present on every LogRecord; anything else came in through ``extra``.
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime", "taskName"}


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS}


class JSONFormatter(logging.Formatter):
    """Format records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.levelno >= logging.ERROR:
            data["location"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }
        data.update(_extra_fields(record))
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        return json.dumps(data, default=str)


class HumanFormatter(logging.Formatter):
    """Format records as ``LEVEL    logger: message key=value``."""

    def format(self, record: logging.LogRecord) -> str:
        line = f"{record.levelname:<8} {record.name}: {record.getMessage()}"
        fields = _extra_fields(record)
        if fields:
            line += " " + " ".join(f"{k}={v}" for k, v in fields.items())
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class StructuredLogger:
    """Logger wrapper that takes keyword fields.

    Keyword arguments are passed through ``extra`` so they show up as
    separate keys with :class:`JSONFormatter` and as ``key=value`` pairs with
    :class:`HumanFormatter`.
    """

    def __init__(self, name: str):
        self.name = name
        self._logger = logging.getLogger(name)

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def _log(self, level: int, msg: str, exc_info: Any = None, **fields: Any) -> None:
        if self._logger.isEnabledFor(level):
            self._logger.log(level, msg, exc_info=exc_info, extra=fields or None, stacklevel=3)

    def debug(self, msg: str, **fields: Any) -> None:
        self._log(logging.DEBUG, msg, **fields)

    def info(self, msg: str, **fields: Any) -> None:
        self._log(logging.INFO, msg, **fields)

    def warning(self, msg: str, **fields: Any) -> None:
        self._log(logging.WARNING, msg, **fields)

    def error(self, msg: str, **fields: Any) -> None:
        self._log(logging.ERROR, msg, **fields)

    def exception(self, msg: str, **fields: Any) -> None:
        fields.setdefault("exc_info", True)
        self._log(logging.ERROR, msg, **fields)


def get_logger(name: str) -> StructuredLogger:
    """Return a :class:`StructuredLogger` under the package namespace.

    ``get_logger("extractor")`` and ``get_logger("openapi_tooldefs.extractor")``
    return loggers with the same name.
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return StructuredLogger(name)


def configure_logging(
    level: str | int = "INFO",
    format: str = "human",
    stream: Optional[Any] = None,
) -> logging.Logger:
    """Configure the package root logger.

    Args:
        level: Level name or number.
        format: ``"human"`` or ``"json"``.
        stream: Target stream (stderr by default so stdout stays clean for output).

    Returns:
        The configured package root logger.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    root.setLevel(level)

    for handler in list(root.handlers):
        if getattr(handler, "_openapi_tooldefs", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(JSONFormatter() if format == "json" else HumanFormatter())
    handler._openapi_tooldefs = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    return root
