"""Logging helpers shared across iquiz commands."""

from __future__ import annotations

import json
import logging
import sys
import tempfile
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

__all__ = [
    "JsonLogFormatter",
    "configure_logger",
    "close_logger",
]

_FILE_MARKER = "_iquiz_file"
_CONSOLE_MARKER = "_iquiz_console"


class JsonLogFormatter(logging.Formatter):
    """Emit log records as structured JSON lines."""

    _RESERVED = {
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
    }

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        extras = {
            key: _coerce_value(value)
            for key, value in record.__dict__.items()
            if key not in self._RESERVED
        }
        if extras:
            payload["extra"] = extras
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = record.stack_info
        return json.dumps(payload, ensure_ascii=True)


def configure_logger(
    name: str,
    *,
    log_dir: Path,
    level: str = "INFO",
    verbose: bool = False,
    max_bytes: int = 1024 * 1024,
    backup_count: int = 3,
    filename: str | None = None,
) -> tuple[logging.Logger, Path]:
    """Configure and return a namespaced logger with JSON file output.

    Child loggers (``iquiz.quiz.repository`` under ``iquiz``) propagate into
    the handlers installed here, so library modules only need
    ``logging.getLogger(__name__)``. Calling this again for the same name
    reuses the file handler unless the target path changed.
    """

    logger = logging.getLogger(name)
    logger.propagate = False
    logger.setLevel(logging.DEBUG)

    path = _log_path(log_dir, filename or f"{name.rsplit('.', 1)[-1]}.log")
    handler = _file_handler(
        logger, path, max_bytes=max_bytes, backup_count=backup_count
    )
    handler.setLevel(logging.DEBUG if verbose else _coerce_level(level))
    _set_console_handler(logger, enabled=verbose)
    return logger, path


def close_logger(logger: logging.Logger) -> None:
    """Flush, close and detach the handlers installed by ``configure_logger``."""

    for handler in _managed(logger, _FILE_MARKER) + _managed(
        logger, _CONSOLE_MARKER
    ):
        handler.flush()
        handler.close()
        logger.removeHandler(handler)


def _managed(logger: logging.Logger, marker: str) -> list[logging.Handler]:
    return [h for h in logger.handlers if getattr(h, marker, False)]


def _coerce_level(level: str) -> int:
    numeric = logging.getLevelName(level.upper())
    if isinstance(numeric, int):
        return numeric
    return logging.INFO


def _file_handler(
    logger: logging.Logger,
    path: Path,
    *,
    max_bytes: int,
    backup_count: int,
) -> RotatingFileHandler:
    target = str(path.absolute())
    for existing in _managed(logger, _FILE_MARKER):
        if getattr(existing, "baseFilename", None) == target:
            return existing  # type: ignore[return-value]
        existing.close()
        logger.removeHandler(existing)

    handler = RotatingFileHandler(
        path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setFormatter(JsonLogFormatter())
    setattr(handler, _FILE_MARKER, True)
    logger.addHandler(handler)
    return handler


def _set_console_handler(logger: logging.Logger, *, enabled: bool) -> None:
    existing = _managed(logger, _CONSOLE_MARKER)
    if not enabled:
        for handler in existing:
            logger.removeHandler(handler)
            handler.close()
        return
    if existing:
        return
    console = logging.StreamHandler(stream=sys.stderr)
    console.setLevel(logging.DEBUG)
    console.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
    setattr(console, _CONSOLE_MARKER, True)
    logger.addHandler(console)


def _coerce_value(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, dict):
        return {str(key): _coerce_value(val) for key, val in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_coerce_value(item) for item in value]
    return repr(value)


def _log_path(log_dir: Path, filename: str) -> Path:
    """Create ``log_dir`` (or the temp-dir fallback) and the log file in it."""

    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except PermissionError:
        log_dir = _fallback_log_dir()
        log_dir.mkdir(parents=True, exist_ok=True)
    _chmod_quietly(log_dir, 0o700)
    path = log_dir / filename
    path.touch(exist_ok=True)
    _chmod_quietly(path, 0o600)
    return path


def _chmod_quietly(path: Path, mode: int) -> None:
    try:
        path.chmod(mode)
    except PermissionError:  # pragma: no cover - depends on filesystem
        pass


def _fallback_log_dir() -> Path:
    return Path(tempfile.gettempdir()) / "iquiz-logs"
