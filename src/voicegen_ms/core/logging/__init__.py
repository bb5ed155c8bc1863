"""
voicegen-ms Structured Logging.

Thin layer over the standard ``logging`` module adding:
    - numeric verbosity levels 1-4 (see levels.py)
    - request id correlation via contextvars (see context.py)
    - colored console output and JSONL file output (see formatters.py)

Usage:
    from voicegen_ms.core.logging import get_logger, info, fail

    log = get_logger("voicegen-ms.orchestrator")
    info(log, "synthesis_start", chars=11)
    fail(log, "provider_canceled", reason="Error", error_code="AuthenticationFailure")

Every helper takes arbitrary keyword fields; ``seconds`` and ``event`` are
promoted to first-class record attributes, the rest land in ``extra``.

Never pass credential values as fields. Logs are an external sink.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

from .context import (
    get_level,
    get_level_name,
    get_request_id,
    is_configured,
    read_logging_config,
    set_configured,
    set_level,
    set_request_id,
)
from .formatters import ConsoleFormatter, JsonlFormatter, supports_color
from .levels import LEVEL_MAP, LEVEL_NAMES, LogLevel, coerce_level

_ROTATE_MAX_BYTES = 10 * 1024 * 1024
_ROTATE_BACKUP_COUNT = 5


def configure_logging(
    level: Optional[int | str | LogLevel] = None,
    force: bool = False,
    settings_path: Optional[str] = None,
) -> None:
    """
    Install console (and optionally JSONL file) handlers on the root logger.

    Args:
        level: Verbosity override. None reads settings/env.
        force: Reconfigure even if already configured.
        settings_path: Settings file holding the ``logging`` section.
    """
    if is_configured() and not force:
        return

    log_config = read_logging_config(settings_path)
    current = coerce_level(level if level is not None else log_config.get("level", LogLevel.NORMAL))
    set_level(current)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG - 5)
    root.handlers = []

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(LEVEL_MAP.get(current, logging.INFO))
    console.setFormatter(ConsoleFormatter())
    root.addHandler(console)

    log_dir = log_config.get("log_dir")
    if log_dir:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            Path(log_dir) / str(log_config.get("jsonl_file", "voicegen-ms.jsonl")),
            maxBytes=_ROTATE_MAX_BYTES,
            backupCount=_ROTATE_BACKUP_COUNT,
            encoding="utf-8",
            delay=True,
        )
        file_handler.setLevel(logging.DEBUG - 5)
        file_handler.setFormatter(JsonlFormatter())
        root.addHandler(file_handler)

    set_configured(True)


def get_logger(name: str = "voicegen-ms") -> logging.Logger:
    """Get a named logger, configuring logging on first use."""
    configure_logging()
    return logging.getLogger(name)


def _log(
    logger: logging.Logger,
    level: int,
    tag: str,
    msg: str,
    numeric_level: int,
    **fields: Any,
) -> None:
    if numeric_level > get_level():
        return

    event = fields.pop("event", None)
    seconds = fields.pop("seconds", None)
    logger.log(
        level,
        msg,
        extra={
            "tag": tag,
            "request_id": get_request_id(),
            "event": event,
            "seconds": seconds,
            "extra_data": fields or None,
            "numeric_level": numeric_level,
        },
    )


def info(logger: logging.Logger, msg: str, **fields: Any) -> None:
    """Level 2 informational line."""
    _log(logger, logging.INFO, "INFO", msg, 2, **fields)


def warn(logger: logging.Logger, msg: str, **fields: Any) -> None:
    """Level 2 warning (latency incidents, degraded behavior)."""
    _log(logger, logging.WARNING, "WARN", msg, 2, **fields)


def error(logger: logging.Logger, msg: str, **fields: Any) -> None:
    """Level 1 error."""
    _log(logger, logging.ERROR, "ERROR", msg, 1, **fields)


def success(logger: logging.Logger, msg: str, **fields: Any) -> None:
    """Level 2 success line."""
    _log(logger, logging.INFO, "SUCCESS", msg, 2, **fields)


def fail(logger: logging.Logger, msg: str, **fields: Any) -> None:
    """Level 1 failure line, used for provider incidents."""
    _log(logger, logging.ERROR, "FAIL", msg, 1, **fields)


def verbose(logger: logging.Logger, msg: str, **fields: Any) -> None:
    """Level 3 detail."""
    _log(logger, logging.DEBUG, "INFO", msg, 3, **fields)


def debug(logger: logging.Logger, msg: str, **fields: Any) -> None:
    """Level 4 internals."""
    _log(logger, logging.DEBUG - 5, "DEBUG", msg, 4, **fields)


__all__ = [
    "LogLevel",
    "LEVEL_MAP",
    "LEVEL_NAMES",
    "coerce_level",
    "ConsoleFormatter",
    "JsonlFormatter",
    "supports_color",
    "configure_logging",
    "get_logger",
    "get_request_id",
    "set_request_id",
    "get_level",
    "get_level_name",
    "info",
    "warn",
    "error",
    "success",
    "fail",
    "verbose",
    "debug",
]
