"""
Logging Context and State.

Holds the per-request correlation id (a ContextVar, so every asyncio task
sees its own value) and the process-wide logging state: the active
verbosity level and whether handlers have been installed.

Environment Variables:
    - VOICEGEN_SETTINGS: settings file to read the ``logging`` section from
    - VOICEGEN_LOG_LEVEL: verbosity override (1-4 or a level name)
    - VOICEGEN_LOG_DIR: directory for the JSONL log file
    - VOICEGEN_JSONL_FILE: JSONL filename (default voicegen-ms.jsonl)
"""
from __future__ import annotations

import os
from contextvars import ContextVar
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .levels import LEVEL_NAMES, LogLevel

_request_id: ContextVar[str] = ContextVar("request_id", default="-")

_configured: bool = False
_current_level: LogLevel = LogLevel.NORMAL


def get_request_id() -> str:
    """Return the request id bound to the current context, or "-"."""
    return _request_id.get()


def set_request_id(rid: str) -> None:
    """Bind a request id to the current context for log correlation."""
    _request_id.set(rid)


def get_level() -> LogLevel:
    return _current_level


def set_level(level: LogLevel) -> None:
    global _current_level
    _current_level = level


def get_level_name() -> str:
    return LEVEL_NAMES.get(int(_current_level), "NORMAL")


def is_configured() -> bool:
    return _configured


def set_configured(value: bool) -> None:
    global _configured
    _configured = value


def read_logging_config(settings_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Resolve logging options from the settings file and the environment.

    The settings file is optional here: logging must come up even when the
    file is missing or unreadable, so startup errors can still be reported.
    Environment variables win over the file.

    Args:
        settings_path: Settings file. None falls back to VOICEGEN_SETTINGS,
            then config/settings.yaml.

    Returns:
        Dictionary with any of ``level``, ``log_dir``, ``jsonl_file``.
    """
    cfg: Dict[str, Any] = {}

    path = Path(settings_path or os.getenv("VOICEGEN_SETTINGS", "config/settings.yaml"))
    if path.is_file():
        try:
            with path.open("r", encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError):
            raw = {}
        if isinstance(raw, dict):
            cfg.update(raw.get("logging") or {})

    if os.getenv("VOICEGEN_LOG_LEVEL"):
        cfg["level"] = os.environ["VOICEGEN_LOG_LEVEL"]
    if os.getenv("VOICEGEN_LOG_DIR"):
        cfg["log_dir"] = os.environ["VOICEGEN_LOG_DIR"]
    if os.getenv("VOICEGEN_JSONL_FILE"):
        cfg["jsonl_file"] = os.environ["VOICEGEN_JSONL_FILE"]

    return cfg
