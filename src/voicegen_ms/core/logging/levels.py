"""
Verbosity Levels.

voicegen-ms exposes four verbosity levels instead of Python's five:

    1 = MINIMAL  - startup failures, provider incidents
    2 = NORMAL   - one line per request outcome (default)
    3 = VERBOSE  - validation rejections, per-stage timings
    4 = DEBUG    - provider request/response details

Each level maps onto a standard ``logging`` level so handlers can filter
records the usual way.
"""
from __future__ import annotations

import logging
from enum import IntEnum
from typing import Any


class LogLevel(IntEnum):
    """Numeric verbosity, higher is chattier."""
    MINIMAL = 1
    NORMAL = 2
    VERBOSE = 3
    DEBUG = 4


LEVEL_MAP = {
    LogLevel.MINIMAL: logging.WARNING,
    LogLevel.NORMAL: logging.INFO,
    LogLevel.VERBOSE: logging.DEBUG,
    LogLevel.DEBUG: logging.DEBUG - 5,
}

LEVEL_NAMES = {level.value: level.name for level in LogLevel}

_NAME_ALIASES = {
    "MINIMAL": LogLevel.MINIMAL,
    "CRITICAL": LogLevel.MINIMAL,
    "ERROR": LogLevel.MINIMAL,
    "WARNING": LogLevel.MINIMAL,
    "WARN": LogLevel.MINIMAL,
    "NORMAL": LogLevel.NORMAL,
    "INFO": LogLevel.NORMAL,
    "VERBOSE": LogLevel.VERBOSE,
    "DEBUG": LogLevel.DEBUG,
    "TRACE": LogLevel.DEBUG,
}


def coerce_level(value: Any) -> LogLevel:
    """
    Convert a configured value into a LogLevel.

    Accepts a LogLevel, an int 1-4, a Python logging level int, a numeric
    string, or a level name (ours or Python's). Anything unrecognized
    falls back to NORMAL.

    Examples:
        >>> coerce_level("3")
        <LogLevel.VERBOSE: 3>
        >>> coerce_level("warning")
        <LogLevel.MINIMAL: 1>
        >>> coerce_level(logging.INFO)
        <LogLevel.NORMAL: 2>
    """
    if isinstance(value, LogLevel):
        return value

    if isinstance(value, bool):
        return LogLevel.NORMAL

    if isinstance(value, int):
        if 1 <= value <= 4:
            return LogLevel(value)
        if value >= logging.WARNING:
            return LogLevel.MINIMAL
        if value >= logging.INFO:
            return LogLevel.NORMAL
        return LogLevel.DEBUG

    if isinstance(value, str):
        text = value.strip().upper()
        if text.isdigit():
            return coerce_level(int(text))
        return _NAME_ALIASES.get(text, LogLevel.NORMAL)

    return LogLevel.NORMAL


def parse_level(value: Any) -> LogLevel:
    """
    Strict form of coerce_level() for validating configuration.

    Raises:
        ValueError: ``value`` is not 1-4, a numeric string 1-4, or a known
            level name.
    """
    if isinstance(value, LogLevel):
        return value
    if isinstance(value, int) and not isinstance(value, bool) and 1 <= value <= 4:
        return LogLevel(value)
    if isinstance(value, str):
        text = value.strip().upper()
        if text.isdigit() and 1 <= int(text) <= 4:
            return LogLevel(int(text))
        if text in _NAME_ALIASES:
            return _NAME_ALIASES[text]
    raise ValueError(f"unknown log level: {value!r}")
