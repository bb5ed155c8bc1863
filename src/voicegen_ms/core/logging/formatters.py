"""
Log Formatters.

    JsonlFormatter: one JSON object per line, for files and log shippers.
    ConsoleFormatter: compact, optionally colored line for terminals.

Output Examples:
    JSONL:
        {"ts":"2026-10-19T14:30:05+00:00","level":2,"tag":"SUCCESS","message":"synthesized","request_id":"a1b2c3d4e5f6","seconds":0.84,"extra":{"bytes":91244}}

    Console:
        14:30:05 [SUCCESS] (a1b2c3d4e5f6) synthesized bytes=91244 0.840s

Colors are disabled when stdout is not a TTY, when NO_COLOR is set, or
when VOICEGEN_NO_COLOR=1.
"""
from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime
from typing import Any, Dict


class Colors:
    """ANSI escape codes used by the console formatter."""
    RESET = "\033[0m"
    DIM = "\033[2m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"
    GRAY = "\033[90m"
    BRIGHT_RED = "\033[91m"
    BRIGHT_GREEN = "\033[92m"
    BRIGHT_YELLOW = "\033[93m"
    BRIGHT_CYAN = "\033[96m"


_TAG_COLORS = {
    "SUCCESS": Colors.BRIGHT_GREEN,
    "FAIL": Colors.BRIGHT_RED,
    "ERROR": Colors.BRIGHT_RED,
    "WARN": Colors.BRIGHT_YELLOW,
    "INFO": Colors.BRIGHT_CYAN,
    "DEBUG": Colors.GRAY,
}


def supports_color() -> bool:
    """Decide whether console output should carry ANSI colors."""
    if os.getenv("VOICEGEN_NO_COLOR", "0") == "1":
        return False
    if os.getenv("NO_COLOR"):
        return False
    isatty = getattr(sys.stdout, "isatty", None)
    return bool(isatty and isatty())


class JsonlFormatter(logging.Formatter):
    """
    Format records as single-line JSON.

    Fields: ts, level (1-4), tag, message, request_id, and when present
    event, seconds, extra.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created).astimezone().isoformat(),
            "level": getattr(record, "numeric_level", 2),
            "tag": getattr(record, "tag", record.levelname),
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", "-"),
        }

        event = getattr(record, "event", None)
        if event:
            payload["event"] = event

        seconds = getattr(record, "seconds", None)
        if seconds is not None:
            payload["seconds"] = seconds

        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            payload["extra"] = extra_data

        return json.dumps(payload, ensure_ascii=False, default=str)


class ConsoleFormatter(logging.Formatter):
    """
    Format records as ``HH:MM:SS [ TAG ] (rid) message key=value 0.123s``.

    Args:
        use_colors: Force colors on or off. None means auto-detect.
    """

    def __init__(self, use_colors: bool | None = None):
        super().__init__()
        self.use_colors = supports_color() if use_colors is None else use_colors

    def _paint(self, text: str, color: str) -> str:
        if not self.use_colors:
            return text
        return f"{color}{text}{Colors.RESET}"

    def format(self, record: logging.LogRecord) -> str:
        tag = getattr(record, "tag", record.levelname)
        rid = getattr(record, "request_id", "-")

        parts = [
            self._paint(datetime.fromtimestamp(record.created).strftime("%H:%M:%S"), Colors.DIM),
            self._paint(f"[{tag:^7}]", _TAG_COLORS.get(tag, Colors.RESET)),
        ]
        if rid != "-":
            parts.append(self._paint(f"({rid})", Colors.DIM + Colors.CYAN))
        parts.append(record.getMessage())

        event = getattr(record, "event", None)
        if event:
            parts.append(self._paint(f"event={event}", Colors.BLUE))

        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            for key, value in extra_data.items():
                parts.append(self._paint(f"{key}={value}", Colors.DIM))

        seconds = getattr(record, "seconds", None)
        if seconds is not None:
            # Thresholds sized for phrases of at most 500 characters
            if seconds < 1.0:
                color = Colors.GREEN
            elif seconds < 5.0:
                color = Colors.YELLOW
            else:
                color = Colors.RED
            parts.append(self._paint(f"{seconds:.3f}s", color))

        return " ".join(parts)
