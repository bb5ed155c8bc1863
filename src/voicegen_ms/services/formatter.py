"""
ResponseFormatter - outcome to HTTP response.

    Succeeded      -> 200, raw audio, Content-Type from the outcome,
                      Content-Disposition attachment filename hint
    ErrorResponse  -> mapped status, JSON ``{"code", "message"}``

Formatting is pure: it builds a response value and never writes to the
network. Formatting the same outcome twice yields identical responses.
"""
from __future__ import annotations

from typing import Dict, Optional

from fastapi import Response
from fastapi.responses import JSONResponse

from voicegen_ms.core.config import Defaults
from voicegen_ms.services.errors import ErrorResponse, classify
from voicegen_ms.services.outcomes import Succeeded, SynthesisOutcome


def format_success(
    outcome: Succeeded,
    filename: str = Defaults.API_DOWNLOAD_FILENAME,
    headers: Optional[Dict[str, str]] = None,
) -> Response:
    """
    Build the audio response.

    Args:
        outcome: The successful synthesis.
        filename: Download filename hint.
        headers: Extra headers (e.g. X-Request-Id).
    """
    all_headers = {
        "Content-Disposition": f'attachment; filename="{filename}"',
        "X-Bytes": str(outcome.size),
    }
    if headers:
        all_headers.update(headers)
    return Response(content=outcome.audio, media_type=outcome.mime_type, headers=all_headers)


def format_error(error: ErrorResponse, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    """Build the JSON error response for a classified error."""
    return JSONResponse(status_code=error.http_status, content=error.to_dict(), headers=headers)


def format_outcome(
    outcome: SynthesisOutcome,
    filename: str = Defaults.API_DOWNLOAD_FILENAME,
    headers: Optional[Dict[str, str]] = None,
) -> Response:
    """
    Render any synthesis outcome.

    Non-success outcomes go through the error classifier first.
    """
    if isinstance(outcome, Succeeded):
        return format_success(outcome, filename=filename, headers=headers)
    return format_error(classify(outcome), headers=headers)
