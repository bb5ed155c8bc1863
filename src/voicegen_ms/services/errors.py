"""
ErrorClassifier - the single place that decides what callers may see.

Every non-success result of a request is mapped through ``classify`` to an
ErrorResponse with a fixed status, a stable code and a fixed, safe message.
Diagnostic detail (provider reason codes, HTTP bodies, exception text) is
written to the log here and goes nowhere else.

Mapping (fixed, not configurable):
    ValidationError EMPTY     -> 400 text_required
    ValidationError TOO_LONG  -> 400 text_too_long
    TimedOut                  -> 504 synthesis_timeout
    Canceled                  -> 502 synthesis_canceled
    TransportFailed           -> 502 provider_unreachable
    Unauthorized              -> 500 configuration_error

HTTP-level additions (same body shape):
    malformed request body    -> 400 invalid_request
    unexpected exception      -> 500 internal_error

Logging Policy:
    validation rejections  VERBOSE, not an incident
    timeouts               WARN, latency incident with the budget
    provider failures      FAIL, with full reason/detail
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Union

from voicegen_ms.core.logging import fail, get_logger, verbose, warn
from voicegen_ms.services.outcomes import (
    Canceled,
    Succeeded,
    SynthesisOutcome,
    TimedOut,
    TransportFailed,
    Unauthorized,
)
from voicegen_ms.services.validators import ValidationError, ValidationErrorKind

_LOG = get_logger("voicegen-ms.errors")


class ErrorCode:
    """
    Stable error codes returned in the ``code`` field of error bodies.
    """
    TEXT_REQUIRED = "text_required"
    TEXT_TOO_LONG = "text_too_long"
    SYNTHESIS_TIMEOUT = "synthesis_timeout"
    SYNTHESIS_CANCELED = "synthesis_canceled"
    PROVIDER_UNREACHABLE = "provider_unreachable"
    CONFIGURATION_ERROR = "configuration_error"
    INVALID_REQUEST = "invalid_request"
    INTERNAL_ERROR = "internal_error"


@dataclass(frozen=True)
class ErrorResponse:
    """
    A classified, caller-safe error.

    Attributes:
        http_status: HTTP status code.
        code: One of ErrorCode.
        message: Fixed human-readable text. Never contains credentials or
            provider diagnostics.
    """
    http_status: int
    code: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        """Error body for the wire: ``{"code": ..., "message": ...}``."""
        return {"code": self.code, "message": self.message}


TEXT_REQUIRED = ErrorResponse(400, ErrorCode.TEXT_REQUIRED, "Text is required.")
TEXT_TOO_LONG = ErrorResponse(400, ErrorCode.TEXT_TOO_LONG, "Text must be at most 500 characters.")
SYNTHESIS_TIMEOUT = ErrorResponse(504, ErrorCode.SYNTHESIS_TIMEOUT, "Voice synthesis timed out. Please try again.")
SYNTHESIS_CANCELED = ErrorResponse(502, ErrorCode.SYNTHESIS_CANCELED, "Voice synthesis failed. Please try again.")
PROVIDER_UNREACHABLE = ErrorResponse(502, ErrorCode.PROVIDER_UNREACHABLE, "The voice service is unreachable. Please try again later.")
CONFIGURATION_ERROR = ErrorResponse(500, ErrorCode.CONFIGURATION_ERROR, "The voice service is misconfigured.")
INVALID_REQUEST = ErrorResponse(400, ErrorCode.INVALID_REQUEST, 'Request body must be a JSON object with a string "text" field.')
INTERNAL_ERROR = ErrorResponse(500, ErrorCode.INTERNAL_ERROR, "Internal server error.")


def classify(failure: Union[SynthesisOutcome, ValidationError]) -> ErrorResponse:
    """
    Map a failed request to its ErrorResponse and log the detail.

    Args:
        failure: A ValidationError or any non-Succeeded outcome.

    Returns:
        The fixed ErrorResponse for that case.

    Raises:
        ValueError: If given a Succeeded outcome (successes are formatted
            directly, there is nothing to classify).
    """
    if isinstance(failure, ValidationError):
        verbose(_LOG, "text_rejected", code=failure.code, reason=failure.message)
        if failure.kind is ValidationErrorKind.EMPTY:
            return TEXT_REQUIRED
        return TEXT_TOO_LONG

    if isinstance(failure, TimedOut):
        warn(_LOG, "synthesis_timeout", budget_s=failure.budget_s)
        return SYNTHESIS_TIMEOUT

    if isinstance(failure, Unauthorized):
        fail(_LOG, "provider_unauthorized", reason=failure.reason_code, detail=failure.detail)
        return CONFIGURATION_ERROR

    if isinstance(failure, Canceled):
        fail(_LOG, "provider_canceled", reason=failure.reason_code,
             error_code=failure.error_code, detail=failure.detail)
        return SYNTHESIS_CANCELED

    if isinstance(failure, TransportFailed):
        fail(_LOG, "provider_unreachable", detail=failure.detail)
        return PROVIDER_UNREACHABLE

    if isinstance(failure, Succeeded):
        raise ValueError("Succeeded outcomes are not errors")

    raise TypeError(f"cannot classify {type(failure).__name__}")
