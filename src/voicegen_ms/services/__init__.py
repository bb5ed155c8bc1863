"""
voicegen-ms Services Layer.

Business logic between the HTTP layer and the synthesis provider.

Components:
    - validators.py: Text validation (RequestValidator)
    - orchestrator.py: Single bounded synthesis attempt (SynthesisOrchestrator)
    - outcomes.py: SynthesisOutcome cases and the request lifecycle
    - errors.py: Outcome to safe error mapping (ErrorClassifier)
    - formatter.py: Outcome to HTTP response (ResponseFormatter)
    - voice_service.py: VoiceService, the per-request pipeline
"""
from .errors import ErrorCode, ErrorResponse, classify
from .orchestrator import SynthesisOrchestrator
from .outcomes import (
    Canceled,
    RequestLifecycle,
    RequestState,
    Succeeded,
    SynthesisOutcome,
    TimedOut,
    TransportFailed,
    Unauthorized,
)
from .validators import ValidatedText, ValidationError, ValidationErrorKind, validate_text
from .voice_service import VoiceService

__all__ = [
    "VoiceService",
    "SynthesisOrchestrator",
    "SynthesisOutcome",
    "Succeeded",
    "Canceled",
    "TimedOut",
    "TransportFailed",
    "Unauthorized",
    "RequestLifecycle",
    "RequestState",
    "ErrorCode",
    "ErrorResponse",
    "classify",
    "ValidatedText",
    "ValidationError",
    "ValidationErrorKind",
    "validate_text",
]
