"""
Voice Generation Service.

This module wires the request pipeline together. It is the single entry
point used by the HTTP layer; route handlers do not call the validator,
orchestrator or classifier directly.

Architecture:
    VoiceService
    ├── validate_text()           Trim + length check (no suspension)
    ├── SynthesisOrchestrator     One bounded provider call
    ├── classify()                Outcome -> safe ErrorResponse
    └── formatter                 Outcome -> fastapi Response

Request Pipeline:
    1. RECEIVED -> VALIDATING
    2. Validation fails        -> REJECTED
       Validation passes       -> SYNTHESIZING
    3. Orchestrator outcome    -> SUCCEEDED | CANCELED | TIMED_OUT |
                                  TRANSPORT_FAILED | UNAUTHORIZED
    4. Response built          -> RESPONDED
    5. Metrics recorded with the outcome label

Error Handling:
    Validation and provider failures come back as classified responses.
    Anything unexpected is logged with its type and answered with
    500 ``internal_error``. ``asyncio.CancelledError`` is never caught here;
    it propagates to the server after the orchestrator released its client.

Example:
    >>> service = VoiceService(config, SynthesisOrchestrator(provider))
    >>> response = await service.generate("Hello world")
    >>> response.status_code
    200
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import Response

from voicegen_ms.core.config import ServiceConfig
from voicegen_ms.core.logging import error, get_logger, info, success
from voicegen_ms.core.metrics import VoiceMetrics, metrics as default_metrics
from voicegen_ms.services.errors import INTERNAL_ERROR, ErrorResponse, classify
from voicegen_ms.services.formatter import format_error, format_success
from voicegen_ms.services.orchestrator import SynthesisOrchestrator
from voicegen_ms.services.outcomes import (
    RequestLifecycle,
    RequestState,
    Succeeded,
    state_for_outcome,
)
from voicegen_ms.services.validators import ValidationError, validate_text
from voicegen_ms.utils.timeit import timeit

_LOG = get_logger("voicegen-ms.service")

OUTCOME_SUCCEEDED = "succeeded"


class VoiceService:
    """
    Request pipeline for ``POST /api/generate-voice``.

    One instance per process. It holds only the read-only configuration and
    the stateless orchestrator, so concurrent calls share nothing mutable.

    Args:
        config: Configuration loaded at startup.
        orchestrator: Synthesis orchestrator bound to a provider.
        metrics: Metrics sink (process-wide instance by default).
    """

    def __init__(
        self,
        config: ServiceConfig,
        orchestrator: SynthesisOrchestrator,
        metrics: Optional[VoiceMetrics] = None,
    ):
        self._config = config
        self._orchestrator = orchestrator
        self._metrics = metrics or default_metrics

    @property
    def config(self) -> ServiceConfig:
        return self._config

    @property
    def orchestrator(self) -> SynthesisOrchestrator:
        return self._orchestrator

    async def generate(
        self,
        raw_text: Optional[str],
        headers: Optional[Dict[str, str]] = None,
    ) -> Response:
        """
        Handle one synthesis request end to end.

        Args:
            raw_text: ``text`` from the request body (None if absent).
            headers: Extra response headers, e.g. X-Request-Id.

        Returns:
            Audio response on success, JSON error response otherwise.

        Raises:
            asyncio.CancelledError: The request task was cancelled.
        """
        lifecycle = RequestLifecycle()
        with timeit("request") as t:
            try:
                response, label, audio_bytes = await self._run(lifecycle, raw_text, headers)
            except Exception as e:
                error(_LOG, "internal_error", error_type=type(e).__name__,
                      state=lifecycle.state.value)
                response = format_error(INTERNAL_ERROR, headers=headers)
                label, audio_bytes = INTERNAL_ERROR.code, 0

        self._metrics.record_request(label, t.seconds, audio_bytes=audio_bytes)
        if label == OUTCOME_SUCCEEDED:
            success(_LOG, "voice_generated", bytes=audio_bytes, seconds=round(t.seconds, 3))
        else:
            info(_LOG, "request_done", outcome=label, status=response.status_code,
                 seconds=round(t.seconds, 3))
        return response

    async def _run(
        self,
        lifecycle: RequestLifecycle,
        raw_text: Optional[str],
        headers: Optional[Dict[str, str]],
    ) -> tuple[Response, str, int]:
        lifecycle.advance(RequestState.VALIDATING)
        try:
            text = validate_text(raw_text)
        except ValidationError as e:
            lifecycle.advance(RequestState.REJECTED)
            return self._respond_error(lifecycle, classify(e), headers)

        lifecycle.advance(RequestState.SYNTHESIZING)
        outcome = await self._orchestrator.synthesize(
            text, self._config.synthesis, self._config.budget_s
        )
        lifecycle.advance(state_for_outcome(outcome))

        if isinstance(outcome, Succeeded):
            response = format_success(
                outcome,
                filename=self._config.settings.api.download_filename,
                headers=headers,
            )
            lifecycle.advance(RequestState.RESPONDED)
            return response, OUTCOME_SUCCEEDED, outcome.size

        return self._respond_error(lifecycle, classify(outcome), headers)

    @staticmethod
    def _respond_error(
        lifecycle: RequestLifecycle,
        err: ErrorResponse,
        headers: Optional[Dict[str, str]],
    ) -> tuple[Response, str, int]:
        response = format_error(err, headers=headers)
        lifecycle.advance(RequestState.RESPONDED)
        return response, err.code, 0

    def get_health_info(self) -> Dict[str, Any]:
        """
        Health payload for ``GET /health``.

        Contains no credential or endpoint material.
        """
        synthesis = self._config.synthesis
        return {
            "ok": True,
            "provider": self._orchestrator.provider.name,
            "region": synthesis.region,
            "voice": synthesis.voice_profile_id,
            "timeout_s": self._config.budget_s,
        }
