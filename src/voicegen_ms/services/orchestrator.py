"""
SynthesisOrchestrator - one bounded synthesis attempt.

Algorithm:
    1. Acquire a provider client owned by this call
    2. Issue exactly one synthesis request for the validated text and the
       configured custom voice
    3. Await the result for at most ``budget_s`` seconds
    4. Classify what happened into a SynthesisOutcome

There is no retry. Every provider failure becomes an outcome; provider
exception types never leave this module. The only exception that does
propagate is ``asyncio.CancelledError`` (caller went away or the server is
shutting down); the client is still released on that path.

Outcome Mapping:
    ProviderAudio (non-empty)                       -> Succeeded
    ProviderAudio (empty)                           -> Canceled("Error", "EmptyAudio")
    ProviderCancellation, auth reason/code          -> Unauthorized
    ProviderCancellation, anything else             -> Canceled
    ProviderTransportError / unexpected exception   -> TransportFailed
    budget elapsed                                  -> TimedOut

Example:
    >>> orchestrator = SynthesisOrchestrator(AzureSpeechProvider())
    >>> outcome = await orchestrator.synthesize(validate_text("Hello"), config, 10.0)
"""
from __future__ import annotations

import asyncio

from voicegen_ms.core.config import SynthesisConfig
from voicegen_ms.core.logging import debug, get_logger, verbose, warn
from voicegen_ms.core.metrics import VoiceMetrics, metrics as default_metrics
from voicegen_ms.providers.base import (
    ProviderAudio,
    ProviderCancellation,
    ProviderResult,
    ProviderTransportError,
    SynthesisProvider,
    VoiceIdentity,
)
from voicegen_ms.services.outcomes import (
    Canceled,
    Succeeded,
    SynthesisOutcome,
    TimedOut,
    TransportFailed,
    Unauthorized,
)
from voicegen_ms.services.validators import ValidatedText
from voicegen_ms.utils.timeit import timeit

_LOG = get_logger("voicegen-ms.orchestrator")

# Cancellation reasons/codes that mean the credentials were rejected
UNAUTHORIZED_CODES = frozenset({"AuthenticationFailure", "Forbidden"})


class SynthesisOrchestrator:
    """
    Drives a single synthesis attempt against a provider.

    Holds no per-request state, so one instance serves all concurrent
    requests. Each call acquires its own provider client.

    Args:
        provider: The synthesis provider binding.
        metrics: Metrics sink for the in-flight gauge.
    """

    def __init__(self, provider: SynthesisProvider, metrics: VoiceMetrics | None = None):
        self._provider = provider
        self._metrics = metrics or default_metrics

    @property
    def provider(self) -> SynthesisProvider:
        return self._provider

    async def synthesize(
        self,
        text: ValidatedText,
        config: SynthesisConfig,
        budget_s: float,
    ) -> SynthesisOutcome:
        """
        Synthesize ``text`` with the configured voice within ``budget_s``.

        Args:
            text: Output of validate_text().
            config: Shared, read-only voice configuration.
            budget_s: Maximum seconds to wait for the provider.

        Returns:
            Exactly one SynthesisOutcome case.

        Raises:
            asyncio.CancelledError: The surrounding task was cancelled.
        """
        voice = VoiceIdentity.from_config(config)
        verbose(_LOG, "synthesis_start", chars=len(text), voice=voice.voice_name, budget_s=budget_s)

        t = timeit("synthesis")
        self._metrics.inflight_inc()
        try:
            with t:
                # The client is released when this block exits, before classification
                async with self._provider.acquire(config) as client:
                    result = await asyncio.wait_for(
                        client.synthesize(str(text), voice),
                        timeout=budget_s,
                    )
        except asyncio.TimeoutError:
            return TimedOut(budget_s=budget_s)
        except ProviderTransportError as e:
            return TransportFailed(detail=e.detail)
        except asyncio.CancelledError:
            warn(_LOG, "synthesis_abandoned", seconds=round(t.seconds, 3))
            raise
        except Exception as e:
            # Anything else raised by the binding counts as a transport failure
            return TransportFailed(detail=f"{type(e).__name__}: {e}")
        finally:
            self._metrics.inflight_dec()

        outcome = self._classify_result(result)
        debug(_LOG, "synthesis_result", outcome=type(outcome).__name__,
              seconds=round(t.seconds, 3))
        return outcome

    @staticmethod
    def _classify_result(result: ProviderResult) -> SynthesisOutcome:
        if isinstance(result, ProviderAudio):
            if not result.audio:
                return Canceled(
                    reason_code="Error",
                    error_code="EmptyAudio",
                    detail="provider reported success with no audio data",
                )
            return Succeeded(audio=result.audio, mime_type=result.mime_type)

        if isinstance(result, ProviderCancellation):
            if result.reason in UNAUTHORIZED_CODES or result.error_code in UNAUTHORIZED_CODES:
                return Unauthorized(
                    reason_code=result.error_code or result.reason,
                    detail=result.detail,
                )
            return Canceled(
                reason_code=result.reason,
                error_code=result.error_code,
                detail=result.detail,
            )

        return TransportFailed(detail=f"unexpected provider result: {type(result).__name__}")
