"""
Tests for SynthesisOrchestrator.

Tests cover:
- Outcome classification for every provider result
- Budget enforcement and client release on timeout
- Exactly one provider call per request (no retry)
- Task cancellation releases the client and propagates
"""
import asyncio

import pytest

from conftest import FAKE_WAV, FakeProvider
from voicegen_ms.core.metrics import VoiceMetrics
from voicegen_ms.providers.base import (
    ProviderAudio,
    ProviderCancellation,
    ProviderTransportError,
    VoiceIdentity,
)
from voicegen_ms.services.orchestrator import SynthesisOrchestrator
from voicegen_ms.services.outcomes import (
    Canceled,
    Succeeded,
    TimedOut,
    TransportFailed,
    Unauthorized,
)
from voicegen_ms.services.validators import validate_text


def run(provider, config, budget_s=5.0, text="Hello world", metrics=None):
    orchestrator = SynthesisOrchestrator(provider, metrics=metrics or VoiceMetrics())
    return asyncio.run(orchestrator.synthesize(validate_text(text), config, budget_s))


class TestSuccess:

    def test_audio_becomes_succeeded(self, synthesis_config):
        provider = FakeProvider()
        outcome = run(provider, synthesis_config)
        assert isinstance(outcome, Succeeded)
        assert outcome.audio == FAKE_WAV
        assert outcome.mime_type == "audio/wav"

    def test_sends_text_and_voice_identity(self, synthesis_config):
        provider = FakeProvider()
        run(provider, synthesis_config, text="  Hello world  ")
        assert provider.calls == [(
            "Hello world",
            VoiceIdentity(
                voice_name=synthesis_config.voice_profile_id,
                endpoint_id=synthesis_config.endpoint_id,
            ),
        )]

    def test_client_released_after_success(self, synthesis_config):
        provider = FakeProvider()
        run(provider, synthesis_config)
        assert provider.open_clients == 0
        assert provider.closed == 1

    def test_empty_audio_is_canceled(self, synthesis_config):
        provider = FakeProvider(result=ProviderAudio(b"", "audio/wav"))
        outcome = run(provider, synthesis_config)
        assert isinstance(outcome, Canceled)
        assert outcome.error_code == "EmptyAudio"


class TestProviderFailures:

    @pytest.mark.parametrize("code", ["AuthenticationFailure", "Forbidden"])
    def test_auth_error_code_is_unauthorized(self, synthesis_config, code):
        provider = FakeProvider(result=ProviderCancellation("Error", code, "HTTP 401: denied"))
        outcome = run(provider, synthesis_config)
        assert isinstance(outcome, Unauthorized)
        assert outcome.reason_code == code
        assert outcome.detail == "HTTP 401: denied"

    def test_auth_reason_is_unauthorized(self, synthesis_config):
        provider = FakeProvider(result=ProviderCancellation("AuthenticationFailure", "", "bad key"))
        outcome = run(provider, synthesis_config)
        assert isinstance(outcome, Unauthorized)

    def test_other_cancellation_is_canceled(self, synthesis_config):
        provider = FakeProvider(result=ProviderCancellation("Error", "ServiceError", "HTTP 503: busy"))
        outcome = run(provider, synthesis_config)
        assert outcome == Canceled(reason_code="Error", error_code="ServiceError", detail="HTTP 503: busy")

    def test_transport_error(self, synthesis_config):
        provider = FakeProvider(result=ProviderTransportError("refused", detail="ConnectError: refused"))
        outcome = run(provider, synthesis_config)
        assert outcome == TransportFailed(detail="ConnectError: refused")
        assert provider.open_clients == 0

    def test_unexpected_exception_is_classified(self, synthesis_config):
        """Provider exception types never escape the orchestrator."""
        provider = FakeProvider(result=RuntimeError("boom"))
        outcome = run(provider, synthesis_config)
        assert isinstance(outcome, TransportFailed)
        assert "RuntimeError" in outcome.detail
        assert provider.open_clients == 0

    def test_single_attempt_on_failure(self, synthesis_config):
        provider = FakeProvider(result=ProviderTransportError("refused"))
        run(provider, synthesis_config)
        assert len(provider.calls) == 1
        assert len(provider.clients) == 1


class TestBudget:

    def test_timeout_returns_timed_out(self, synthesis_config):
        provider = FakeProvider(hang=True)
        outcome = run(provider, synthesis_config, budget_s=0.05)
        assert outcome == TimedOut(budget_s=0.05)

    def test_timeout_releases_client(self, synthesis_config):
        provider = FakeProvider(hang=True)
        run(provider, synthesis_config, budget_s=0.05)
        assert provider.open_clients == 0
        assert provider.closed == 1
        assert provider.clients[0].closed

    def test_timeout_single_attempt(self, synthesis_config):
        provider = FakeProvider(delay=1.0)
        run(provider, synthesis_config, budget_s=0.05)
        assert len(provider.calls) == 1

    def test_slow_but_within_budget(self, synthesis_config):
        provider = FakeProvider(delay=0.02)
        outcome = run(provider, synthesis_config, budget_s=2.0)
        assert isinstance(outcome, Succeeded)


class TestCancellation:

    def test_cancel_propagates_and_releases(self, synthesis_config):
        provider = FakeProvider(hang=True)
        metrics = VoiceMetrics()
        orchestrator = SynthesisOrchestrator(provider, metrics=metrics)

        async def scenario():
            task = asyncio.ensure_future(
                orchestrator.synthesize(validate_text("Hello"), synthesis_config, 30.0)
            )
            await asyncio.sleep(0.02)
            assert provider.open_clients == 1
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        asyncio.run(scenario())
        assert provider.open_clients == 0
        assert provider.closed == 1
        assert metrics.registry.get_sample_value("voicegen_inflight_requests") == 0

    def test_inflight_gauge_returns_to_zero(self, synthesis_config):
        metrics = VoiceMetrics()
        run(FakeProvider(), synthesis_config, metrics=metrics)
        run(FakeProvider(hang=True), synthesis_config, budget_s=0.02, metrics=metrics)
        assert metrics.registry.get_sample_value("voicegen_inflight_requests") == 0
