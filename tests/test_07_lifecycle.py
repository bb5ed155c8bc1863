"""
Tests for the per-request state machine and the VoiceService pipeline.
"""
import asyncio

import pytest

from conftest import FakeProvider
from voicegen_ms.core.metrics import VoiceMetrics
from voicegen_ms.services.orchestrator import SynthesisOrchestrator
from voicegen_ms.services.outcomes import (
    Canceled,
    RequestLifecycle,
    RequestState,
    Succeeded,
    TimedOut,
    TransportFailed,
    Unauthorized,
    state_for_outcome,
)
from voicegen_ms.services.voice_service import VoiceService


class TestRequestLifecycle:

    def test_success_path(self):
        lc = RequestLifecycle()
        for state in (RequestState.VALIDATING, RequestState.SYNTHESIZING,
                      RequestState.SUCCEEDED, RequestState.RESPONDED):
            lc.advance(state)
        assert lc.state is RequestState.RESPONDED
        assert lc.history[0] is RequestState.RECEIVED
        assert len(lc.history) == 5

    def test_rejected_path(self):
        lc = RequestLifecycle()
        lc.advance(RequestState.VALIDATING)
        lc.advance(RequestState.REJECTED)
        lc.advance(RequestState.RESPONDED)
        assert lc.history == [
            RequestState.RECEIVED, RequestState.VALIDATING,
            RequestState.REJECTED, RequestState.RESPONDED,
        ]

    def test_cannot_skip_validation(self):
        lc = RequestLifecycle()
        with pytest.raises(RuntimeError):
            lc.advance(RequestState.SYNTHESIZING)

    def test_rejected_never_synthesizes(self):
        lc = RequestLifecycle()
        lc.advance(RequestState.VALIDATING)
        lc.advance(RequestState.REJECTED)
        with pytest.raises(RuntimeError):
            lc.advance(RequestState.SYNTHESIZING)

    def test_no_state_revisited(self):
        lc = RequestLifecycle()
        lc.advance(RequestState.VALIDATING)
        lc.advance(RequestState.SYNTHESIZING)
        lc.advance(RequestState.TIMED_OUT)
        lc.advance(RequestState.RESPONDED)
        with pytest.raises(RuntimeError):
            lc.advance(RequestState.RESPONDED)

    @pytest.mark.parametrize("outcome, state", [
        (Succeeded(audio=b"x", mime_type="audio/wav"), RequestState.SUCCEEDED),
        (Canceled(reason_code="Error", detail="d"), RequestState.CANCELED),
        (TimedOut(budget_s=1.0), RequestState.TIMED_OUT),
        (TransportFailed(detail="d"), RequestState.TRANSPORT_FAILED),
        (Unauthorized(), RequestState.UNAUTHORIZED),
    ])
    def test_state_for_outcome(self, outcome, state):
        assert state_for_outcome(outcome) is state


class TestVoiceService:

    def make_service(self, make_config, provider, timeout_s=10.0):
        metrics = VoiceMetrics()
        service = VoiceService(
            make_config(timeout_s),
            SynthesisOrchestrator(provider, metrics=metrics),
            metrics=metrics,
        )
        return service, metrics

    def test_generate_success_records_metrics(self, make_config):
        service, metrics = self.make_service(make_config, FakeProvider())
        response = asyncio.run(service.generate("Hello", headers={"X-Request-Id": "rid"}))

        assert response.status_code == 200
        assert response.headers["x-request-id"] == "rid"
        assert metrics.registry.get_sample_value(
            "voicegen_requests_total", {"outcome": "succeeded"}) == 1.0

    def test_generate_rejection_skips_provider(self, make_config):
        provider = FakeProvider()
        service, metrics = self.make_service(make_config, provider)
        response = asyncio.run(service.generate("   "))

        assert response.status_code == 400
        assert provider.calls == []
        assert metrics.registry.get_sample_value(
            "voicegen_requests_total", {"outcome": "text_required"}) == 1.0

    def test_generate_timeout_label(self, make_config):
        service, metrics = self.make_service(make_config, FakeProvider(hang=True), timeout_s=0.05)
        response = asyncio.run(service.generate("Hello"))

        assert response.status_code == 504
        assert metrics.registry.get_sample_value(
            "voicegen_requests_total", {"outcome": "synthesis_timeout"}) == 1.0

    def test_health_info_has_no_secret(self, make_config):
        service, _ = self.make_service(make_config, FakeProvider())
        info = service.get_health_info()
        assert info["ok"] is True
        assert service.config.synthesis.credential_secret not in str(info)
