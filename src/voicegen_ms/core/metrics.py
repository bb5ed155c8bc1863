"""
Prometheus Metrics for voicegen-ms.

Metrics Exposed:
    voicegen_requests_total             - Counter of requests by outcome
    voicegen_request_duration_seconds   - Histogram of request latency by outcome
    voicegen_audio_bytes_total          - Counter of audio bytes returned
    voicegen_inflight_requests          - Gauge of requests currently synthesizing

Outcome labels match the classified outcome: ``succeeded``, ``text_required``,
``text_too_long``, ``synthesis_timeout``, ``synthesis_canceled``,
``provider_unreachable``, ``configuration_error``, ``invalid_request``,
``internal_error``.

Usage:
    from voicegen_ms.core.metrics import metrics

    metrics.record_request("succeeded", duration=0.8, audio_bytes=91244)
    content, content_type = metrics.get_metrics_response()
"""
from __future__ import annotations

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)


class VoiceMetrics:
    """
    Metric collection on a private CollectorRegistry.

    A private registry keeps the exposition limited to this service and
    lets tests build isolated instances.
    """

    def __init__(self, registry: CollectorRegistry | None = None):
        self._registry = registry or CollectorRegistry()

        self._requests_total = Counter(
            "voicegen_requests_total",
            "Total voice generation requests",
            ["outcome"],
            registry=self._registry,
        )
        self._request_duration = Histogram(
            "voicegen_request_duration_seconds",
            "Voice generation request duration in seconds",
            ["outcome"],
            buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
            registry=self._registry,
        )
        self._audio_bytes_total = Counter(
            "voicegen_audio_bytes_total",
            "Total audio bytes returned",
            registry=self._registry,
        )
        self._inflight = Gauge(
            "voicegen_inflight_requests",
            "Requests currently waiting on the synthesis provider",
            registry=self._registry,
        )

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry

    def record_request(self, outcome: str, duration: float, audio_bytes: int = 0) -> None:
        """
        Record a finished request.

        Args:
            outcome: Outcome label (``succeeded`` or an error code).
            duration: Wall-clock seconds spent handling the request.
            audio_bytes: Size of the returned audio, 0 for errors.
        """
        self._requests_total.labels(outcome=outcome).inc()
        self._request_duration.labels(outcome=outcome).observe(max(duration, 0.0))
        if audio_bytes > 0:
            self._audio_bytes_total.inc(audio_bytes)

    def inflight_inc(self) -> None:
        self._inflight.inc()

    def inflight_dec(self) -> None:
        self._inflight.dec()

    def get_metrics_response(self) -> tuple[bytes, str]:
        """Return (body, content type) for the /metrics endpoint."""
        return generate_latest(self._registry), CONTENT_TYPE_LATEST


# Process-wide instance
metrics = VoiceMetrics()
