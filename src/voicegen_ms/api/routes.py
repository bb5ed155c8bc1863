"""
Voice API Routes.

Endpoints:
    POST /api/generate-voice   - Synthesize text with the custom voice (returns audio)
    GET  /health               - Health check for load balancers and probes
    GET  /metrics              - Prometheus metrics

Request Flow:
    1. Generate a request ID for tracing and bind it to the log context
    2. Hand the body text to VoiceService.generate()
    3. Watch the connection while synthesis runs; a client disconnect
       cancels the work, which closes the provider client
    4. Return audio or the classified JSON error, with X-Request-Id

Error Body:
    {"code": "<error_code>", "message": "<safe message>"}

Example Usage:
    curl -X POST http://localhost:8000/api/generate-voice \\
        -H "Content-Type: application/json" \\
        -d '{"text": "Hello world"}' \\
        --output voice.wav
"""
from __future__ import annotations

import asyncio
import uuid
from contextlib import suppress
from typing import Awaitable

from fastapi import APIRouter, Depends, Request, Response

from voicegen_ms.api.dependencies import get_metrics, get_voice_service
from voicegen_ms.api.schemas import GenerateVoiceRequest
from voicegen_ms.core.logging import get_logger, set_request_id, warn
from voicegen_ms.core.metrics import VoiceMetrics
from voicegen_ms.services.voice_service import VoiceService

router = APIRouter()

_LOG = get_logger("voicegen-ms.api")

# Status logged for requests whose client went away (nginx convention)
CLIENT_CLOSED_REQUEST = 499


def new_request_id() -> str:
    rid = str(uuid.uuid4())[:12]
    set_request_id(rid)
    return rid


async def _wait_for_disconnect(request: Request) -> None:
    while True:
        message = await request.receive()
        if message["type"] == "http.disconnect":
            return


async def _cancel_on_disconnect(request: Request, work: Awaitable[Response]) -> Response:
    """
    Run ``work`` until it finishes or the client disconnects.

    On disconnect, or when this handler is itself cancelled, the work task
    is cancelled and awaited, so the provider client is released before
    this returns or re-raises.
    """
    task = asyncio.ensure_future(work)
    watcher = asyncio.ensure_future(_wait_for_disconnect(request))
    try:
        done, _ = await asyncio.wait({task, watcher}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        # Server shutdown: the work is cancelled and its client released
        # before this handler exits
        task.cancel()
        watcher.cancel()
        with suppress(asyncio.CancelledError):
            await task
        raise
    watcher.cancel()

    if task in done:
        return task.result()

    task.cancel()
    with suppress(asyncio.CancelledError):
        await task
    if not task.cancelled():
        return task.result()

    warn(_LOG, "client_disconnected")
    return Response(status_code=CLIENT_CLOSED_REQUEST)


@router.post("/api/generate-voice", response_class=Response)
async def generate_voice(
    req: GenerateVoiceRequest,
    request: Request,
    service: VoiceService = Depends(get_voice_service),
):
    """
    Synthesize ``text`` with the configured custom voice.

    Returns:
        200: Audio bytes (``audio/wav``) with headers:
            - X-Request-Id: Request identifier for tracing
            - X-Bytes: Size of the audio in bytes
            - Content-Disposition: attachment; filename="voice.wav"
        400: text_required, text_too_long or invalid_request
        500: configuration_error or internal_error
        502: synthesis_canceled or provider_unreachable
        504: synthesis_timeout
    """
    rid = new_request_id()
    return await _cancel_on_disconnect(
        request,
        service.generate(req.text, headers={"X-Request-Id": rid}),
    )


@router.get("/health")
def health(service: VoiceService = Depends(get_voice_service)):
    """
    Health check endpoint.

    Reports provider, region, voice name and the synthesis budget. Never
    includes the credential.
    """
    return service.get_health_info()


@router.get("/metrics")
def prometheus_metrics(metrics: VoiceMetrics = Depends(get_metrics)):
    """Prometheus text exposition of the service metrics."""
    content, content_type = metrics.get_metrics_response()
    return Response(content=content, media_type=content_type)
