"""
FastAPI Application Entry Point.

This module creates and configures the FastAPI application for the
voicegen-ms microservice.

Startup:
    Configuration is loaded exactly once in the lifespan, before the server
    accepts connections. A missing SPEECH_KEY, SPEECH_REGION,
    CUSTOM_VOICE_NAME or CUSTOM_VOICE_ENDPOINT_ID (or an invalid settings
    file) raises ConfigError and the server never starts serving.

Usage:
    # Run with uvicorn
    uvicorn voicegen_ms.main:app --host 0.0.0.0 --port 8000

    # Or through the factory
    uvicorn voicegen_ms.main:create_app --factory
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from voicegen_ms import __version__
from voicegen_ms.api.dependencies import build_voice_service
from voicegen_ms.api.routes import new_request_id, router
from voicegen_ms.core.config import ConfigError, ServiceConfig, load_config
from voicegen_ms.core.logging import configure_logging, error, get_logger, info, verbose
from voicegen_ms.core.metrics import VoiceMetrics, metrics as default_metrics
from voicegen_ms.providers.base import SynthesisProvider
from voicegen_ms.services.errors import INVALID_REQUEST
from voicegen_ms.services.formatter import format_error

_LOG = get_logger("voicegen-ms.main")


async def invalid_request_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed JSON, non-object body or non-string ``text``: 400 invalid_request."""
    rid = new_request_id()
    verbose(_LOG, "invalid_request", path=request.url.path, errors=len(exc.errors()))
    getattr(request.app.state, "metrics", default_metrics).record_request(INVALID_REQUEST.code, 0.0)
    return format_error(INVALID_REQUEST, headers={"X-Request-Id": rid})


def create_app(
    config: Optional[ServiceConfig] = None,
    provider: Optional[SynthesisProvider] = None,
    metrics: Optional[VoiceMetrics] = None,
    settings_path: Optional[str] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Preloaded configuration. None loads it from the environment
            and settings file during startup.
        provider: Provider override. None uses the Azure binding.
        metrics: Metrics sink. None uses the process-wide instance.
        settings_path: Settings file for load_config() and the logging
            section. An explicit path reconfigures logging.

    Returns:
        FastAPI: Configured application instance.
    """
    configure_logging(settings_path=settings_path, force=settings_path is not None)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            service_config = config or load_config(settings_path)
        except ConfigError as e:
            error(_LOG, "startup_failed", reason=str(e))
            raise

        app.state.config = service_config
        app.state.metrics = metrics or default_metrics
        app.state.voice_service = build_voice_service(
            service_config, provider=provider, metrics=app.state.metrics
        )
        info(_LOG, "service_ready",
             provider=app.state.voice_service.orchestrator.provider.name,
             region=service_config.synthesis.region,
             voice=service_config.synthesis.voice_profile_id,
             timeout_s=service_config.budget_s)
        yield
        info(_LOG, "service_stopped")

    app = FastAPI(title="voicegen-ms", version=__version__, lifespan=lifespan)
    app.include_router(router)
    app.add_exception_handler(RequestValidationError, invalid_request_handler)
    return app


# Global application instance for ASGI servers (uvicorn, gunicorn, etc.)
app = create_app()
