"""
FastAPI Dependency Injection Providers.

Shared resources are built once in the application lifespan (main.py) and
stored on ``app.state``. Route handlers receive them through Depends().

Lifecycle:
    1. Application startup (main.py lifespan)
       └── load_config()               ConfigError aborts startup
           └── build_voice_service()
               ├── build_provider()    AzureSpeechProvider
               └── SynthesisOrchestrator
    2. Request handling
       └── get_voice_service() returns the same VoiceService for every call

Usage in Route Handlers:
    @router.post("/api/generate-voice")
    async def generate_voice(service: VoiceService = Depends(get_voice_service)):
        ...
"""
from __future__ import annotations

from typing import Optional

from fastapi import Request

from voicegen_ms.core.config import ServiceConfig
from voicegen_ms.core.metrics import VoiceMetrics, metrics as default_metrics
from voicegen_ms.providers.azure import AzureSpeechProvider
from voicegen_ms.providers.base import SynthesisProvider
from voicegen_ms.services.orchestrator import SynthesisOrchestrator
from voicegen_ms.services.voice_service import VoiceService


def build_provider(config: ServiceConfig) -> SynthesisProvider:
    """Create the production provider binding for this configuration."""
    return AzureSpeechProvider(settings=config.settings.synthesis)


def build_voice_service(
    config: ServiceConfig,
    provider: Optional[SynthesisProvider] = None,
    metrics: Optional[VoiceMetrics] = None,
) -> VoiceService:
    """
    Assemble the request pipeline.

    Args:
        config: Configuration loaded at startup.
        provider: Provider override (tests inject fakes). Defaults to Azure.
        metrics: Metrics sink. Defaults to the process-wide instance.
    """
    metrics = metrics or default_metrics
    orchestrator = SynthesisOrchestrator(provider or build_provider(config), metrics=metrics)
    return VoiceService(config, orchestrator, metrics=metrics)


def get_voice_service(request: Request) -> VoiceService:
    """The VoiceService built at startup."""
    return request.app.state.voice_service


def get_metrics(request: Request) -> VoiceMetrics:
    """The metrics sink used by this application."""
    return request.app.state.metrics
