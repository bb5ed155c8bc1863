"""
Synthesis Provider Capability.

This module defines the only contract the orchestration layer has with an
external speech engine:

    given (text, voice identity, credentials), asynchronously produce one of
        - ProviderAudio          audio bytes + mime type
        - ProviderCancellation   provider-reported failure with reason/detail
        - ProviderTransportError raised when the transport itself fails

Concrete bindings subclass SynthesisProvider and ProviderClient. The
orchestrator never sees SDK or HTTP library types.

Client Lifecycle:
    A client is created per call and owned exclusively by that call:

        async with provider.acquire(config) as client:
            result = await client.synthesize(text, voice)

    ``acquire`` closes the client on every exit path (return, exception,
    timeout, task cancellation). ``open_clients`` counts clients that have
    been handed out and not yet released.

Implementing a New Provider:
    1. Subclass ProviderClient and implement synthesize() and aclose()
    2. Subclass SynthesisProvider and implement create_client()
    3. Wire it in api/dependencies.py
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Optional, Union

from voicegen_ms.core.config import SynthesisConfig


@dataclass(frozen=True)
class VoiceIdentity:
    """
    The custom voice a request is synthesized with.

    Attributes:
        voice_name: Custom voice name (voice profile id).
        endpoint_id: Deployment id of the custom voice endpoint.
    """
    voice_name: str
    endpoint_id: str

    @classmethod
    def from_config(cls, config: SynthesisConfig) -> "VoiceIdentity":
        return cls(voice_name=config.voice_profile_id, endpoint_id=config.endpoint_id)


@dataclass(frozen=True)
class ProviderAudio:
    """Successful synthesis result."""
    audio: bytes
    mime_type: str


@dataclass(frozen=True)
class ProviderCancellation:
    """
    Provider-reported failure.

    Attributes:
        reason: Why the synthesis was canceled (e.g. "Error").
        error_code: Provider error code (e.g. "AuthenticationFailure",
            "BadRequest", "ServiceError").
        detail: Provider diagnostic text. For logs only, never for callers.
    """
    reason: str
    error_code: str
    detail: str


ProviderResult = Union[ProviderAudio, ProviderCancellation]


class ProviderTransportError(Exception):
    """
    Raised when the connection to the provider fails.

    Connection refused, DNS failure, TLS or protocol errors. ``detail`` is
    diagnostic text for logs.
    """

    def __init__(self, message: str, detail: Optional[str] = None):
        self.message = message
        self.detail = detail or message
        super().__init__(message)


class ProviderClient:
    """
    One provider connection, used for exactly one synthesis call.
    """

    async def synthesize(self, text: str, voice: VoiceIdentity) -> ProviderResult:
        """
        Synthesize ``text`` with ``voice``.

        Returns:
            ProviderAudio or ProviderCancellation.

        Raises:
            ProviderTransportError: The transport failed.
        """
        raise NotImplementedError

    async def aclose(self) -> None:
        """Release the underlying connection."""
        return None


class SynthesisProvider:
    """
    Factory for per-call provider clients.

    Attributes:
        name: Provider identifier used in logs and /health.
    """
    name: str = "base"

    def __init__(self) -> None:
        self._open_clients = 0

    @property
    def open_clients(self) -> int:
        """Clients acquired and not yet released."""
        return self._open_clients

    def create_client(self, config: SynthesisConfig) -> ProviderClient:
        """Build a new, unshared client for one call."""
        raise NotImplementedError

    @asynccontextmanager
    async def acquire(self, config: SynthesisConfig) -> AsyncIterator[ProviderClient]:
        """
        Scoped acquisition of a client for a single call.

        The client is closed when the block exits, whatever the reason.
        """
        client = self.create_client(config)
        self._open_clients += 1
        try:
            yield client
        finally:
            try:
                await client.aclose()
            finally:
                self._open_clients -= 1
