"""Shared fixtures: fake synthesis providers, configuration and app clients."""
from __future__ import annotations

import asyncio

import pytest

from voicegen_ms.core.config import (
    ServiceConfig,
    ServiceSettings,
    SynthesisConfig,
    SynthesisSettings,
)
from voicegen_ms.providers.base import (
    ProviderAudio,
    ProviderClient,
    SynthesisProvider,
    VoiceIdentity,
)

SECRET = "s3cr3t-speech-key-0123456789"

# 44-byte RIFF/WAVE header followed by a few samples
FAKE_WAV = (
    b"RIFF\x2c\x00\x00\x00WAVEfmt \x10\x00\x00\x00\x01\x00\x01\x00"
    b"\xc0\x5d\x00\x00\x80\xbb\x00\x00\x02\x00\x10\x00data\x08\x00\x00\x00"
    b"\x00\x00\x01\x00\x02\x00\x03\x00"
)

VOICE_ENV = {
    "SPEECH_KEY": SECRET,
    "SPEECH_REGION": "westeurope",
    "CUSTOM_VOICE_NAME": "ContosoNarratorNeural",
    "CUSTOM_VOICE_ENDPOINT_ID": "5f1c3b2a-0d4e-4c6b-9a8f-7e6d5c4b3a21",
}


class FakeClient(ProviderClient):
    """Client handed out by FakeProvider; replays the provider's scripted result."""

    def __init__(self, provider: "FakeProvider"):
        self._provider = provider
        self.closed = False

    async def synthesize(self, text: str, voice: VoiceIdentity):
        self._provider.calls.append((text, voice))
        if self._provider.hang:
            await asyncio.Event().wait()
        if self._provider.delay:
            await asyncio.sleep(self._provider.delay)
        if isinstance(self._provider.result, BaseException):
            raise self._provider.result
        return self._provider.result

    async def aclose(self) -> None:
        self.closed = True
        self._provider.closed += 1


class FakeProvider(SynthesisProvider):
    """
    Scripted provider.

    Args:
        result: ProviderAudio, ProviderCancellation, or an exception to raise.
        delay: Seconds to sleep before answering.
        hang: Never answer (until cancelled).
    """
    name = "fake"

    def __init__(self, result=None, delay: float = 0.0, hang: bool = False):
        super().__init__()
        self.result = result if result is not None else ProviderAudio(FAKE_WAV, "audio/wav")
        self.delay = delay
        self.hang = hang
        self.calls = []
        self.clients = []
        self.closed = 0

    def create_client(self, config: SynthesisConfig) -> FakeClient:
        client = FakeClient(self)
        self.clients.append(client)
        return client


@pytest.fixture
def synthesis_config() -> SynthesisConfig:
    return SynthesisConfig(
        region=VOICE_ENV["SPEECH_REGION"],
        voice_profile_id=VOICE_ENV["CUSTOM_VOICE_NAME"],
        endpoint_id=VOICE_ENV["CUSTOM_VOICE_ENDPOINT_ID"],
        credential_secret=SECRET,
    )


@pytest.fixture
def make_config(synthesis_config):
    """Build a ServiceConfig with a given synthesis budget."""

    def _make(timeout_s: float = 10.0) -> ServiceConfig:
        return ServiceConfig(
            synthesis=synthesis_config,
            settings=ServiceSettings(synthesis=SynthesisSettings(timeout_s=timeout_s)),
        )

    return _make


@pytest.fixture
def voice_env(monkeypatch, tmp_path):
    """Process environment with all four voice variables and no settings file."""
    monkeypatch.chdir(tmp_path)
    for var in ("VOICEGEN_SETTINGS", "VOICEGEN_TIMEOUT_S"):
        monkeypatch.delenv(var, raising=False)
    for var, value in VOICE_ENV.items():
        monkeypatch.setenv(var, value)
    return dict(VOICE_ENV)
