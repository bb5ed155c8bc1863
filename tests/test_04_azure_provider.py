"""
Tests for the Azure Speech REST binding.

Uses httpx.MockTransport, no network access.
"""
import asyncio

import httpx
import pytest

from conftest import FAKE_WAV, SECRET
from voicegen_ms.core.config import SynthesisSettings
from voicegen_ms.providers.azure import (
    AzureSpeechProvider,
    build_ssml,
    endpoint_url,
    mime_type_for_format,
)
from voicegen_ms.providers.base import (
    ProviderAudio,
    ProviderCancellation,
    ProviderTransportError,
    VoiceIdentity,
)


def call(provider, config, text="Hello world"):
    voice = VoiceIdentity.from_config(config)

    async def scenario():
        async with provider.acquire(config) as client:
            result = await client.synthesize(text, voice)
        return result, client

    return asyncio.run(scenario())


class TestHelpers:

    @pytest.mark.parametrize("fmt, mime", [
        ("riff-24khz-16bit-mono-pcm", "audio/wav"),
        ("riff-16khz-16bit-mono-pcm", "audio/wav"),
        ("audio-24khz-48kbitrate-mono-mp3", "audio/mpeg"),
        ("ogg-24khz-16bit-mono-opus", "audio/ogg"),
        ("webm-24khz-16bit-mono-opus", "audio/webm"),
        ("raw-24khz-16bit-mono-pcm", "application/octet-stream"),
    ])
    def test_mime_type_for_format(self, fmt, mime):
        assert mime_type_for_format(fmt) == mime

    def test_endpoint_url(self):
        assert endpoint_url("westeurope") == (
            "https://westeurope.voice.speech.microsoft.com/cognitiveservices/v1"
        )

    def test_ssml_escapes_text(self):
        ssml = build_ssml('<b>Tom & "Jerry"</b>', "MyVoice", "en-US")
        assert "&lt;b&gt;Tom &amp; \"Jerry\"&lt;/b&gt;" in ssml
        assert "<b>" not in ssml
        assert "<voice name=\"MyVoice\">" in ssml
        assert "xml:lang=\"en-US\"" in ssml


class TestRequest:

    def test_request_shape(self, synthesis_config):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, content=FAKE_WAV)

        provider = AzureSpeechProvider(transport=httpx.MockTransport(handler))
        call(provider, synthesis_config, text="Fish & chips")

        assert len(seen) == 1
        request = seen[0]
        assert request.method == "POST"
        assert request.url.host == "westeurope.voice.speech.microsoft.com"
        assert request.url.path == "/cognitiveservices/v1"
        assert request.url.params["deploymentId"] == synthesis_config.endpoint_id
        assert request.headers["Ocp-Apim-Subscription-Key"] == SECRET
        assert request.headers["Content-Type"] == "application/ssml+xml"
        assert request.headers["X-Microsoft-OutputFormat"] == "riff-24khz-16bit-mono-pcm"
        assert request.headers["User-Agent"].startswith("voicegen-ms/")

        body = request.content.decode("utf-8")
        assert "Fish &amp; chips" in body
        assert f'name="{synthesis_config.voice_profile_id}"' in body

    def test_settings_flow_into_request(self, synthesis_config):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, content=b"ID3mp3")

        settings = SynthesisSettings(output_format="audio-24khz-48kbitrate-mono-mp3", language="de-DE")
        provider = AzureSpeechProvider(settings=settings, transport=httpx.MockTransport(handler))
        result, _ = call(provider, synthesis_config)

        assert seen[0].headers["X-Microsoft-OutputFormat"] == "audio-24khz-48kbitrate-mono-mp3"
        assert 'xml:lang="de-DE"' in seen[0].content.decode("utf-8")
        assert result == ProviderAudio(b"ID3mp3", "audio/mpeg")


class TestResponses:

    def test_success(self, synthesis_config):
        provider = AzureSpeechProvider(
            transport=httpx.MockTransport(lambda r: httpx.Response(200, content=FAKE_WAV))
        )
        result, _ = call(provider, synthesis_config)
        assert result == ProviderAudio(FAKE_WAV, "audio/wav")

    @pytest.mark.parametrize("status, code", [
        (400, "BadRequest"),
        (401, "AuthenticationFailure"),
        (403, "Forbidden"),
        (429, "TooManyRequests"),
        (500, "ServiceError"),
        (502, "ServiceError"),
        (404, "ServiceError"),
    ])
    def test_status_mapping(self, synthesis_config, status, code):
        provider = AzureSpeechProvider(
            transport=httpx.MockTransport(lambda r: httpx.Response(status, text="nope"))
        )
        result, _ = call(provider, synthesis_config)
        assert isinstance(result, ProviderCancellation)
        assert result.error_code == code
        assert result.detail.startswith(f"HTTP {status}")

    def test_transport_error(self, synthesis_config):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        provider = AzureSpeechProvider(transport=httpx.MockTransport(handler))
        with pytest.raises(ProviderTransportError) as exc_info:
            call(provider, synthesis_config)
        assert "ConnectError" in exc_info.value.detail
        assert provider.open_clients == 0


class TestClientLifecycle:

    def test_client_closed_after_call(self, synthesis_config):
        provider = AzureSpeechProvider(
            transport=httpx.MockTransport(lambda r: httpx.Response(200, content=FAKE_WAV))
        )
        _, client = call(provider, synthesis_config)
        assert provider.open_clients == 0
        assert client._http.is_closed

    def test_new_client_per_call(self, synthesis_config):
        provider = AzureSpeechProvider(
            transport=httpx.MockTransport(lambda r: httpx.Response(200, content=FAKE_WAV))
        )
        _, first = call(provider, synthesis_config)
        _, second = call(provider, synthesis_config)
        assert first is not second
