"""
Azure Speech Custom Voice Provider.

Binds the provider capability to the Azure Speech text-to-speech REST API
using httpx. Each call gets its own ``httpx.AsyncClient``, closed when the
call's ``acquire`` block exits.

Request:
    POST https://{region}.voice.speech.microsoft.com/cognitiveservices/v1?deploymentId={endpoint_id}
    Ocp-Apim-Subscription-Key: <key>
    Content-Type: application/ssml+xml
    X-Microsoft-OutputFormat: riff-24khz-16bit-mono-pcm

    <speak version="1.0" xmlns="http://www.w3.org/2001/10/synthesis" xml:lang="en-US">
      <voice name="MyCustomVoice">Hello world</voice>
    </speak>

The SSML envelope only carries the voice selection. The caller's text is
XML-escaped and placed inside it verbatim, so markup in the text is spoken,
not interpreted.

Status Mapping:
    200       -> ProviderAudio
    400       -> ProviderCancellation(error_code="BadRequest")
    401       -> ProviderCancellation(error_code="AuthenticationFailure")
    403       -> ProviderCancellation(error_code="Forbidden")
    429       -> ProviderCancellation(error_code="TooManyRequests")
    other     -> ProviderCancellation(error_code="ServiceError")
    httpx.TransportError -> ProviderTransportError

No deadline is set on httpx itself: the orchestrator's budget bounds the
call and cancels it when exceeded.
"""
from __future__ import annotations

from typing import Optional
from xml.sax.saxutils import escape, quoteattr

import httpx

from voicegen_ms import __version__
from voicegen_ms.core.config import SynthesisConfig, SynthesisSettings
from voicegen_ms.core.logging import debug, get_logger
from voicegen_ms.providers.base import (
    ProviderAudio,
    ProviderCancellation,
    ProviderClient,
    ProviderResult,
    ProviderTransportError,
    SynthesisProvider,
    VoiceIdentity,
)

_LOG = get_logger("voicegen-ms.provider.azure")

_STATUS_ERROR_CODES = {
    400: "BadRequest",
    401: "AuthenticationFailure",
    403: "Forbidden",
    429: "TooManyRequests",
}

# Provider diagnostics are truncated before they reach the logs
_MAX_DETAIL_CHARS = 500


def mime_type_for_format(output_format: str) -> str:
    """
    Map an Azure output format name to a mime type.

    Examples:
        >>> mime_type_for_format("riff-24khz-16bit-mono-pcm")
        'audio/wav'
        >>> mime_type_for_format("audio-24khz-48kbitrate-mono-mp3")
        'audio/mpeg'
    """
    fmt = output_format.lower()
    if fmt.startswith("riff-"):
        return "audio/wav"
    if fmt.endswith("-mp3"):
        return "audio/mpeg"
    if fmt.startswith("ogg-"):
        return "audio/ogg"
    if fmt.startswith("webm-"):
        return "audio/webm"
    return "application/octet-stream"


def build_ssml(text: str, voice_name: str, language: str) -> str:
    """Wrap plain text in the minimal SSML envelope the endpoint requires."""
    return (
        '<speak version="1.0" xmlns="http://www.w3.org/2001/10/synthesis" '
        f"xml:lang={quoteattr(language)}>"
        f"<voice name={quoteattr(voice_name)}>{escape(text)}</voice>"
        "</speak>"
    )


def endpoint_url(region: str) -> str:
    return f"https://{region}.voice.speech.microsoft.com/cognitiveservices/v1"


class AzureSpeechClient(ProviderClient):
    """
    Single-use client for one Azure synthesis call.

    Args:
        config: Voice configuration (region and key are read from here).
        settings: Output format and language.
        http: The httpx client owned by this call.
    """

    def __init__(self, config: SynthesisConfig, settings: SynthesisSettings, http: httpx.AsyncClient):
        self._config = config
        self._settings = settings
        self._http = http

    async def synthesize(self, text: str, voice: VoiceIdentity) -> ProviderResult:
        headers = {
            "Ocp-Apim-Subscription-Key": self._config.credential_secret,
            "Content-Type": "application/ssml+xml",
            "X-Microsoft-OutputFormat": self._settings.output_format,
            "User-Agent": f"voicegen-ms/{__version__}",
        }
        body = build_ssml(text, voice.voice_name, self._settings.language)

        debug(_LOG, "provider_request", region=self._config.region,
              endpoint_id=voice.endpoint_id, output_format=self._settings.output_format)

        try:
            response = await self._http.post(
                endpoint_url(self._config.region),
                params={"deploymentId": voice.endpoint_id},
                headers=headers,
                content=body.encode("utf-8"),
            )
        except httpx.TransportError as e:
            raise ProviderTransportError(
                f"transport failure: {type(e).__name__}",
                detail=f"{type(e).__name__}: {e}",
            ) from e

        debug(_LOG, "provider_response", status=response.status_code,
              bytes=len(response.content))

        if response.status_code == 200:
            return ProviderAudio(
                audio=response.content,
                mime_type=mime_type_for_format(self._settings.output_format),
            )

        return ProviderCancellation(
            reason="Error",
            error_code=_STATUS_ERROR_CODES.get(response.status_code, "ServiceError"),
            detail=f"HTTP {response.status_code}: {response.text[:_MAX_DETAIL_CHARS]}",
        )

    async def aclose(self) -> None:
        await self._http.aclose()


class AzureSpeechProvider(SynthesisProvider):
    """
    Azure Speech custom voice provider.

    Args:
        settings: Output format and language for every call.
        transport: Optional httpx transport (tests pass httpx.MockTransport).
    """
    name = "azure"

    def __init__(
        self,
        settings: Optional[SynthesisSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__()
        self._settings = settings or SynthesisSettings()
        self._transport = transport

    def create_client(self, config: SynthesisConfig) -> AzureSpeechClient:
        http = httpx.AsyncClient(transport=self._transport, timeout=httpx.Timeout(None))
        return AzureSpeechClient(config, self._settings, http)
