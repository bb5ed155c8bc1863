"""
Synthesis Providers.

    - base.py: Provider capability (SynthesisProvider, ProviderClient, results)
    - azure.py: Azure Speech custom voice binding over REST (httpx)
"""
from .base import (
    ProviderAudio,
    ProviderCancellation,
    ProviderClient,
    ProviderResult,
    ProviderTransportError,
    SynthesisProvider,
    VoiceIdentity,
)

__all__ = [
    "ProviderAudio",
    "ProviderCancellation",
    "ProviderClient",
    "ProviderResult",
    "ProviderTransportError",
    "SynthesisProvider",
    "VoiceIdentity",
]
