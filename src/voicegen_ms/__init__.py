"""
voicegen-ms: Custom Voice Synthesis Proxy.

A small FastAPI service that forwards short text strings to a cloud speech
synthesis engine bound to a single custom voice profile and returns the
synthesized WAV audio to the caller.

Request Pipeline:
    validate text -> synthesize under a time budget -> classify outcome -> format response

Key Features:
    - One endpoint: POST /api/generate-voice
    - Strict input contract (1-500 characters after trimming)
    - Single bounded provider attempt per request, no retries
    - Safe error taxonomy (credentials and provider diagnostics never leak)
    - Structured logging with request correlation
    - Prometheus metrics

Example Usage:
    >>> from voicegen_ms.main import create_app
    >>> app = create_app()
    >>> # uvicorn voicegen_ms.main:create_app --factory
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
