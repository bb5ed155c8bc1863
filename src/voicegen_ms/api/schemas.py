"""
API Request Schemas.

Example Request:
    {"text": "Hello world"}

``text`` carries no length constraints here. Empty and over-long text
reaches the validator and is answered with ``text_required`` or
``text_too_long``. Pydantic only enforces that ``text``, when present,
is a string.
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class GenerateVoiceRequest(BaseModel):
    """
    Body of ``POST /api/generate-voice``.

    Attributes:
        text: Text to speak. Trimmed and limited to 500 characters by the
            validator. Missing or null is treated as empty.
    """
    model_config = ConfigDict(extra="ignore")

    text: Optional[StrictStr] = Field(
        default=None,
        description="Text to synthesize (at most 500 characters after trimming)",
    )
