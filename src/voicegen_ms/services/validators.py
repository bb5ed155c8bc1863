"""
Input Validation for Voice Generation.

Validation Rules:
    - Leading/trailing whitespace is trimmed
    - Trimmed text must not be empty          -> text_required
    - Trimmed text must be <= 500 characters  -> text_too_long

Length is counted in Unicode code points (``len`` on ``str``), not bytes.
Nothing else is changed: no truncation, no markup stripping, no escape
processing. The provider receives the trimmed text as-is.

Usage:
    from voicegen_ms.services.validators import validate_text, ValidationError

    try:
        text = validate_text(request.text)
    except ValidationError as e:
        return format_error(classify(e))
"""
from __future__ import annotations

from enum import Enum
from typing import Optional

MAX_TEXT_CHARS = 500


class ValidationErrorKind(str, Enum):
    EMPTY = "empty"
    TOO_LONG = "too_long"


class ValidationError(Exception):
    """
    Exception raised when request text is rejected.

    Attributes:
        kind: ValidationErrorKind.EMPTY or ValidationErrorKind.TOO_LONG.
        message: Human-readable description, safe to return to callers.
        code: Machine-readable code (``text_required`` / ``text_too_long``).
    """

    _CODES = {
        ValidationErrorKind.EMPTY: "text_required",
        ValidationErrorKind.TOO_LONG: "text_too_long",
    }

    def __init__(self, kind: ValidationErrorKind, message: str):
        self.kind = kind
        self.message = message
        self.code = self._CODES[kind]
        super().__init__(message)


class ValidatedText(str):
    """
    Text that passed validate_text().

    A ``str`` subclass, so it can be handed to anything expecting text,
    while signatures can still ask for validated input specifically.
    """
    __slots__ = ()


def validate_text(text: Optional[str], max_length: int = MAX_TEXT_CHARS) -> ValidatedText:
    """
    Validate and trim request text.

    Args:
        text: Raw text from the request body. None is treated as empty.
        max_length: Maximum characters after trimming.

    Returns:
        The trimmed text.

    Raises:
        ValidationError: EMPTY or TOO_LONG.

    Examples:
        >>> validate_text("  Hello world ")
        'Hello world'
    """
    trimmed = (text or "").strip()

    if not trimmed:
        raise ValidationError(ValidationErrorKind.EMPTY, "Text is required")

    if len(trimmed) > max_length:
        raise ValidationError(
            ValidationErrorKind.TOO_LONG,
            f"Text exceeds maximum length ({len(trimmed)} > {max_length} characters)",
        )

    return ValidatedText(trimmed)
