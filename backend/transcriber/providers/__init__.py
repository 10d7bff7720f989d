"""Provider implementations for transcription backends."""

from .gemini_provider import (
    GeminiProvider,
    ProviderConfigError,
    ProviderError,
    TRANSCRIPTION_PROMPT,
)

__all__ = [
    "GeminiProvider",
    "ProviderConfigError",
    "ProviderError",
    "TRANSCRIPTION_PROMPT",
]
