from __future__ import annotations

SUPPORTED_LANGUAGES: tuple[str, ...] = ("en", "ko", "es", "pt", "fr")
DEFAULT_LANGUAGE = "en"

# Host locale codes accepted by the control channel.
_LOCALE_MAP: dict[str, str] = {
    "en": "en", "en-US": "en", "en-GB": "en", "en-AU": "en",
    "ko": "ko", "ko-KR": "ko",
    "es": "es", "es-ES": "es", "es-MX": "es",
    "pt": "pt", "pt-BR": "pt", "pt-PT": "pt",
    "fr": "fr", "fr-FR": "fr", "fr-CA": "fr",
}


def resolve_language(code: str | None) -> str:
    """Map a language or locale code to a supported language, falling back to English."""
    if not code:
        return DEFAULT_LANGUAGE
    lang = _LOCALE_MAP.get(code, code)
    return lang if lang in SUPPORTED_LANGUAGES else DEFAULT_LANGUAGE
