from __future__ import annotations

import re
import unicodedata

from speech_synth.domain.text.language import resolve_language

_EMOJI_PATTERN = re.compile(
    "["
    "\U0001F600-\U0001F64F"
    "\U0001F300-\U0001F5FF"
    "\U0001F680-\U0001F6FF"
    "\U0001F700-\U0001F77F"
    "\U0001F780-\U0001F7FF"
    "\U0001F800-\U0001F8FF"
    "\U0001F900-\U0001F9FF"
    "\U0001FA00-\U0001FA6F"
    "\U0001FA70-\U0001FAFF"
    "\u2600-\u26FF"
    "\u2700-\u27BF"
    "\U0001F1E6-\U0001F1FF"
    "]+"
)

_REPLACEMENTS: dict[str, str] = {
    "\u2013": "-",
    "\u2011": "-",
    "\u2014": "-",
    "_": " ",
    "\u201C": '"',
    "\u201D": '"',
    "\u2018": "'",
    "\u2019": "'",
    "\u00B4": "'",
    "`": "'",
    "[": " ",
    "]": " ",
    "|": " ",
    "/": " ",
    "#": " ",
    "\u2192": " ",
    "\u2190": " ",
}

_DECORATIVE_SYMBOLS = re.compile(r"[♥☆♡©\\]")

_EXPANSIONS: tuple[tuple[str, str], ...] = (
    ("@", " at "),
    ("e.g.,", "for example, "),
    ("i.e.,", "that is, "),
)

_SPACE_BEFORE_PUNCTUATION = re.compile(r"\s+([,.!?;:])")
_WHITESPACE = re.compile(r"\s+")
_TERMINATORS = ".!?;:,'\")]}>…。」』】〉》›»"

_WRAPPED = re.compile(r"^<(?P<lang>[a-z]{2})>(?P<body>.*)</(?P=lang)>$", re.DOTALL)


def normalize_text(text: str, lang: str) -> str:
    """Normalize text for the model and wrap it in `<lang>...</lang>` markers.

    Unsupported languages silently fall back to English. Text that is already
    wrapped in a supported language's markers is unwrapped first, so applying
    this twice returns the same string.
    """
    lang = resolve_language(lang)

    wrapped = _WRAPPED.match(text)
    if wrapped and wrapped.group("lang") == lang:
        text = wrapped.group("body")

    # Expansions and spacing fixes can expose each other; iterate to a fixed point.
    previous = None
    while text != previous:
        previous = text
        text = _clean(text)

    return f"<{lang}>{text}</{lang}>"


def _clean(text: str) -> str:
    text = unicodedata.normalize("NFKD", text)
    text = _EMOJI_PATTERN.sub("", text)

    for old, new in _REPLACEMENTS.items():
        text = text.replace(old, new)

    text = _DECORATIVE_SYMBOLS.sub("", text)

    for old, new in _EXPANSIONS:
        text = text.replace(old, new)

    text = _SPACE_BEFORE_PUNCTUATION.sub(r"\1", text)

    while '""' in text:
        text = text.replace('""', '"')
    while "''" in text:
        text = text.replace("''", "'")
    text = _WHITESPACE.sub(" ", text).strip()

    if not text or text[-1] not in _TERMINATORS:
        text += "."
    return text
