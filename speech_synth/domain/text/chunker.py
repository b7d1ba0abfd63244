from __future__ import annotations

import re

KOREAN_MAX_CHUNK_LENGTH = 120
DEFAULT_MAX_CHUNK_LENGTH = 300

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n+")
_SENTENCE_BREAK = re.compile(r"(?<=[.!?])\s+")
_INITIAL = re.compile(r"\b[A-Z]\.$")

# Periods after these never end a sentence. Unlisted abbreviations will split.
ABBREVIATIONS: tuple[str, ...] = (
    "Mr.", "Mrs.", "Ms.", "Dr.", "Prof.", "Sr.", "Jr.", "Ph.D.",
    "etc.", "e.g.", "i.e.", "vs.", "Inc.", "Ltd.", "Co.", "Corp.",
    "St.", "Ave.", "Blvd.",
)


def max_chunk_length(lang: str) -> int:
    return KOREAN_MAX_CHUNK_LENGTH if lang == "ko" else DEFAULT_MAX_CHUNK_LENGTH


def split_sentences(paragraph: str) -> list[str]:
    sentences: list[str] = []
    start = 0
    for match in _SENTENCE_BREAK.finditer(paragraph):
        head = paragraph[: match.start()]
        if head.endswith(ABBREVIATIONS) or _INITIAL.search(head):
            continue
        sentences.append(paragraph[start : match.start()])
        start = match.end()
    sentences.append(paragraph[start:])
    return [s for s in sentences if s]


def chunk_text(text: str, max_len: int) -> list[str]:
    """Split text into chunks of at most `max_len` characters.

    Chunks follow paragraph (blank line) and sentence boundaries. Sentences are
    packed greedily; a sentence longer than `max_len` becomes a chunk of its own
    and is not split further.
    """
    paragraphs = [p.strip() for p in _PARAGRAPH_BREAK.split(text.strip())]
    chunks: list[str] = []

    for paragraph in paragraphs:
        if not paragraph:
            continue

        current = ""
        for sentence in split_sentences(paragraph):
            if len(current) + len(sentence) + 1 <= max_len:
                current = f"{current} {sentence}" if current else sentence
            else:
                if current:
                    chunks.append(current.strip())
                current = sentence

        if current:
            chunks.append(current.strip())

    return chunks if chunks else [text]
