from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal


Gender = Literal["male", "female"]

_VOICE_ID_IN_NAME = re.compile(r"\(([MF]\d)\)")


@dataclass(frozen=True)
class Voice:
    id: str
    name: str
    gender: Gender
    description: str

    @property
    def voice_name(self) -> str:
        return f"Supertonic {self.name} ({self.id})"


VOICES: tuple[Voice, ...] = (
    Voice("M1", "Alex", "male", "Lively, upbeat male voice with confident energy"),
    Voice("M2", "James", "male", "Deep, robust male voice; calm and serious"),
    Voice("M3", "Robert", "male", "Polished, authoritative male voice"),
    Voice("M4", "Sam", "male", "Soft, neutral-toned male voice; gentle and approachable"),
    Voice("M5", "Daniel", "male", "Warm, soft-spoken male voice; calm and soothing"),
    Voice("F1", "Sarah", "female", "Calm female voice with a slightly low tone"),
    Voice("F2", "Lily", "female", "Bright, cheerful female voice; lively and playful"),
    Voice("F3", "Jessica", "female", "Clear, professional announcer-style female voice"),
    Voice("F4", "Olivia", "female", "Crisp, confident female voice; distinct and expressive"),
    Voice("F5", "Emily", "female", "Kind, gentle female voice; soft-spoken and soothing"),
)


def voice_id_from_name(voice_name: str | None, default: str) -> str:
    """Extract the `(M1)`-style id from an advertised voice name."""
    if not voice_name:
        return default
    match = _VOICE_ID_IN_NAME.search(voice_name)
    return match.group(1) if match else default
