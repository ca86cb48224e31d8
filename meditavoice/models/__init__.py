"""Datatypes shared between synthesis, storage, and API layers."""

from .datatypes import (
    ContentEntry,
    GeneratedScript,
    Influencer,
    MeditationRecord,
    ProviderAttempt,
    TextChunk,
    VoiceOption,
)

__all__ = [
    "ContentEntry",
    "GeneratedScript",
    "Influencer",
    "MeditationRecord",
    "ProviderAttempt",
    "TextChunk",
    "VoiceOption",
]
