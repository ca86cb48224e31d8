"""Selectable voice catalog assembled from static tables and live provider listings.

Responsibilities:
- Merge the baseline voices with each configured provider's voices.
- Deduplicate by id so the most recently appended entry wins.

Notes:
- A failed PlayAI listing contributes placeholder voices, while a failed
  ElevenLabs listing contributes nothing. This mirrors how the two listings
  have always behaved and is kept as-is.
"""

from __future__ import annotations

from typing import Iterable

from ..clients.base import ProviderError
from ..clients.elevenlabs import ElevenLabsClient
from ..clients.playai import PlayAIClient
from ..models.datatypes import VoiceOption
from ..telemetry.logger import RunLogger
from .voices import (
    BASELINE_VOICES,
    GROQ_VOICES,
    OPENAI_VOICES,
    PLAYAI_PLACEHOLDER_VOICES,
    VOICE_ID_PREFIXES,
    VoiceProvider,
)


class VoiceCatalog:
    """Build the ordered voice list shown to users."""

    def __init__(
        self,
        *,
        elevenlabs: ElevenLabsClient,
        playai: PlayAIClient,
        openai_configured: bool,
        groq_configured: bool,
        run_logger: RunLogger | None = None,
    ) -> None:
        """Initialize the catalog from live-listing clients and static capability flags."""

        self.elevenlabs = elevenlabs
        self.playai = playai
        self.openai_configured = openai_configured
        self.groq_configured = groq_configured
        self.run_logger = run_logger or RunLogger()

    def list_voices(self) -> list[VoiceOption]:
        """Return baseline plus provider voices, deduplicated with last-wins values."""

        voices: list[VoiceOption] = list(BASELINE_VOICES)
        if self.playai.is_configured:
            voices.extend(self._playai_voices())
        if self.elevenlabs.is_configured:
            voices.extend(self._elevenlabs_voices())
        if self.openai_configured:
            voices.extend(OPENAI_VOICES)
        if self.groq_configured:
            voices.extend(GROQ_VOICES)

        unique = dedupe_voices(voices)
        self.run_logger.log_event("voices", "listed", total=len(voices), unique=len(unique))
        return unique

    def _playai_voices(self) -> list[VoiceOption]:
        """Fetch PlayAI voices, substituting placeholders on any failure."""

        prefix = VOICE_ID_PREFIXES[VoiceProvider.PLAYAI]
        try:
            raw_voices = self.playai.list_voices()
        except ProviderError as exc:
            self.run_logger.log_stage_warning(
                "voices",
                "listing_failed",
                provider="playai",
                failure_kind=exc.failure_kind,
                fallback="placeholders",
            )
            return list(PLAYAI_PLACEHOLDER_VOICES)

        return [
            VoiceOption(id=f"{prefix}{voice['voice_id']}", name=f"PlayAI {voice.get('name', '')}")
            for voice in raw_voices
            if voice.get("voice_id")
        ]

    def _elevenlabs_voices(self) -> list[VoiceOption]:
        """Fetch ElevenLabs voices verbatim, contributing nothing on failure."""

        try:
            raw_voices = self.elevenlabs.list_voices()
        except ProviderError as exc:
            self.run_logger.log_stage_warning(
                "voices",
                "listing_failed",
                provider="elevenlabs",
                failure_kind=exc.failure_kind,
                detail=str(exc),
            )
            return []

        return [
            VoiceOption(id=str(voice["voice_id"]), name=str(voice.get("name", "")))
            for voice in raw_voices
            if voice.get("voice_id")
        ]


def dedupe_voices(voices: Iterable[VoiceOption]) -> list[VoiceOption]:
    """Keep one entry per id: first position, last value."""

    by_id: dict[str, VoiceOption] = {}
    for voice in voices:
        by_id[voice.id] = voice
    return list(by_id.values())
