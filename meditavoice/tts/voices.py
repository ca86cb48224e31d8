"""Voice identifier parsing and cross-provider voice mapping.

Responsibilities:
- Parse client-facing voice identifiers into a tagged `VoiceSelection` once.
- Resolve the provider-native voice (or model) id each provider should receive.
- Hold the static voice tables used by synthesis and catalog listing.

Voice identifier convention:
- `openai_<voice>`, `groq_<model>`, `playai_<voice>` select a provider explicitly.
- Anything else is a raw ElevenLabs voice id.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..models.datatypes import VoiceOption


class VoiceProvider(str, Enum):
    """Text-to-speech providers in fallback priority order."""

    ELEVENLABS = "elevenlabs"
    OPENAI = "openai"
    GROQ = "groq"
    PLAYAI = "playai"


VOICE_ID_PREFIXES: dict[VoiceProvider, str] = {
    VoiceProvider.OPENAI: "openai_",
    VoiceProvider.GROQ: "groq_",
    VoiceProvider.PLAYAI: "playai_",
}

DEFAULT_OPENAI_VOICE = "alloy"
DEFAULT_GROQ_MODEL = "playai-tts-arabic"
DEFAULT_PLAYAI_VOICE = "en-US-Female-1"

# Closest OpenAI voice for well-known ElevenLabs premade voices.
ELEVENLABS_TO_OPENAI_VOICES: dict[str, str] = {
    "21m00Tcm4TlvDq8ikWAM": "nova",  # Rachel
    "AZnzlk1XvdvUeBnXmlld": "alloy",  # Domi
    "EXAVITQu4vr4xnSDxMaL": "echo",  # Bella
    "MF3mGyEYCl7XYWbV9V6O": "onyx",  # Adam
    "TxGEqnHWrfWFTfGW9XjX": "shimmer",  # Josh
    "VR6AewLTigWG4xSOukaG": "fable",  # Elli
    "pNInz6obpgDQGcFmaJgB": "alloy",  # Antoni
    "yoZ06aMxZJJ28mfd3POQ": "nova",  # Sam
}

BASELINE_VOICES: tuple[VoiceOption, ...] = (
    VoiceOption(id="default", name="Default Voice"),
    VoiceOption(id="groq_playai-tts-arabic", name="Arabic TTS (Groq)"),
    VoiceOption(id="openai_nova", name="OpenAI Nova"),
    VoiceOption(id="21m00Tcm4TlvDq8ikWAM", name="ElevenLabs Rachel"),
)

PLAYAI_PLACEHOLDER_VOICES: tuple[VoiceOption, ...] = (
    VoiceOption(id="playai_en-US-Female-1", name="PlayAI English Female 1"),
    VoiceOption(id="playai_en-US-Male-1", name="PlayAI English Male 1"),
    VoiceOption(id="playai_ar-SA-Female-1", name="PlayAI Arabic Female 1"),
    VoiceOption(id="playai_ar-SA-Male-1", name="PlayAI Arabic Male 1"),
)

OPENAI_VOICES: tuple[VoiceOption, ...] = (
    VoiceOption(id="openai_alloy", name="OpenAI Alloy"),
    VoiceOption(id="openai_echo", name="OpenAI Echo"),
    VoiceOption(id="openai_fable", name="OpenAI Fable"),
    VoiceOption(id="openai_onyx", name="OpenAI Onyx"),
    VoiceOption(id="openai_nova", name="OpenAI Nova"),
    VoiceOption(id="openai_shimmer", name="OpenAI Shimmer"),
)

GROQ_VOICES: tuple[VoiceOption, ...] = (
    VoiceOption(id="groq_playai-tts-arabic", name="Arabic TTS (Groq)"),
    VoiceOption(id="groq_playai-tts-1", name="Standard TTS (Groq)"),
)


@dataclass(frozen=True, slots=True)
class VoiceSelection:
    """A voice identifier resolved to the provider it names and its native id.

    Attributes:
        provider: Provider selected by prefix; unprefixed ids select ElevenLabs.
        native_id: Identifier with the prefix removed.
    """

    provider: VoiceProvider
    native_id: str

    @property
    def voice_id(self) -> str:
        """Rebuild the client-facing identifier."""

        return f"{VOICE_ID_PREFIXES.get(self.provider, '')}{self.native_id}"

    def native_id_for(self, provider: VoiceProvider) -> str | None:
        """Return the id `provider` should receive, or `None` when the prefix excludes it.

        ElevenLabs accepts only unprefixed ids. OpenAI accepts unprefixed ids
        (mapped through the voice table) and `openai_` ids. Groq accepts
        everything except `playai_` ids, falling back to its default model.
        PlayAI accepts every id, falling back to its default voice.
        """

        if provider is VoiceProvider.ELEVENLABS:
            if self.provider is VoiceProvider.ELEVENLABS:
                return self.native_id
            return None
        if provider is VoiceProvider.OPENAI:
            if self.provider is VoiceProvider.OPENAI:
                return self.native_id
            if self.provider is VoiceProvider.ELEVENLABS:
                return map_elevenlabs_to_openai(self.native_id)
            return None
        if provider is VoiceProvider.GROQ:
            if self.provider is VoiceProvider.GROQ:
                return self.native_id
            if self.provider is VoiceProvider.PLAYAI:
                return None
            return DEFAULT_GROQ_MODEL
        if self.provider is VoiceProvider.PLAYAI:
            return self.native_id
        return DEFAULT_PLAYAI_VOICE


def parse_voice_id(voice_id: str) -> VoiceSelection:
    """Parse a client-facing voice identifier into a `VoiceSelection`."""

    for provider, prefix in VOICE_ID_PREFIXES.items():
        if voice_id.startswith(prefix):
            return VoiceSelection(provider=provider, native_id=voice_id[len(prefix):])
    return VoiceSelection(provider=VoiceProvider.ELEVENLABS, native_id=voice_id)


def map_elevenlabs_to_openai(elevenlabs_voice_id: str) -> str:
    """Return the closest OpenAI voice for an ElevenLabs id, `alloy` when unknown."""

    return ELEVENLABS_TO_OPENAI_VOICES.get(elevenlabs_voice_id, DEFAULT_OPENAI_VOICE)
