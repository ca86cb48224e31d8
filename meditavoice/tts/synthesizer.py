"""TTS synthesizer interface and per-provider implementations.

Responsibilities:
- Define one capability interface for provider-backed speech synthesis.
- Adapt each provider client to `synthesize(text, native_voice_id) -> bytes`.
- Chunk ElevenLabs input to respect its per-request character limit.
"""

from __future__ import annotations

from typing import Protocol

from ..clients.base import ProviderError
from ..clients.elevenlabs import ElevenLabsClient
from ..clients.groq import GroqClient
from ..clients.openai import OpenAISpeechClient
from ..clients.playai import PlayAIClient
from ..telemetry.logger import RunLogger
from ..text.chunking import FixedWidthChunker
from .voices import VoiceProvider


ELEVENLABS_MAX_CHUNK_CHARS = 4000


class SpeechSynthesizer(Protocol):
    """Protocol for provider-backed synthesizers used by the fallback chain."""

    provider: VoiceProvider

    @property
    def is_configured(self) -> bool:
        """Return whether the provider credential is present."""

    def synthesize(self, text: str, native_voice_id: str) -> bytes:
        """Return MP3 bytes for `text` or raise `ProviderError`."""


class ElevenLabsSynthesizer:
    """ElevenLabs synthesizer that splits long text and concatenates chunk audio."""

    provider = VoiceProvider.ELEVENLABS

    def __init__(
        self,
        client: ElevenLabsClient,
        max_chunk_chars: int = ELEVENLABS_MAX_CHUNK_CHARS,
        run_logger: RunLogger | None = None,
    ) -> None:
        """Initialize the synthesizer with a client and per-request character limit."""

        self.client = client
        self.chunker = FixedWidthChunker(max_chunk_chars)
        self.run_logger = run_logger or RunLogger()

    @property
    def is_configured(self) -> bool:
        """Return whether an ElevenLabs key is present."""

        return self.client.is_configured

    def synthesize(self, text: str, native_voice_id: str) -> bytes:
        """Synthesize chunks sequentially; any chunk failure fails the whole call.

        Text that is empty after cleaning raises `ProviderError`
        (`invalid_request`) instead of returning empty audio, so the chain
        moves on and an all-empty script ends as synthesis unavailable. An
        empty 200 body from any provider client is treated the same way.
        """

        chunks = self.chunker.split(text)
        if not chunks:
            raise ProviderError(
                "ElevenLabs received no text to synthesize.",
                provider=self.provider.value,
                failure_kind="invalid_request",
            )

        buffers: list[bytes] = []
        for chunk in chunks:
            self.run_logger.log_event(
                "tts",
                "chunk",
                provider=self.provider.value,
                chunk=f"{chunk.index + 1}/{len(chunks)}",
                chars=len(chunk.text),
            )
            buffers.append(self.client.text_to_speech(voice_id=native_voice_id, text=chunk.text))

        if len(buffers) == 1:
            return buffers[0]
        return b"".join(buffers)


class OpenAISynthesizer:
    """OpenAI `tts-1` synthesizer sending the full text in one request."""

    provider = VoiceProvider.OPENAI

    def __init__(self, client: OpenAISpeechClient) -> None:
        """Initialize the synthesizer with an OpenAI speech client."""

        self.client = client

    @property
    def is_configured(self) -> bool:
        """Return whether an OpenAI key is present."""

        return self.client.is_configured

    def synthesize(self, text: str, native_voice_id: str) -> bytes:
        """Synthesize `text` with the named OpenAI voice."""

        return self.client.synthesize_speech(voice=native_voice_id, text=text)


class GroqSynthesizer:
    """Groq synthesizer where the native id names the TTS model."""

    provider = VoiceProvider.GROQ

    def __init__(self, client: GroqClient) -> None:
        """Initialize the synthesizer with a Groq client."""

        self.client = client

    @property
    def is_configured(self) -> bool:
        """Return whether a Groq key is present."""

        return self.client.is_configured

    def synthesize(self, text: str, native_voice_id: str) -> bytes:
        """Synthesize `text` with the Groq TTS model named by `native_voice_id`."""

        return self.client.synthesize_speech(model=native_voice_id, text=text)


class PlayAISynthesizer:
    """PlayAI `playdialog` synthesizer."""

    provider = VoiceProvider.PLAYAI

    def __init__(self, client: PlayAIClient) -> None:
        """Initialize the synthesizer with a PlayAI client."""

        self.client = client

    @property
    def is_configured(self) -> bool:
        """Return whether a PlayAI key is present."""

        return self.client.is_configured

    def synthesize(self, text: str, native_voice_id: str) -> bytes:
        """Synthesize `text` with the named PlayAI voice."""

        return self.client.text_to_speech(voice_id=native_voice_id, text=text)
