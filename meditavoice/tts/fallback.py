"""Fixed-priority TTS fallback chain.

Responsibilities:
- Normalize script text once before any provider call.
- Try eligible providers in order until one returns audio.
- Report exhaustion with the ordered list of provider attempts.

Eligibility of a provider is its credential being present AND the voice
identifier's prefix allowing it (see `VoiceSelection.native_id_for`).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from ..clients.base import ProviderError
from ..errors import SpeechSynthesisUnavailableError
from ..models.datatypes import ProviderAttempt
from ..telemetry.logger import RunLogger
from ..text.normalizer import NarrationNormalizer
from .synthesizer import SpeechSynthesizer
from .voices import VoiceProvider, parse_voice_id


@dataclass(frozen=True, slots=True)
class SynthesisOutcome:
    """Audio from the first successful provider plus the attempts leading to it."""

    audio: bytes
    provider: VoiceProvider
    attempts: tuple[ProviderAttempt, ...]


class FallbackSpeechSynthesizer:
    """Drive an ordered list of synthesizers, falling through on provider failure."""

    def __init__(
        self,
        synthesizers: Sequence[SpeechSynthesizer],
        normalizer: NarrationNormalizer | None = None,
        run_logger: RunLogger | None = None,
    ) -> None:
        """Initialize the chain; `synthesizers` order is the fallback priority."""

        self.synthesizers = tuple(synthesizers)
        self.normalizer = normalizer or NarrationNormalizer()
        self.run_logger = run_logger or RunLogger()

    def synthesize(self, text: str, voice_id: str) -> bytes:
        """Return MP3 bytes for `text` using the first provider that succeeds."""

        return self.run(text, voice_id).audio

    def run(self, text: str, voice_id: str) -> SynthesisOutcome:
        """Run the chain and return the winning provider with its attempt history.

        Raises:
            SpeechSynthesisUnavailableError: If no provider was eligible or all failed.
        """

        cleaned_text = self.normalizer.normalize(text)
        selection = parse_voice_id(voice_id)
        attempts: list[ProviderAttempt] = []

        for synthesizer in self.synthesizers:
            if not synthesizer.is_configured:
                continue
            native_voice_id = selection.native_id_for(synthesizer.provider)
            if native_voice_id is None:
                continue

            provider_name = synthesizer.provider.value
            self.run_logger.log_stage_start("tts", provider=provider_name, voice=native_voice_id)
            try:
                audio = synthesizer.synthesize(cleaned_text, native_voice_id)
            except ProviderError as exc:
                attempts.append(
                    ProviderAttempt(provider=provider_name, succeeded=False, reason=str(exc))
                )
                self.run_logger.log_stage_warning(
                    "tts",
                    "provider_failed",
                    provider=provider_name,
                    failure_kind=exc.failure_kind,
                    status_code=exc.status_code,
                    detail=str(exc),
                )
                continue

            attempts.append(
                ProviderAttempt(provider=provider_name, succeeded=True, audio_bytes=len(audio))
            )
            self.run_logger.log_stage_complete("tts", provider=provider_name, bytes=len(audio))
            return SynthesisOutcome(
                audio=audio,
                provider=synthesizer.provider,
                attempts=tuple(attempts),
            )

        self.run_logger.log_stage_failure(
            "tts",
            SpeechSynthesisUnavailableError.__name__,
            attempted=len(attempts),
        )
        raise SpeechSynthesisUnavailableError(attempts)
