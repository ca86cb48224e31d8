"""Text-to-speech provider abstractions.

This package contains voice identifier parsing, per-provider synthesizers,
the fixed-priority fallback chain, and the voice catalog.
"""

from .catalog import VoiceCatalog
from .fallback import FallbackSpeechSynthesizer, SynthesisOutcome
from .synthesizer import (
    ElevenLabsSynthesizer,
    GroqSynthesizer,
    OpenAISynthesizer,
    PlayAISynthesizer,
    SpeechSynthesizer,
)
from .voices import VoiceProvider, VoiceSelection, parse_voice_id

__all__ = [
    "ElevenLabsSynthesizer",
    "FallbackSpeechSynthesizer",
    "GroqSynthesizer",
    "OpenAISynthesizer",
    "PlayAISynthesizer",
    "SpeechSynthesizer",
    "SynthesisOutcome",
    "VoiceCatalog",
    "VoiceProvider",
    "VoiceSelection",
    "parse_voice_id",
]
