"""Unit tests for the fixed-priority TTS fallback chain."""

from __future__ import annotations

import io

import pytest
import requests

from meditavoice.clients.elevenlabs import ElevenLabsClient
from meditavoice.clients.groq import GroqClient
from meditavoice.clients.openai import OpenAISpeechClient
from meditavoice.clients.playai import PlayAIClient
from meditavoice.errors import SpeechSynthesisUnavailableError
from meditavoice.telemetry.logger import configure_logging
from meditavoice.tts.fallback import FallbackSpeechSynthesizer
from meditavoice.tts.synthesizer import (
    ElevenLabsSynthesizer,
    GroqSynthesizer,
    OpenAISynthesizer,
    PlayAISynthesizer,
)
from meditavoice.tts.voices import VoiceProvider


def _chain(
    *,
    elevenlabs: str | None = None,
    openai: str | None = None,
    groq: str | None = None,
    playai: str | None = None,
    chunk_chars: int = 4000,
) -> FallbackSpeechSynthesizer:
    """Build the production chain order with the given provider keys."""

    return FallbackSpeechSynthesizer(
        [
            ElevenLabsSynthesizer(ElevenLabsClient(api_key=elevenlabs), max_chunk_chars=chunk_chars),
            OpenAISynthesizer(OpenAISpeechClient(api_key=openai)),
            GroqSynthesizer(GroqClient(api_key=groq)),
            PlayAISynthesizer(PlayAIClient(api_key=playai)),
        ]
    )


def test_only_openai_configured_uses_alloy_for_unknown_voice(fake_http) -> None:  # type: ignore[no-untyped-def]
    """An unprefixed unknown id with only OpenAI configured should be sent as `alloy`."""

    fake_http.add("POST", "api.openai.com/v1/audio/speech", payload=b"openai-mp3")

    outcome = _chain(openai="sk-test").run("Breathe in.", "unknown-voice")

    assert outcome.audio == b"openai-mp3"
    assert outcome.provider is VoiceProvider.OPENAI
    assert len(fake_http.calls) == 1
    assert fake_http.calls[0].json["voice"] == "alloy"


def test_no_credentials_raises_without_network(fake_http) -> None:  # type: ignore[no-untyped-def]
    """With no provider configured the chain should fail before any request."""

    with pytest.raises(SpeechSynthesisUnavailableError) as exc_info:
        _chain().synthesize("Breathe.", "default")

    assert str(exc_info.value) == "No TTS service available or all services failed"
    assert exc_info.value.attempts == ()
    assert fake_http.calls == []


def test_chain_falls_through_failures_in_priority_order(fake_http) -> None:  # type: ignore[no-untyped-def]
    """Failures should be logged per provider and the next provider tried once."""

    sink = io.StringIO()
    configure_logging(sink=sink, level="DEBUG")
    fake_http.add("POST", "api.elevenlabs.io", payload=b'{"detail": "down"}', status_code=500)
    fake_http.add("POST", "api.openai.com", payload=b'{"error": {"message": "nope"}}', status_code=401)
    fake_http.add("POST", "api.groq.com", payload=b"groq-mp3")

    outcome = _chain(elevenlabs="el", openai="sk-x", groq="gsk-x", playai="pk").run(
        "Relax.", "21m00Tcm4TlvDq8ikWAM"
    )

    assert outcome.audio == b"groq-mp3"
    assert outcome.provider is VoiceProvider.GROQ
    assert [attempt.provider for attempt in outcome.attempts] == ["elevenlabs", "openai", "groq"]
    assert [attempt.succeeded for attempt in outcome.attempts] == [False, False, True]
    assert [call.url.split("/")[2] for call in fake_http.calls] == [
        "api.elevenlabs.io",
        "api.openai.com",
        "api.groq.com",
    ]
    log_text = sink.getvalue()
    assert "event=provider_failed" in log_text
    assert "provider=elevenlabs" in log_text
    assert "provider=openai" in log_text


def test_exhaustion_reports_every_failed_attempt(fake_http) -> None:  # type: ignore[no-untyped-def]
    """When all eligible providers fail the error should carry each attempt."""

    fake_http.add("POST", "/text-to-speech", payload=b"", status_code=503)

    with pytest.raises(SpeechSynthesisUnavailableError) as exc_info:
        _chain(elevenlabs="el", playai="pk").synthesize("Rest.", "abc")

    assert [attempt.provider for attempt in exc_info.value.attempts] == ["elevenlabs", "playai"]
    assert all(not attempt.succeeded for attempt in exc_info.value.attempts)


def test_elevenlabs_empty_text_fails_over_without_request(fake_http) -> None:  # type: ignore[no-untyped-def]
    """Text that cleans to nothing is an ElevenLabs failure, not empty audio."""

    metadata_only = "Title: Only\n\nAuthor: Someone\n"
    fake_http.add("POST", "api.openai.com/v1/audio/speech", payload=b"openai-mp3")

    with pytest.raises(SpeechSynthesisUnavailableError) as exc_info:
        _chain(elevenlabs="el").synthesize(metadata_only, "21m00Tcm4TlvDq8ikWAM")

    assert [attempt.provider for attempt in exc_info.value.attempts] == ["elevenlabs"]
    assert "no text" in (exc_info.value.attempts[0].reason or "")
    assert fake_http.calls == []

    outcome = _chain(elevenlabs="el", openai="sk-x").run(metadata_only, "21m00Tcm4TlvDq8ikWAM")
    assert outcome.provider is VoiceProvider.OPENAI
    assert [attempt.succeeded for attempt in outcome.attempts] == [False, True]


def test_prefix_skips_ineligible_providers(fake_http) -> None:  # type: ignore[no-untyped-def]
    """A `playai_` voice should go straight to PlayAI even when others are configured."""

    fake_http.add("POST", "api.play.ai", payload=b"playai-mp3")

    outcome = _chain(elevenlabs="el", openai="sk", groq="gsk", playai="pk").run(
        "Rest.", "playai_ar-SA-Male-1"
    )

    assert outcome.provider is VoiceProvider.PLAYAI
    assert len(fake_http.calls) == 1
    assert fake_http.calls[0].json["voice_id"] == "ar-SA-Male-1"


def test_text_is_normalized_before_synthesis(fake_http) -> None:  # type: ignore[no-untyped-def]
    """Providers should receive cleaned narration, not raw markdown."""

    fake_http.add("POST", "api.openai.com", payload=b"mp3")

    _chain(openai="sk").synthesize("Title: Calm\n**Breathe** slowly", "openai_nova")

    assert fake_http.calls[0].json["input"] == "Breathe slowly"


def test_elevenlabs_chunks_are_sent_in_order_and_concatenated(fake_http) -> None:  # type: ignore[no-untyped-def]
    """Long text is chunked and chunk audio concatenated in chunk order."""

    counter = {"next": 0}

    def _respond(call):  # type: ignore[no-untyped-def]
        index = counter["next"]
        counter["next"] += 1
        assert len(call.json["text"]) == [4000, 4000, 1000][index]
        return _Marker(str(index).encode("ascii"))

    fake_http.add("POST", "api.elevenlabs.io", responder=_respond)
    text = "x" * 9000

    audio = _chain(elevenlabs="el").synthesize(text, "voice-1")

    assert audio == b"012"
    assert counter["next"] == 3


def test_elevenlabs_chunk_failure_fails_provider_without_partial_audio(fake_http) -> None:  # type: ignore[no-untyped-def]
    """A failing middle chunk should move the chain to the next provider."""

    counter = {"next": 0}

    def _respond(_call):  # type: ignore[no-untyped-def]
        index = counter["next"]
        counter["next"] += 1
        if index == 1:
            return _Marker(b"", status_code=500)
        return _Marker(b"part")

    fake_http.add("POST", "api.elevenlabs.io", responder=_respond)
    fake_http.add("POST", "api.openai.com", payload=b"whole")

    outcome = _chain(elevenlabs="el", openai="sk", chunk_chars=5).run("abcdefghijkl", "voice-1")

    assert outcome.audio == b"whole"
    assert outcome.provider is VoiceProvider.OPENAI
    assert counter["next"] == 2


class _Marker:
    """Response stub returning fixed bytes with an optional error status."""

    def __init__(self, content: bytes, status_code: int = 200) -> None:
        self.content = content
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}", response=self)
