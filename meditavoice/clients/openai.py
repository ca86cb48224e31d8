"""OpenAI speech HTTP client."""

from __future__ import annotations

from .base import ProviderHTTPClient


OPENAI_TTS_MODEL = "tts-1"


class OpenAISpeechClient(ProviderHTTPClient):
    """Minimal requests-based OpenAI speech client for TTS synthesis."""

    provider_id = "openai"
    provider_label = "OpenAI"
    api_key_env = "OPENAI_API_KEY"
    default_base_url = "https://api.openai.com/v1"

    def synthesize_speech(
        self,
        *,
        voice: str,
        text: str,
        model: str = OPENAI_TTS_MODEL,
        response_format: str = "mp3",
    ) -> bytes:
        """Return synthesized audio bytes from OpenAI `/audio/speech`."""

        self._require_api_key()

        payload = {
            "model": model,
            "input": text,
            "voice": voice,
            "response_format": response_format,
        }
        return self._post_json_bytes(
            endpoint_path="/audio/speech",
            payload=payload,
            require_non_empty_response=True,
            empty_response_message="OpenAI speech response is empty.",
        )
