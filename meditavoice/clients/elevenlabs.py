"""ElevenLabs text-to-speech HTTP client."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from .base import ProviderError, ProviderHTTPClient


ELEVENLABS_MODEL_ID = "eleven_turbo_v2"
ELEVENLABS_VOICE_SETTINGS = {"stability": 0.5, "similarity_boost": 0.5}


class ElevenLabsClient(ProviderHTTPClient):
    """Minimal requests-based ElevenLabs client for speech and voice listing."""

    provider_id = "elevenlabs"
    provider_label = "ElevenLabs"
    api_key_env = "ELEVENLABS_API_KEY"
    default_base_url = "https://api.elevenlabs.io/v1"

    def _auth_headers(self) -> dict[str, str]:
        """ElevenLabs authenticates with the `xi-api-key` header."""

        return {"xi-api-key": self.api_key}

    def text_to_speech(self, *, voice_id: str, text: str) -> bytes:
        """Return MP3 bytes for one text request against `/text-to-speech/{voice_id}`."""

        self._require_api_key()
        payload = {
            "text": text,
            "model_id": ELEVENLABS_MODEL_ID,
            "voice_settings": dict(ELEVENLABS_VOICE_SETTINGS),
        }
        return self._post_json_bytes(
            endpoint_path=f"/text-to-speech/{quote(voice_id, safe='')}",
            payload=payload,
            require_non_empty_response=True,
        )

    def list_voices(self) -> list[dict[str, Any]]:
        """Return raw voice objects from `/voices`."""

        self._require_api_key()
        payload = self._get_json(endpoint_path="/voices")
        voices = payload.get("voices") if isinstance(payload, dict) else None
        if not isinstance(voices, list):
            raise ProviderError(
                "ElevenLabs voices response missing `voices` list.",
                provider=self.provider_id,
                failure_kind="invalid_response",
            )
        return [voice for voice in voices if isinstance(voice, dict)]
