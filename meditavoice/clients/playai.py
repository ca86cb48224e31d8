"""PlayAI text-to-speech HTTP client."""

from __future__ import annotations

from typing import Any

from .base import DEFAULT_TIMEOUT_SECONDS, ProviderHTTPClient


PLAYAI_MODEL = "playdialog"


class PlayAIClient(ProviderHTTPClient):
    """Minimal requests-based PlayAI client with optional account user id."""

    provider_id = "playai"
    provider_label = "PlayAI"
    api_key_env = "PLAYAI_API_KEY"
    default_base_url = "https://api.play.ai/api"

    def __init__(
        self,
        *,
        api_key: str | None,
        user_id: str | None = None,
        base_url: str | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize PlayAI settings; `user_id` is sent only when present."""

        super().__init__(api_key=api_key, base_url=base_url, timeout_seconds=timeout_seconds)
        self.user_id = user_id.strip() if isinstance(user_id, str) and user_id.strip() else None

    def text_to_speech(self, *, voice_id: str, text: str) -> bytes:
        """Return MP3 bytes from PlayAI `/text-to-speech`."""

        self._require_api_key()
        payload: dict[str, Any] = {
            "text": text,
            "voice_id": voice_id,
            "model": PLAYAI_MODEL,
            "output_format": "mp3",
        }
        if self.user_id:
            payload["user_id"] = self.user_id
        return self._post_json_bytes(
            endpoint_path="/text-to-speech",
            payload=payload,
            require_non_empty_response=True,
        )

    def list_voices(self) -> list[dict[str, Any]]:
        """Return raw voice objects from `/voices`.

        A decodable reply without a `voices` list yields no voices. HTTP,
        transport and undecodable-body failures raise `ProviderError`.
        """

        self._require_api_key()
        params = {"user_id": self.user_id} if self.user_id else None
        payload = self._get_json(endpoint_path="/voices", params=params)
        voices = payload.get("voices") if isinstance(payload, dict) else None
        if not isinstance(voices, list):
            return []
        return [voice for voice in voices if isinstance(voice, dict)]
