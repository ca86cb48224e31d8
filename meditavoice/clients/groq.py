"""Groq HTTP client for chat completions, model listing, and speech."""

from __future__ import annotations

from typing import Any

from .base import ProviderError, ProviderHTTPClient


class GroqClient(ProviderHTTPClient):
    """Minimal requests-based client for Groq's OpenAI-compatible endpoints."""

    provider_id = "groq"
    provider_label = "Groq"
    api_key_env = "GROQ_API_KEY"
    default_base_url = "https://api.groq.com/openai/v1"

    def synthesize_speech(self, *, model: str, text: str) -> bytes:
        """Return MP3 bytes from `/audio/speech` using the provider default voice."""

        self._require_api_key()
        payload = {
            "model": model,
            "input": text,
            "voice": "default",
            "response_format": "mp3",
        }
        return self._post_json_bytes(
            endpoint_path="/audio/speech",
            payload=payload,
            require_non_empty_response=True,
            empty_response_message="Groq speech response is empty.",
        )

    def chat_completion_text(
        self,
        *,
        model: str,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 2048,
    ) -> str:
        """Return the first assistant message text from a chat-completions request."""

        self._require_api_key()

        payload = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        raw_payload = self._post_json_bytes(
            endpoint_path="/chat/completions",
            payload=payload,
        )
        return self._extract_message_text(self._decode_json(raw_payload))

    def list_models(self) -> list[str]:
        """Return model identifiers from `/models`."""

        self._require_api_key()
        payload = self._get_json(endpoint_path="/models")
        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, list):
            raise ProviderError(
                "Groq models response missing `data` list.",
                provider=self.provider_id,
                failure_kind="invalid_response",
            )
        return [
            item["id"]
            for item in data
            if isinstance(item, dict) and isinstance(item.get("id"), str)
        ]

    def _extract_message_text(self, payload: Any) -> str:
        """Extract first assistant message text; an empty message is returned as `""`."""

        choices = payload.get("choices") if isinstance(payload, dict) else None
        if not isinstance(choices, list) or not choices:
            raise ProviderError(
                "Groq response missing non-empty `choices` list.",
                provider=self.provider_id,
                failure_kind="invalid_response",
            )

        first_choice = choices[0]
        message = first_choice.get("message") if isinstance(first_choice, dict) else None
        if not isinstance(message, dict):
            raise ProviderError(
                "Groq response missing `choices[0].message` object.",
                provider=self.provider_id,
                failure_kind="invalid_response",
            )

        return self._message_content_to_text(message.get("content"))

    @staticmethod
    def _message_content_to_text(content: Any) -> str:
        """Convert message content variants into a plain text string."""

        if isinstance(content, str):
            return content
        if isinstance(content, list):
            parts: list[str] = []
            for item in content:
                if not isinstance(item, dict):
                    continue
                if item.get("type") == "text" and isinstance(item.get("text"), str):
                    parts.append(item["text"])
            return "".join(parts)
        return ""
