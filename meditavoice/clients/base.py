"""Shared HTTP plumbing for third-party provider clients.

Responsibilities:
- Send JSON and form requests to provider REST APIs with a bounded timeout.
- Normalize transport and HTTP failures into `ProviderError` with diagnostic kinds.
- Redact credential-like tokens from provider error messages before they surface.
"""

from __future__ import annotations

import json
import re
import socket
from typing import Any, Mapping

import requests


DEFAULT_TIMEOUT_SECONDS = 60.0


class ProviderError(RuntimeError):
    """Raised when a provider request fails or returns malformed output."""

    def __init__(
        self,
        message: str,
        *,
        provider: str = "unknown",
        failure_kind: str = "unknown",
        status_code: int | None = None,
        provider_code: str | None = None,
    ) -> None:
        """Initialize provider error metadata for fallback and HTTP diagnostics."""

        super().__init__(message)
        self.provider = provider
        self.failure_kind = failure_kind
        self.status_code = status_code
        self.provider_code = provider_code


class ProviderHTTPClient:
    """Base client holding credentials, base URL, and error mapping for one provider."""

    provider_id = "provider"
    provider_label = "Provider"
    api_key_env = "PROVIDER_API_KEY"
    default_base_url = ""

    _MAX_PROVIDER_MESSAGE_CHARS = 180

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize HTTP client settings."""

        self.api_key = api_key.strip() if isinstance(api_key, str) else ""
        self.base_url = (base_url or self.default_base_url).rstrip("/")
        self.timeout_seconds = timeout_seconds

    @property
    def is_configured(self) -> bool:
        """Return whether an API key is present."""

        return bool(self.api_key)

    def _require_api_key(self) -> None:
        """Require API key presence before issuing provider requests."""

        if not self.api_key:
            raise ProviderError(
                f"{self.api_key_env} is not configured.",
                provider=self.provider_id,
                failure_kind="invalid_api_key",
            )

    def _auth_headers(self) -> dict[str, str]:
        """Return authentication headers; bearer auth unless a subclass overrides it."""

        return {"Authorization": f"Bearer {self.api_key}"}

    def _post_json_bytes(
        self,
        *,
        endpoint_path: str,
        payload: Mapping[str, Any],
        require_non_empty_response: bool = False,
        empty_response_message: str | None = None,
    ) -> bytes:
        """POST a JSON payload and return raw response bytes."""

        endpoint = f"{self.base_url}{endpoint_path}"
        headers = {**self._auth_headers(), "Content-Type": "application/json"}
        response_bytes = self._execute(
            lambda: requests.post(
                endpoint,
                headers=headers,
                json=dict(payload),
                timeout=self.timeout_seconds,
            )
        )
        if require_non_empty_response and not response_bytes:
            raise ProviderError(
                empty_response_message or f"{self.provider_label} response is empty.",
                provider=self.provider_id,
                failure_kind="invalid_response",
            )
        return response_bytes

    def _post_form_json(
        self,
        *,
        endpoint_path: str,
        form: Mapping[str, str],
        auth: tuple[str, str] | None = None,
    ) -> Any:
        """POST a form-encoded payload and decode the JSON response."""

        endpoint = f"{self.base_url}{endpoint_path}"
        headers = {} if auth is not None else self._auth_headers()
        raw = self._execute(
            lambda: requests.post(
                endpoint,
                headers=headers,
                data=dict(form),
                auth=auth,
                timeout=self.timeout_seconds,
            )
        )
        return self._decode_json(raw)

    def _get_json(
        self,
        *,
        endpoint_path: str,
        params: Mapping[str, str] | None = None,
        auth: tuple[str, str] | None = None,
    ) -> Any:
        """GET an endpoint and decode the JSON response."""

        endpoint = f"{self.base_url}{endpoint_path}"
        headers = {} if auth is not None else self._auth_headers()
        raw = self._execute(
            lambda: requests.get(
                endpoint,
                headers=headers,
                params=dict(params) if params else None,
                auth=auth,
                timeout=self.timeout_seconds,
            )
        )
        return self._decode_json(raw)

    def _execute(self, send: Any) -> bytes:
        """Run one request callable and map failures consistently."""

        try:
            response = send()
            response.raise_for_status()
            return bytes(response.content)
        except requests.HTTPError as exc:
            raise self._http_error_to_provider_error(exc) from exc
        except requests.RequestException as exc:
            failure_kind = self._classify_transport_failure(exc)
            if failure_kind == "timeout":
                detail = f"{self.provider_label} request timed out."
            else:
                detail = (
                    f"{self.provider_label} request transport error: "
                    f"{self._short_message(self._redact_sensitive_tokens(str(exc)))}"
                )
            raise ProviderError(
                detail, provider=self.provider_id, failure_kind=failure_kind
            ) from exc
        except TimeoutError as exc:
            raise ProviderError(
                f"{self.provider_label} request timed out.",
                provider=self.provider_id,
                failure_kind="timeout",
            ) from exc

    def _decode_json(self, raw: bytes) -> Any:
        """Decode a JSON response body or raise an `invalid_response` provider error."""

        try:
            return json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ProviderError(
                f"{self.provider_label} returned invalid JSON payload.",
                provider=self.provider_id,
                failure_kind="invalid_response",
            ) from exc

    @staticmethod
    def _decode_error_body(exc: requests.HTTPError) -> str:
        """Decode an HTTP error body into a best-effort UTF-8 payload string."""

        response = exc.response
        if response is None:
            return ""
        return bytes(response.content or b"").decode("utf-8", errors="replace").strip()

    @classmethod
    def _redact_sensitive_tokens(cls, text: str) -> str:
        """Redact API-key-like tokens from provider error content."""

        redacted = re.sub(r"\b(?:sk|gsk|rk)_?-?[A-Za-z0-9_-]{8,}\b", "[redacted-key]", text)
        redacted = re.sub(
            r"(?i)bearer\s+[A-Za-z0-9._-]{12,}",
            "Bearer [redacted-token]",
            redacted,
        )
        return redacted

    @classmethod
    def _short_message(cls, text: str) -> str:
        """Normalize and cap user-facing provider message length."""

        compact = " ".join(text.split())
        if len(compact) <= cls._MAX_PROVIDER_MESSAGE_CHARS:
            return compact
        return f"{compact[: cls._MAX_PROVIDER_MESSAGE_CHARS - 1]}..."

    @classmethod
    def _extract_provider_message(cls, body: str) -> tuple[str, str | None]:
        """Extract a concise provider message and optional provider error code.

        Understands the `{"error": {...}}` shape (OpenAI, Groq, Stripe) and the
        `{"detail": {...}}` shape (ElevenLabs).
        """

        if not body:
            return "", None

        try:
            payload = json.loads(body)
        except json.JSONDecodeError:
            return cls._short_message(cls._redact_sensitive_tokens(body)), None

        provider_code: str | None = None
        message: str | None = None
        if isinstance(payload, dict):
            error_payload = payload.get("error")
            if not isinstance(error_payload, dict):
                error_payload = payload.get("detail")
            if isinstance(error_payload, dict):
                code_value = error_payload.get("code") or error_payload.get("status")
                if isinstance(code_value, str) and code_value.strip():
                    provider_code = code_value.strip()
                message_value = error_payload.get("message")
                if isinstance(message_value, str) and message_value.strip():
                    message = message_value.strip()
            elif isinstance(error_payload, str) and error_payload.strip():
                message = error_payload.strip()

        if message is None:
            message = body

        return cls._short_message(cls._redact_sensitive_tokens(message)), provider_code

    @staticmethod
    def _classify_http_failure(
        status_code: int,
        provider_message: str,
        provider_code: str | None,
    ) -> str:
        """Classify HTTP errors into deterministic diagnostic kinds."""

        message_lower = provider_message.lower()
        normalized_code = provider_code.lower() if provider_code is not None else ""

        if status_code in {401, 403} or "api key" in message_lower:
            return "invalid_api_key"
        if normalized_code in {"insufficient_quota", "quota_exceeded"} or (
            status_code == 429 and "quota" in message_lower
        ):
            return "insufficient_quota"
        if status_code == 429:
            return "rate_limited"
        if status_code in {408, 504} or "timeout" in message_lower or "timed out" in message_lower:
            return "timeout"
        return "http_error"

    @staticmethod
    def _classify_transport_failure(reason: object) -> str:
        """Classify network-layer failures into deterministic diagnostic kinds."""

        if isinstance(reason, TimeoutError | socket.timeout | requests.Timeout):
            return "timeout"
        return "transport"

    def _http_error_to_provider_error(self, exc: requests.HTTPError) -> ProviderError:
        """Convert HTTP errors into normalized provider exceptions with metadata."""

        status_code = exc.response.status_code if exc.response is not None else 0
        body = self._decode_error_body(exc)
        provider_message, provider_code = self._extract_provider_message(body)
        failure_kind = self._classify_http_failure(status_code, provider_message, provider_code)

        headline = {
            "invalid_api_key": f"{self.provider_label} authentication failed",
            "insufficient_quota": f"{self.provider_label} quota is insufficient for this request",
            "rate_limited": f"{self.provider_label} rate limit reached",
            "timeout": f"{self.provider_label} request timed out",
        }.get(failure_kind, f"{self.provider_label} API error")

        if provider_message:
            detail = f"{headline} (HTTP {status_code}): {provider_message}"
        else:
            detail = f"{headline} (HTTP {status_code})."

        return ProviderError(
            detail,
            provider=self.provider_id,
            failure_kind=failure_kind,
            status_code=status_code,
            provider_code=provider_code,
        )
