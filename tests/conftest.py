"""Shared pytest fixtures for the full Meditavoice test suite."""

from __future__ import annotations

from dataclasses import dataclass, field
import json
from typing import Any, Callable, Iterator

import pytest
import requests

from meditavoice.telemetry.logger import configure_logging


class MockRequestsResponse:
    """Minimal requests response mock for HTTP transport patching."""

    def __init__(self, *, payload: bytes = b"", status_code: int = 200) -> None:
        """Initialize response with raw payload bytes and HTTP status."""

        self.content = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        """Raise HTTPError when the response status represents a failure."""

        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code} error", response=self)


@dataclass(slots=True)
class RecordedCall:
    """One outbound request captured by `FakeHTTP`."""

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    json: Any = None
    data: Any = None
    params: Any = None
    auth: Any = None
    timeout: Any = None


Responder = Callable[[RecordedCall], Any]


class FakeHTTP:
    """Route `requests.get/post` calls to canned responses by URL fragment."""

    def __init__(self) -> None:
        self.calls: list[RecordedCall] = []
        self._routes: list[tuple[str, str, Responder]] = []

    def add(
        self,
        method: str,
        url_fragment: str,
        *,
        json_body: Any = None,
        payload: bytes = b"",
        status_code: int = 200,
        error: BaseException | None = None,
        responder: Responder | None = None,
    ) -> None:
        """Register a response for requests whose URL contains `url_fragment`."""

        if responder is None:
            body = json.dumps(json_body).encode("utf-8") if json_body is not None else payload

            def responder(_call: RecordedCall) -> Any:
                if error is not None:
                    raise error
                return MockRequestsResponse(payload=body, status_code=status_code)

        self._routes.append((method.upper(), url_fragment, responder))

    def post(self, url: str, **kwargs: Any) -> Any:
        return self._dispatch("POST", url, kwargs)

    def get(self, url: str, **kwargs: Any) -> Any:
        return self._dispatch("GET", url, kwargs)

    def urls(self, method: str | None = None) -> list[str]:
        """Return called URLs, optionally filtered by method."""

        return [call.url for call in self.calls if method is None or call.method == method]

    def _dispatch(self, method: str, url: str, kwargs: dict[str, Any]) -> Any:
        call = RecordedCall(
            method=method,
            url=url,
            headers=dict(kwargs.get("headers") or {}),
            json=kwargs.get("json"),
            data=kwargs.get("data"),
            params=kwargs.get("params"),
            auth=kwargs.get("auth"),
            timeout=kwargs.get("timeout"),
        )
        self.calls.append(call)
        for route_method, fragment, responder in self._routes:
            if route_method == method and fragment in url:
                return responder(call)
        raise AssertionError(f"Unexpected {method} request to {url}")


@pytest.fixture
def fake_http(monkeypatch: pytest.MonkeyPatch) -> FakeHTTP:
    """Patch outbound provider HTTP with a recording fake."""

    fake = FakeHTTP()
    monkeypatch.setattr("meditavoice.clients.base.requests.post", fake.post)
    monkeypatch.setattr("meditavoice.clients.base.requests.get", fake.get)
    return fake


@pytest.fixture(autouse=True)
def _clear_provider_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer API keys in the shell from leaking into tests."""

    for key in (
        "ELEVENLABS_API_KEY",
        "OPENAI_API_KEY",
        "GROQ_API_KEY",
        "PLAYAI_API_KEY",
        "PLAYAI_USER_ID",
        "STRIPE_SECRET_KEY",
        "ADMIN_PASSWORD",
        "MEDITAVOICE_STORAGE",
        "DATABASE_URL",
        "MEDITAVOICE_DATABASE_URL",
        "PORT",
    ):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Restore the default stderr sink after tests that capture log output."""

    yield
    configure_logging()
