"""Unit tests for secure credential store helpers."""

from __future__ import annotations

import pytest
from keyring.backends import fail

from meditavoice import credentials as credentials_module
from meditavoice.credentials import KeyringCredentialStore, load_secure_credentials


class FakeKeyringModule:
    """In-memory keyring stub for deterministic credential store tests."""

    def __init__(self, backend: object | None = None) -> None:
        """Initialize fake storage dictionary."""

        self._storage: dict[tuple[str, str], str] = {}
        self._backend = backend if backend is not None else object()

    def get_keyring(self) -> object:
        """Return the active backend object."""

        return self._backend

    def get_password(self, service_name: str, account_name: str) -> str | None:
        """Return previously stored password if present."""

        return self._storage.get((service_name, account_name))

    def set_password(self, service_name: str, account_name: str, value: str) -> None:
        """Store password value for the service/account key."""

        self._storage[(service_name, account_name)] = value

    def delete_password(self, service_name: str, account_name: str) -> None:
        """Delete password value for the service/account key."""

        self._storage.pop((service_name, account_name), None)


def test_keyring_store_roundtrip_per_provider(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keys should be stored under one account per provider."""

    fake_keyring = FakeKeyringModule()
    monkeypatch.setattr(credentials_module, "keyring", fake_keyring)
    store = KeyringCredentialStore()

    assert store.is_available() is True
    store.set_api_key("elevenlabs", "  el-123  ")
    store.set_api_key("openai", "sk-456")

    assert store.get_api_key("elevenlabs") == "el-123"
    assert fake_keyring.get_password("meditavoice", "openai_api_key") == "sk-456"
    assert load_secure_credentials(store) == {"elevenlabs": "el-123", "openai": "sk-456"}

    assert store.clear_api_key("elevenlabs") is True
    assert store.get_api_key("elevenlabs") is None
    assert store.clear_api_key("elevenlabs") is False


def test_keyring_store_rejects_unknown_provider_and_blank_key(monkeypatch: pytest.MonkeyPatch) -> None:
    """Unsupported providers and blank keys should raise `ValueError`."""

    monkeypatch.setattr(credentials_module, "keyring", FakeKeyringModule())
    store = KeyringCredentialStore()

    with pytest.raises(ValueError, match="Unsupported provider"):
        store.set_api_key("azure", "key")
    with pytest.raises(ValueError, match="non-empty"):
        store.set_api_key("groq", "   ")


def test_keyring_store_reports_fail_backend_as_unavailable(monkeypatch: pytest.MonkeyPatch) -> None:
    """The keyring fail backend should make the store unavailable and reads empty."""

    monkeypatch.setattr(credentials_module, "keyring", FakeKeyringModule(fail.Keyring()))
    store = KeyringCredentialStore()

    assert store.is_available() is False
    assert store.get_api_key("openai") is None
    assert load_secure_credentials(store) == {}
    with pytest.raises(RuntimeError, match="unavailable"):
        store.set_api_key("openai", "sk")
