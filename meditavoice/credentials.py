"""Secure credential storage helpers for the Meditavoice CLI.

Responsibilities:
- Persist provider API keys in an OS-backed secure credential store.
- Provide deterministic read/write/delete operations per provider.
- Avoid logging or exposing secret values in diagnostics.

Key types:
- `CredentialStore`: interface for provider credential persistence.
- `KeyringCredentialStore`: keyring-backed secure credential storage.
"""

from __future__ import annotations

from dataclasses import dataclass

import keyring
from keyring.backends import fail

from .config import CREDENTIAL_ENV_KEYS


_DEFAULT_SERVICE_NAME = "meditavoice"
SUPPORTED_CREDENTIAL_PROVIDERS: tuple[str, ...] = tuple(CREDENTIAL_ENV_KEYS)


def account_name_for(provider: str) -> str:
    """Return the keyring account name used for one provider."""

    if provider not in CREDENTIAL_ENV_KEYS:
        supported = ", ".join(SUPPORTED_CREDENTIAL_PROVIDERS)
        raise ValueError(f"Unsupported provider `{provider}`; supported: {supported}.")
    return f"{provider}_api_key"


class CredentialStore:
    """Interface for secure provider credential operations."""

    def is_available(self) -> bool:
        """Return whether secure credential operations are available."""

        raise NotImplementedError

    def get_api_key(self, provider: str) -> str | None:
        """Load the stored API key for `provider`, when available."""

        raise NotImplementedError

    def set_api_key(self, provider: str, api_key: str) -> None:
        """Persist an API key for `provider`."""

        raise NotImplementedError

    def clear_api_key(self, provider: str) -> bool:
        """Delete a stored API key and return whether one existed."""

        raise NotImplementedError


@dataclass(slots=True)
class KeyringCredentialStore(CredentialStore):
    """Secure credential store backed by the `keyring` package."""

    service_name: str = _DEFAULT_SERVICE_NAME

    def is_available(self) -> bool:
        """Return `False` when keyring resolved to its fail-only backend."""

        return not isinstance(keyring.get_keyring(), fail.Keyring)

    def get_api_key(self, provider: str) -> str | None:
        """Get a normalized API key from keyring, returning `None` when missing."""

        if not self.is_available():
            return None
        value = keyring.get_password(self.service_name, account_name_for(provider))
        if value is None:
            return None
        normalized = value.strip()
        if not normalized:
            return None
        return normalized

    def set_api_key(self, provider: str, api_key: str) -> None:
        """Persist a normalized API key in keyring or raise when unavailable."""

        account = account_name_for(provider)
        if not self.is_available():
            raise RuntimeError(
                "Secure credential storage is unavailable because no keyring "
                "backend is configured."
            )

        normalized = api_key.strip()
        if not normalized:
            raise ValueError("API key must be a non-empty string.")
        keyring.set_password(self.service_name, account, normalized)

    def clear_api_key(self, provider: str) -> bool:
        """Remove the stored API key from keyring and report if one was present."""

        account = account_name_for(provider)
        if self.get_api_key(provider) is None:
            return False

        keyring.delete_password(self.service_name, account)
        return True


def load_secure_credentials(store: CredentialStore) -> dict[str, str]:
    """Return every stored provider key, keyed by provider id."""

    if not store.is_available():
        return {}
    secure_values: dict[str, str] = {}
    for provider in SUPPORTED_CREDENTIAL_PROVIDERS:
        value = store.get_api_key(provider)
        if value is not None:
            secure_values[provider] = value
    return secure_values


def create_credential_store() -> CredentialStore:
    """Create the default secure credential store implementation."""

    return KeyringCredentialStore()
