"""Configuration model and loaders for Meditavoice.

Responsibilities:
- Define service configuration as a typed dataclass.
- Resolve provider credentials with deterministic source precedence.
- Provide loader entry points for file- and environment-based configuration.

Key types:
- `MeditavoiceConfig`: normalized settings for the API server and CLI commands.
- `ProviderCredentials`: resolved provider API keys for one process.
- `RuntimeConfigSources`: optional value sources for precedence resolution.
- `ConfigLoader`: static construction helpers for `MeditavoiceConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .parsing import normalize_optional_string


DEFAULT_GROQ_MODEL = "llama3-70b-8192"
DEFAULT_DATABASE_URL = "sqlite:///meditavoice.db"
DEFAULT_AUDIO_DIR = Path("public") / "audio"
DEFAULT_ELEVENLABS_CHUNK_CHARS = 4000
DEFAULT_HTTP_TIMEOUT_SECONDS = 60.0
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 5000
SUPPORTED_STORAGE_BACKENDS = frozenset({"memory", "sql"})

# Source key -> environment variable for each credential.
CREDENTIAL_ENV_KEYS: dict[str, str] = {
    "elevenlabs": "ELEVENLABS_API_KEY",
    "openai": "OPENAI_API_KEY",
    "groq": "GROQ_API_KEY",
    "playai": "PLAYAI_API_KEY",
    "stripe": "STRIPE_SECRET_KEY",
}


@dataclass(frozen=True, slots=True)
class RuntimeConfigSources:
    """Source mappings used for deterministic runtime value precedence.

    Attributes:
        cli: Values explicitly provided by CLI arguments, keyed by provider id.
        secure: Values loaded from secure local credential storage, keyed by provider id.
        env: Values loaded from environment variables, keyed by variable name.
    """

    cli: Mapping[str, str] = field(default_factory=dict)
    secure: Mapping[str, str] = field(default_factory=dict)
    env: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ProviderCredentials:
    """Resolved provider API keys; any of them may be absent."""

    elevenlabs_api_key: str | None = None
    openai_api_key: str | None = None
    groq_api_key: str | None = None
    playai_api_key: str | None = None
    stripe_secret_key: str | None = None

    def configured_providers(self) -> list[str]:
        """Return provider ids that have a key, safe to log."""

        return [
            provider
            for provider, value in (
                ("elevenlabs", self.elevenlabs_api_key),
                ("openai", self.openai_api_key),
                ("groq", self.groq_api_key),
                ("playai", self.playai_api_key),
                ("stripe", self.stripe_secret_key),
            )
            if value is not None
        ]


@dataclass(slots=True)
class MeditavoiceConfig:
    """Service configuration.

    Attributes:
        elevenlabs_api_key: ElevenLabs key used as the lowest-precedence default.
        openai_api_key: OpenAI key used as the lowest-precedence default.
        groq_api_key: Groq key for script generation and Groq speech.
        playai_api_key: PlayAI key.
        playai_user_id: Optional PlayAI user id sent alongside the key.
        groq_model: Default chat model for script generation.
        storage_backend: `memory` or `sql`.
        database_url: SQLAlchemy URL for the `sql` backend and the content library.
        audio_dir: Directory for saved MP3 files served under `/audio`.
        elevenlabs_chunk_chars: Maximum characters per ElevenLabs request.
        http_timeout_seconds: Timeout applied to every outbound provider request.
        stripe_secret_key: Stripe secret key for checkout sessions.
        admin_password: Password required by admin-only routes.
        host: Bind host for `meditavoice serve`.
        port: Bind port for `meditavoice serve`.
        runtime_sources: Optional runtime source overrides injected by the CLI.
    """

    elevenlabs_api_key: str | None = None
    openai_api_key: str | None = None
    groq_api_key: str | None = None
    playai_api_key: str | None = None
    playai_user_id: str | None = None
    groq_model: str = DEFAULT_GROQ_MODEL
    storage_backend: str = "memory"
    database_url: str = DEFAULT_DATABASE_URL
    audio_dir: Path = DEFAULT_AUDIO_DIR
    elevenlabs_chunk_chars: int = DEFAULT_ELEVENLABS_CHUNK_CHARS
    http_timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS
    stripe_secret_key: str | None = None
    admin_password: str | None = None
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    runtime_sources: RuntimeConfigSources = field(default_factory=RuntimeConfigSources)

    def validate(self) -> None:
        """Validate configuration values before services are built."""

        if self.storage_backend not in SUPPORTED_STORAGE_BACKENDS:
            supported = ", ".join(sorted(SUPPORTED_STORAGE_BACKENDS))
            raise ValueError(
                f"Unsupported `storage_backend` value `{self.storage_backend}`; "
                f"supported: {supported}."
            )
        self._require_non_empty(self.groq_model, "groq_model")
        self._require_non_empty(self.database_url, "database_url")
        self._require_non_empty(self.host, "host")
        if self.elevenlabs_chunk_chars <= 0:
            raise ValueError("`elevenlabs_chunk_chars` must be a positive integer.")
        if self.http_timeout_seconds <= 0:
            raise ValueError("`http_timeout_seconds` must be a positive number.")
        if not 0 < self.port < 65536:
            raise ValueError("`port` must be between 1 and 65535.")

    def resolved_credentials(
        self, sources: RuntimeConfigSources | None = None
    ) -> ProviderCredentials:
        """Resolve provider keys with deterministic source precedence.

        Precedence for each key is:
        `cli` > `secure` > `env` > config field default.
        """

        resolved_sources = sources if sources is not None else self.runtime_sources
        return ProviderCredentials(
            elevenlabs_api_key=self._resolve_optional_runtime_value(
                "elevenlabs", self.elevenlabs_api_key, resolved_sources
            ),
            openai_api_key=self._resolve_optional_runtime_value(
                "openai", self.openai_api_key, resolved_sources
            ),
            groq_api_key=self._resolve_optional_runtime_value(
                "groq", self.groq_api_key, resolved_sources
            ),
            playai_api_key=self._resolve_optional_runtime_value(
                "playai", self.playai_api_key, resolved_sources
            ),
            stripe_secret_key=self._resolve_optional_runtime_value(
                "stripe", self.stripe_secret_key, resolved_sources
            ),
        )

    def with_sources(self, sources: RuntimeConfigSources) -> MeditavoiceConfig:
        """Return a copy of this config carrying different runtime sources."""

        return replace(self, runtime_sources=sources)

    def _resolve_optional_runtime_value(
        self,
        key: str,
        default_value: str | None,
        sources: RuntimeConfigSources,
    ) -> str | None:
        """Resolve an optional credential from sources in deterministic order."""

        cli_value = self._normalized_lookup(sources.cli, key)
        if cli_value is not None:
            return cli_value

        secure_value = self._normalized_lookup(sources.secure, key)
        if secure_value is not None:
            return secure_value

        env_value = self._normalized_lookup(sources.env, CREDENTIAL_ENV_KEYS[key])
        if env_value is not None:
            return env_value

        return normalize_optional_string(default_value)

    @staticmethod
    def _normalized_lookup(mapping: Mapping[str, str], key: str) -> str | None:
        """Return a stripped mapping value for a key or `None` when missing/blank."""

        if key not in mapping:
            return None
        return normalize_optional_string(mapping.get(key))

    @staticmethod
    def _require_non_empty(value: object, field_name: str) -> None:
        """Validate that string fields are not empty."""

        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"`{field_name}` must be a non-empty string.")


class ConfigLoader:
    """Factory methods for creating `MeditavoiceConfig` from external sources."""

    _SUPPORTED_YAML_KEYS = frozenset(
        {
            "elevenlabs_api_key",
            "openai_api_key",
            "groq_api_key",
            "playai_api_key",
            "playai_user_id",
            "groq_model",
            "storage_backend",
            "database_url",
            "audio_dir",
            "elevenlabs_chunk_chars",
            "http_timeout_seconds",
            "stripe_secret_key",
            "admin_password",
            "host",
            "port",
        }
    )

    @staticmethod
    def from_yaml(path: Path, env: Mapping[str, str] | None = None) -> MeditavoiceConfig:
        """Create a validated config from a YAML file.

        Credential environment variables still take part in key resolution,
        ranked above the values written in the file.
        """

        payload = ConfigLoader._parse_yaml_payload(path.read_text(encoding="utf-8"), path)
        config = ConfigLoader._build_config_from_mapping(payload, source_label=f"YAML `{path}`")
        env_map: Mapping[str, str] = os.environ if env is None else env
        return config.with_sources(RuntimeConfigSources(env=ConfigLoader._credential_env(env_map)))

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> MeditavoiceConfig:
        """Create a validated config from environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        optional = ConfigLoader._optional_env_string

        audio_dir = optional(env_map, "MEDITAVOICE_AUDIO_DIR")
        config = MeditavoiceConfig(
            elevenlabs_api_key=optional(env_map, "ELEVENLABS_API_KEY"),
            openai_api_key=optional(env_map, "OPENAI_API_KEY"),
            groq_api_key=optional(env_map, "GROQ_API_KEY"),
            playai_api_key=optional(env_map, "PLAYAI_API_KEY"),
            playai_user_id=optional(env_map, "PLAYAI_USER_ID"),
            groq_model=optional(env_map, "MEDITAVOICE_GROQ_MODEL") or DEFAULT_GROQ_MODEL,
            storage_backend=(optional(env_map, "MEDITAVOICE_STORAGE") or "memory").lower(),
            database_url=(
                optional(env_map, "MEDITAVOICE_DATABASE_URL")
                or optional(env_map, "DATABASE_URL")
                or DEFAULT_DATABASE_URL
            ),
            audio_dir=Path(audio_dir) if audio_dir is not None else DEFAULT_AUDIO_DIR,
            elevenlabs_chunk_chars=ConfigLoader._optional_env_positive_int(
                env_map, "MEDITAVOICE_ELEVENLABS_CHUNK_CHARS"
            )
            or DEFAULT_ELEVENLABS_CHUNK_CHARS,
            http_timeout_seconds=ConfigLoader._optional_env_positive_float(
                env_map, "MEDITAVOICE_HTTP_TIMEOUT_SECONDS"
            )
            or DEFAULT_HTTP_TIMEOUT_SECONDS,
            stripe_secret_key=optional(env_map, "STRIPE_SECRET_KEY"),
            admin_password=optional(env_map, "ADMIN_PASSWORD"),
            host=optional(env_map, "MEDITAVOICE_HOST") or DEFAULT_HOST,
            port=ConfigLoader._optional_env_positive_int(env_map, "MEDITAVOICE_PORT")
            or ConfigLoader._optional_env_positive_int(env_map, "PORT")
            or DEFAULT_PORT,
            runtime_sources=RuntimeConfigSources(env=ConfigLoader._credential_env(env_map)),
        )
        config.validate()
        return config

    @staticmethod
    def _credential_env(env: Mapping[str, str]) -> dict[str, str]:
        """Select non-blank credential variables from an environment mapping."""

        wanted = set(CREDENTIAL_ENV_KEYS.values())
        return {
            key: value
            for key, value in env.items()
            if key in wanted and normalize_optional_string(value) is not None
        }

    @staticmethod
    def _parse_yaml_payload(raw_text: str, path: Path) -> Mapping[str, Any]:
        """Parse YAML text and enforce a mapping root payload."""

        try:
            payload = yaml.safe_load(raw_text)
        except yaml.YAMLError as exc:
            raise ValueError(f"YAML config `{path}` could not be parsed: {exc}") from exc

        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")
        return payload

    @staticmethod
    def _build_config_from_mapping(
        payload: Mapping[str, Any], source_label: str
    ) -> MeditavoiceConfig:
        """Build a validated config from a normalized mapping payload."""

        unknown = sorted(set(payload).difference(ConfigLoader._SUPPORTED_YAML_KEYS))
        if unknown:
            key_list = ", ".join(unknown)
            raise ValueError(f"{source_label} includes unsupported key(s): {key_list}.")

        optional = ConfigLoader._optional_non_empty_string
        audio_dir = optional(payload, "audio_dir")
        storage_backend = optional(payload, "storage_backend")
        config = MeditavoiceConfig(
            elevenlabs_api_key=optional(payload, "elevenlabs_api_key"),
            openai_api_key=optional(payload, "openai_api_key"),
            groq_api_key=optional(payload, "groq_api_key"),
            playai_api_key=optional(payload, "playai_api_key"),
            playai_user_id=optional(payload, "playai_user_id"),
            groq_model=optional(payload, "groq_model") or DEFAULT_GROQ_MODEL,
            storage_backend=storage_backend.lower() if storage_backend else "memory",
            database_url=optional(payload, "database_url") or DEFAULT_DATABASE_URL,
            audio_dir=Path(audio_dir) if audio_dir is not None else DEFAULT_AUDIO_DIR,
            elevenlabs_chunk_chars=ConfigLoader._optional_positive_int(
                payload,
                "elevenlabs_chunk_chars",
                source_label,
                default=DEFAULT_ELEVENLABS_CHUNK_CHARS,
            ),
            http_timeout_seconds=ConfigLoader._optional_positive_float(
                payload,
                "http_timeout_seconds",
                source_label,
                default=DEFAULT_HTTP_TIMEOUT_SECONDS,
            ),
            stripe_secret_key=optional(payload, "stripe_secret_key"),
            admin_password=optional(payload, "admin_password"),
            host=optional(payload, "host") or DEFAULT_HOST,
            port=ConfigLoader._optional_positive_int(
                payload, "port", source_label, default=DEFAULT_PORT
            ),
        )
        config.validate()
        return config

    @staticmethod
    def _optional_non_empty_string(payload: Mapping[str, Any], key: str) -> str | None:
        """Read an optional string field and normalize blank values to `None`."""

        if key not in payload:
            return None
        return normalize_optional_string(payload[key])

    @staticmethod
    def _optional_positive_int(
        payload: Mapping[str, Any], key: str, source_label: str, default: int
    ) -> int:
        """Read and validate a positive integer payload field."""

        if key not in payload:
            return default

        raw_value = payload[key]
        if isinstance(raw_value, bool):
            raise ValueError(f"{source_label} field `{key}` must be a positive integer.")
        if isinstance(raw_value, int):
            parsed = raw_value
        else:
            normalized = normalize_optional_string(raw_value)
            if normalized is None:
                return default
            try:
                parsed = int(normalized)
            except ValueError as exc:
                raise ValueError(
                    f"{source_label} field `{key}` must be a positive integer."
                ) from exc

        if parsed <= 0:
            raise ValueError(f"{source_label} field `{key}` must be a positive integer.")
        return parsed

    @staticmethod
    def _optional_positive_float(
        payload: Mapping[str, Any], key: str, source_label: str, default: float
    ) -> float:
        """Read and validate a positive numeric payload field."""

        if key not in payload:
            return default

        raw_value = payload[key]
        if isinstance(raw_value, bool):
            raise ValueError(f"{source_label} field `{key}` must be a positive number.")
        normalized = normalize_optional_string(raw_value)
        if normalized is None:
            return default
        try:
            parsed = float(normalized)
        except ValueError as exc:
            raise ValueError(f"{source_label} field `{key}` must be a positive number.") from exc
        if parsed <= 0:
            raise ValueError(f"{source_label} field `{key}` must be a positive number.")
        return parsed

    @staticmethod
    def _optional_env_string(env: Mapping[str, str], key: str) -> str | None:
        """Read and normalize optional string environment variable values."""

        if key not in env:
            return None
        return normalize_optional_string(env.get(key))

    @staticmethod
    def _optional_env_positive_int(env: Mapping[str, str], key: str) -> int | None:
        """Read an optional positive integer from environment mapping."""

        raw_value = ConfigLoader._optional_env_string(env, key)
        if raw_value is None:
            return None
        try:
            parsed = int(raw_value)
        except ValueError as exc:
            raise ValueError(f"Environment variable `{key}` must be a positive integer.") from exc
        if parsed <= 0:
            raise ValueError(f"Environment variable `{key}` must be a positive integer.")
        return parsed

    @staticmethod
    def _optional_env_positive_float(env: Mapping[str, str], key: str) -> float | None:
        """Read an optional positive number from environment mapping."""

        raw_value = ConfigLoader._optional_env_string(env, key)
        if raw_value is None:
            return None
        try:
            parsed = float(raw_value)
        except ValueError as exc:
            raise ValueError(f"Environment variable `{key}` must be a positive number.") from exc
        if parsed <= 0:
            raise ValueError(f"Environment variable `{key}` must be a positive number.")
        return parsed
