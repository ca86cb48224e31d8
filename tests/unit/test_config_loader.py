"""Unit tests for config loading and credential precedence."""

from __future__ import annotations

from pathlib import Path

import pytest

from meditavoice.config import ConfigLoader, MeditavoiceConfig, RuntimeConfigSources


def test_from_env_uses_defaults_for_missing_values() -> None:
    """An empty environment should produce a valid default config."""

    config = ConfigLoader.from_env({})

    assert config.storage_backend == "memory"
    assert config.groq_model == "llama3-70b-8192"
    assert config.elevenlabs_chunk_chars == 4000
    assert config.http_timeout_seconds == 60.0
    assert config.port == 5000
    assert config.resolved_credentials().configured_providers() == []


def test_from_env_reads_service_settings_and_keys() -> None:
    """Environment variables should populate settings and credential sources."""

    config = ConfigLoader.from_env(
        {
            "MEDITAVOICE_STORAGE": "SQL",
            "DATABASE_URL": "sqlite:///tmp.db",
            "MEDITAVOICE_HTTP_TIMEOUT_SECONDS": "12.5",
            "MEDITAVOICE_ELEVENLABS_CHUNK_CHARS": "2500",
            "OPENAI_API_KEY": "  sk-env  ",
            "GROQ_API_KEY": "   ",
            "PLAYAI_USER_ID": "user-1",
            "ADMIN_PASSWORD": "secret",
            "PORT": "8080",
        }
    )
    credentials = config.resolved_credentials()

    assert config.storage_backend == "sql"
    assert config.database_url == "sqlite:///tmp.db"
    assert config.http_timeout_seconds == 12.5
    assert config.elevenlabs_chunk_chars == 2500
    assert config.playai_user_id == "user-1"
    assert config.admin_password == "secret"
    assert config.port == 8080
    assert credentials.openai_api_key == "sk-env"
    assert credentials.groq_api_key is None


@pytest.mark.parametrize(
    ("env", "message"),
    [
        ({"MEDITAVOICE_STORAGE": "redis"}, "storage_backend"),
        ({"MEDITAVOICE_HTTP_TIMEOUT_SECONDS": "0"}, "MEDITAVOICE_HTTP_TIMEOUT_SECONDS"),
        ({"MEDITAVOICE_ELEVENLABS_CHUNK_CHARS": "many"}, "MEDITAVOICE_ELEVENLABS_CHUNK_CHARS"),
    ],
)
def test_from_env_rejects_invalid_values(env: dict[str, str], message: str) -> None:
    """Invalid settings should raise `ValueError` naming the offending key."""

    with pytest.raises(ValueError, match=message):
        ConfigLoader.from_env(env)


def test_credential_precedence_is_cli_then_secure_then_env_then_default() -> None:
    """Each credential should resolve from the highest-precedence source present."""

    config = MeditavoiceConfig(
        elevenlabs_api_key="el-default",
        openai_api_key="sk-default",
        groq_api_key="gsk-default",
        playai_api_key="pk-default",
    )
    sources = RuntimeConfigSources(
        cli={"elevenlabs": "el-cli"},
        secure={"elevenlabs": "el-secure", "openai": "sk-secure"},
        env={"ELEVENLABS_API_KEY": "el-env", "OPENAI_API_KEY": "sk-env", "GROQ_API_KEY": "gsk-env"},
    )

    credentials = config.resolved_credentials(sources)

    assert credentials.elevenlabs_api_key == "el-cli"
    assert credentials.openai_api_key == "sk-secure"
    assert credentials.groq_api_key == "gsk-env"
    assert credentials.playai_api_key == "pk-default"


def test_with_sources_keeps_other_settings() -> None:
    """Replacing runtime sources should not touch other settings."""

    config = MeditavoiceConfig(storage_backend="sql", port=9000)

    updated = config.with_sources(RuntimeConfigSources(cli={"stripe": "sk_cli"}))

    assert updated.storage_backend == "sql"
    assert updated.port == 9000
    assert updated.resolved_credentials().stripe_secret_key == "sk_cli"
    assert config.resolved_credentials().stripe_secret_key is None


def test_from_yaml_loads_supported_keys(tmp_path: Path) -> None:
    """YAML configs should load known keys and keep env keys above file keys."""

    config_path = tmp_path / "meditavoice.yaml"
    config_path.write_text(
        "storage_backend: sql\n"
        "database_url: sqlite:///from-yaml.db\n"
        "audio_dir: media/audio\n"
        "openai_api_key: sk-yaml\n"
        "elevenlabs_chunk_chars: 1000\n"
        "port: 7000\n",
        encoding="utf-8",
    )

    config = ConfigLoader.from_yaml(config_path, env={"OPENAI_API_KEY": "sk-env"})

    assert config.storage_backend == "sql"
    assert config.database_url == "sqlite:///from-yaml.db"
    assert config.audio_dir == Path("media/audio")
    assert config.elevenlabs_chunk_chars == 1000
    assert config.port == 7000
    assert config.resolved_credentials().openai_api_key == "sk-env"
    assert ConfigLoader.from_yaml(config_path, env={}).resolved_credentials().openai_api_key == "sk-yaml"


def test_from_yaml_rejects_unknown_keys_and_non_mapping(tmp_path: Path) -> None:
    """Unknown keys and non-mapping documents should be rejected."""

    unknown = tmp_path / "unknown.yaml"
    unknown.write_text("voice: alloy\n", encoding="utf-8")
    listing = tmp_path / "list.yaml"
    listing.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ValueError, match="unsupported key"):
        ConfigLoader.from_yaml(unknown, env={})
    with pytest.raises(ValueError, match="top-level mapping"):
        ConfigLoader.from_yaml(listing, env={})
