"""Integration tests for Typer CLI commands."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from meditavoice import cli as cli_module
from meditavoice.cli import app
from meditavoice.content.blog import BlogPostLibrary
from meditavoice.credentials import CredentialStore
from meditavoice.io.database import create_database_engine


class InMemoryCredentialStore(CredentialStore):
    """Credential store double keeping keys in a dict."""

    def __init__(self, available: bool = True) -> None:
        self.available = available
        self.keys: dict[str, str] = {}

    def is_available(self) -> bool:
        return self.available

    def get_api_key(self, provider: str) -> str | None:
        return self.keys.get(provider)

    def set_api_key(self, provider: str, api_key: str) -> None:
        if not self.available:
            raise RuntimeError("Secure credential storage is unavailable.")
        self.keys[provider] = api_key

    def clear_api_key(self, provider: str) -> bool:
        return self.keys.pop(provider, None) is not None


@pytest.fixture
def credential_store(monkeypatch: pytest.MonkeyPatch) -> InMemoryCredentialStore:
    store = InMemoryCredentialStore()
    monkeypatch.setattr(cli_module, "create_credential_store", lambda: store)
    return store


def test_voices_lists_baseline_without_providers(credential_store: InMemoryCredentialStore) -> None:
    result = CliRunner().invoke(app, ["voices"])

    assert result.exit_code == 0, result.output
    lines = result.output.strip().splitlines()
    assert lines[0] == "default\tDefault Voice"
    assert "openai_nova\tOpenAI Nova" in lines
    assert not any(line.startswith("openai_alloy") for line in lines)


def test_synthesize_writes_audio_with_cli_key(
    tmp_path: Path, credential_store: InMemoryCredentialStore, fake_http  # type: ignore[no-untyped-def]
) -> None:
    """A `--api-key` override enables OpenAI and the default voice maps to alloy."""

    fake_http.add("POST", "api.openai.com/v1/audio/speech", payload=b"mp3-bytes")
    output_path = tmp_path / "out" / "calm.mp3"

    result = CliRunner().invoke(
        app,
        [
            "synthesize",
            "Breathe **slowly**.",
            "--out",
            str(output_path),
            "--api-key",
            "openai=sk-cli-override",
        ],
    )

    assert result.exit_code == 0, result.output
    assert output_path.read_bytes() == b"mp3-bytes"
    assert "Provider: openai" in result.output
    assert "openai: ok (9 bytes)" in result.output
    assert fake_http.calls[0].headers["Authorization"] == "Bearer sk-cli-override"
    assert fake_http.calls[0].json["voice"] == "alloy"
    assert fake_http.calls[0].json["input"] == "Breathe slowly."


def test_synthesize_prefers_cli_key_over_stored_and_env(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    credential_store: InMemoryCredentialStore,
    fake_http,  # type: ignore[no-untyped-def]
) -> None:
    fake_http.add("POST", "/audio/speech", payload=b"x")
    credential_store.keys["openai"] = "sk-stored"
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")

    stored = CliRunner().invoke(app, ["synthesize", "Hi", "--out", str(tmp_path / "a.mp3")])
    overridden = CliRunner().invoke(
        app,
        ["synthesize", "Hi", "--out", str(tmp_path / "b.mp3"), "--api-key", "openai=sk-cli"],
    )

    assert stored.exit_code == 0, stored.output
    assert overridden.exit_code == 0, overridden.output
    assert [call.headers["Authorization"] for call in fake_http.calls] == [
        "Bearer sk-stored",
        "Bearer sk-cli",
    ]


def test_synthesize_without_providers_exits_with_error(
    tmp_path: Path, credential_store: InMemoryCredentialStore
) -> None:
    result = CliRunner().invoke(app, ["synthesize", "Hi", "--out", str(tmp_path / "a.mp3")])

    assert result.exit_code == 1
    assert "synthesize failed: No TTS service available or all services failed" in result.output
    assert not (tmp_path / "a.mp3").exists()


def test_synthesize_without_text_reports_input_stage(credential_store: InMemoryCredentialStore) -> None:
    result = CliRunner().invoke(app, ["synthesize"])

    assert result.exit_code == 1
    assert "synthesize failed at stage `input`" in result.output


def test_invalid_api_key_override_is_rejected(credential_store: InMemoryCredentialStore) -> None:
    result = CliRunner().invoke(app, ["voices", "--api-key", "mistral=abc"])

    assert result.exit_code == 1
    assert "Invalid `--api-key` value for `mistral`" in result.output


def test_generate_prints_script_and_writes_file(
    tmp_path: Path, credential_store: InMemoryCredentialStore, fake_http  # type: ignore[no-untyped-def]
) -> None:
    fake_http.add(
        "POST",
        "api.groq.com/openai/v1/chat/completions",
        json_body={"choices": [{"message": {"content": "Close your eyes."}}]},
    )
    script_path = tmp_path / "script.txt"

    result = CliRunner().invoke(
        app,
        ["generate", "sleep", "--out", str(script_path), "--api-key", "groq=gsk-cli"],
    )

    assert result.exit_code == 0, result.output
    assert "Close your eyes." in result.output
    assert "Model: llama3-70b-8192" in result.output
    assert "Estimated duration (s): 1" in result.output
    assert script_path.read_text(encoding="utf-8") == "Close your eyes."


def test_generate_with_missing_config_file_reports_config_stage(
    tmp_path: Path, credential_store: InMemoryCredentialStore
) -> None:
    result = CliRunner().invoke(
        app, ["generate", "sleep", "--config", str(tmp_path / "missing.yaml")]
    )

    assert result.exit_code == 1
    assert "generate failed at stage `config`" in result.output


def test_publish_scheduled_marks_due_posts(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    database_url = f"sqlite:///{tmp_path / 'content.db'}"
    library = BlogPostLibrary(create_database_engine(database_url))
    library.schedule_post(
        {
            "slug": "due-post",
            "title": "Due",
            "date": "2020-01-01",
            "category": "Basics",
            "excerpt": "Ready.",
            "content": ["Body."],
        }
    )
    library.schedule_post(
        {
            "slug": "future-post",
            "title": "Later",
            "date": "2999-01-01",
            "category": "Basics",
            "excerpt": "Not yet.",
            "content": ["Body."],
        }
    )
    monkeypatch.setenv("MEDITAVOICE_DATABASE_URL", database_url)

    result = CliRunner().invoke(app, ["publish-scheduled"])

    assert result.exit_code == 0, result.output
    assert "Published posts: 1" in result.output
    assert "due-post" in result.output
    assert [post["slug"] for post in library.list_published()] == ["due-post"]


def test_credentials_set_status_and_clear(credential_store: InMemoryCredentialStore) -> None:
    runner = CliRunner()

    stored = runner.invoke(app, ["credentials", "set", "ElevenLabs"], input="el-secret\n")
    status = runner.invoke(app, ["credentials"])
    cleared = runner.invoke(app, ["credentials", "clear", "elevenlabs"])
    cleared_again = runner.invoke(app, ["credentials", "clear", "elevenlabs"])

    assert stored.exit_code == 0, stored.output
    assert "elevenlabs API key stored in secure credential storage." in stored.output
    assert "Secure credential storage: available" in status.output
    assert "Stored elevenlabs API key: present" in status.output
    assert "Stored openai API key: not set" in status.output
    assert "cleared from secure credential storage" in cleared.output
    assert "No stored elevenlabs API key found" in cleared_again.output
    assert credential_store.keys == {}


def test_credentials_set_rejects_unknown_provider_and_unavailable_store(
    credential_store: InMemoryCredentialStore,
) -> None:
    runner = CliRunner()

    unknown = runner.invoke(app, ["credentials", "set", "mistral"], input="key\n")
    credential_store.available = False
    unavailable = runner.invoke(app, ["credentials", "set", "openai"], input="key\n")

    assert unknown.exit_code == 1
    assert "Unsupported provider `mistral`" in unknown.output
    assert unavailable.exit_code == 1
    assert "Failed to store API key securely" in unavailable.output
