"""Command-line interface for Meditavoice.

Responsibilities:
- Expose commands to serve the API, generate scripts, and synthesize audio.
- Run the scheduled blog publishing job.
- Manage provider API keys in secure credential storage.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Annotated, Optional

import typer

from .cli_rendering import echo_provider_attempts, echo_voice_list, exit_with_command_error
from .config import ConfigLoader, MeditavoiceConfig, RuntimeConfigSources
from .credentials import (
    SUPPORTED_CREDENTIAL_PROVIDERS,
    create_credential_store,
    load_secure_credentials,
)
from .errors import ServiceError
from .parsing import normalize_optional_string
from .provider_factory import ProviderFactory
from .telemetry.logger import RunLogger, configure_logging

app = typer.Typer(
    name="meditavoice",
    no_args_is_help=True,
    help="Meditavoice CLI.",
)
credentials_app = typer.Typer(help="Manage provider API keys in secure storage.")
app.add_typer(credentials_app, name="credentials")

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", help="YAML config file; environment variables are used otherwise."),
]
ApiKeyOption = Annotated[
    Optional[list[str]],
    typer.Option(
        "--api-key",
        help="Provider key override as `provider=key`; may be repeated.",
    ),
]


def _load_config(config_path: Path | None) -> MeditavoiceConfig:
    """Load config from YAML or the environment and map failures to service errors."""

    if config_path is None:
        try:
            return ConfigLoader.from_env()
        except ValueError as exc:
            raise ServiceError(
                stage="config",
                detail=f"Invalid environment configuration: {exc}",
                hint="Fix the MEDITAVOICE_* environment variables and rerun.",
            ) from exc

    try:
        return ConfigLoader.from_yaml(config_path)
    except FileNotFoundError as exc:
        raise ServiceError(
            stage="config",
            detail=f"Config file not found: `{config_path}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise ServiceError(
            stage="config",
            detail=f"Invalid config file `{config_path}`: {exc}",
            hint="Fix config schema/values and rerun.",
        ) from exc


def _parse_api_key_overrides(values: list[str] | None) -> dict[str, str]:
    """Parse repeated `provider=key` options into a CLI source mapping."""

    overrides: dict[str, str] = {}
    for raw in values or []:
        provider, separator, key = raw.partition("=")
        provider = provider.strip().lower()
        normalized_key = normalize_optional_string(key)
        if not separator or provider not in SUPPORTED_CREDENTIAL_PROVIDERS or normalized_key is None:
            supported = ", ".join(SUPPORTED_CREDENTIAL_PROVIDERS)
            raise ServiceError(
                stage="config",
                detail=f"Invalid `--api-key` value for `{provider or raw}`.",
                hint=f"Use `--api-key <provider>=<key>` with provider one of: {supported}.",
            )
        overrides[provider] = normalized_key
    return overrides


def _build_factory(config_path: Path | None, api_keys: list[str] | None) -> ProviderFactory:
    """Resolve config plus CLI, secure, and env key sources into a provider factory."""

    config = _load_config(config_path)
    sources = RuntimeConfigSources(
        cli=_parse_api_key_overrides(api_keys),
        secure=load_secure_credentials(create_credential_store()),
        env=config.runtime_sources.env or os.environ,
    )
    return ProviderFactory(config.with_sources(sources), run_logger=RunLogger())


@app.command("serve")
def serve_command(
    config: ConfigOption = None,
    host: Annotated[Optional[str], typer.Option("--host", help="Bind host.")] = None,
    port: Annotated[Optional[int], typer.Option("--port", help="Bind port.")] = None,
    api_key: ApiKeyOption = None,
) -> None:
    """Serve the HTTP API with uvicorn."""

    import uvicorn

    from .api.app import create_app

    try:
        configure_logging()
        factory = _build_factory(config, api_key)
        services = factory.build_services()
        application = create_app(factory.config, services, run_logger=factory.run_logger)
    except Exception as exc:
        exit_with_command_error("serve", exc)

    uvicorn.run(
        application,
        host=host or factory.config.host,
        port=port or factory.config.port,
    )


@app.command("generate")
def generate_command(
    prompt: Annotated[str, typer.Argument(help="What the meditation should be about.")],
    model: Annotated[Optional[str], typer.Option("--model", help="Groq chat model.")] = None,
    out: Annotated[
        Optional[Path], typer.Option("--out", help="Write the script to this text file.")
    ] = None,
    config: ConfigOption = None,
    api_key: ApiKeyOption = None,
) -> None:
    """Generate a meditation script and print it."""

    try:
        factory = _build_factory(config, api_key)
        script = factory.create_script_generator().generate(prompt, model)
        if out is not None:
            out.parent.mkdir(parents=True, exist_ok=True)
            out.write_text(script.content, encoding="utf-8")
    except Exception as exc:
        exit_with_command_error("generate", exc)

    typer.echo(script.content)
    typer.echo(f"Model: {script.model}")
    typer.echo(f"Estimated duration (s): {script.duration_seconds}")
    if out is not None:
        typer.echo(f"Script: {out}")


@app.command("synthesize")
def synthesize_command(
    text: Annotated[
        Optional[str], typer.Argument(help="Script text; omit when using `--text-file`.")
    ] = None,
    voice: Annotated[str, typer.Option("--voice", help="Voice identifier.")] = "default",
    out: Annotated[Path, typer.Option("--out", help="Output MP3 path.")] = Path("meditation.mp3"),
    text_file: Annotated[
        Optional[Path], typer.Option("--text-file", help="Read script text from a file.")
    ] = None,
    config: ConfigOption = None,
    api_key: ApiKeyOption = None,
) -> None:
    """Synthesize narration through the provider fallback chain."""

    try:
        if text_file is not None:
            script_text = text_file.read_text(encoding="utf-8")
        elif text is not None:
            script_text = text
        else:
            raise ServiceError(
                stage="input",
                detail="No script text provided.",
                hint="Pass TEXT or `--text-file <path>`.",
            )
        factory = _build_factory(config, api_key)
        outcome = factory.create_tts_chain().run(script_text, voice)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_bytes(outcome.audio)
    except Exception as exc:
        exit_with_command_error("synthesize", exc)

    typer.echo(f"Provider: {outcome.provider.value}")
    echo_provider_attempts(outcome.attempts)
    typer.echo(f"Audio: {out}")


@app.command("voices")
def voices_command(
    config: ConfigOption = None,
    api_key: ApiKeyOption = None,
) -> None:
    """List selectable voices for the configured providers."""

    try:
        voices = _build_factory(config, api_key).create_voice_catalog().list_voices()
    except Exception as exc:
        exit_with_command_error("voices", exc)

    echo_voice_list(voices)


@app.command("publish-scheduled")
def publish_scheduled_command(config: ConfigOption = None) -> None:
    """Publish blog posts whose scheduled time has passed (run daily from cron)."""

    try:
        factory = ProviderFactory(_load_config(config), run_logger=RunLogger())
        published = factory.create_blog_library().publish_due()
    except Exception as exc:
        exit_with_command_error("publish-scheduled", exc)

    typer.echo(f"Published posts: {len(published)}")
    for entry in published:
        typer.echo(f"  {entry.slug} ({entry.content_id})")


def _validate_provider(provider: str) -> str:
    """Normalize a provider argument or exit with the supported list."""

    normalized = provider.strip().lower()
    if normalized not in SUPPORTED_CREDENTIAL_PROVIDERS:
        exit_with_command_error(
            "credentials",
            ServiceError(
                stage="credentials",
                detail=f"Unsupported provider `{provider}`.",
                hint=f"Use one of: {', '.join(SUPPORTED_CREDENTIAL_PROVIDERS)}.",
            ),
        )
    return normalized


@credentials_app.callback(invoke_without_command=True)
def credentials_status(ctx: typer.Context) -> None:
    """Show secure storage availability and which provider keys are stored."""

    if ctx.invoked_subcommand is not None:
        return
    credential_store = create_credential_store()
    available = credential_store.is_available()
    typer.echo(f"Secure credential storage: {'available' if available else 'unavailable'}")
    for provider in SUPPORTED_CREDENTIAL_PROVIDERS:
        stored = available and credential_store.get_api_key(provider) is not None
        typer.echo(f"Stored {provider} API key: {'present' if stored else 'not set'}")


@credentials_app.command("set")
def credentials_set_command(
    provider: Annotated[str, typer.Argument(help="Provider id, e.g. `elevenlabs`.")],
) -> None:
    """Prompt for a provider API key with hidden input and store it securely."""

    normalized_provider = _validate_provider(provider)
    prompted_api_key = normalize_optional_string(
        typer.prompt(
            f"{normalized_provider} API key (hidden input)",
            default="",
            hide_input=True,
            show_default=False,
        )
    )
    if prompted_api_key is None:
        exit_with_command_error(
            "credentials",
            ServiceError(
                stage="credentials",
                detail="No API key entered.",
                hint="Provide a non-empty API key.",
            ),
        )
    try:
        create_credential_store().set_api_key(normalized_provider, prompted_api_key)
    except Exception as exc:
        exit_with_command_error(
            "credentials",
            ServiceError(
                stage="credentials",
                detail=f"Failed to store API key securely: {exc}",
                hint="Install and configure a keyring backend and retry.",
            ),
        )
    typer.echo(f"{normalized_provider} API key stored in secure credential storage.")


@credentials_app.command("clear")
def credentials_clear_command(
    provider: Annotated[str, typer.Argument(help="Provider id, e.g. `elevenlabs`.")],
) -> None:
    """Remove a stored provider API key."""

    normalized_provider = _validate_provider(provider)
    if create_credential_store().clear_api_key(normalized_provider):
        typer.echo(f"Stored {normalized_provider} API key cleared from secure credential storage.")
    else:
        typer.echo(f"No stored {normalized_provider} API key found in secure credential storage.")


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
