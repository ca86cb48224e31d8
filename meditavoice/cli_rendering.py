"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
voice listings, and synthesis attempt summaries.
"""

from __future__ import annotations

from typing import Iterable, NoReturn

import typer

from .errors import ServiceError, SpeechSynthesisUnavailableError
from .models.datatypes import ProviderAttempt, VoiceOption


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, ServiceError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
        if isinstance(exc, SpeechSynthesisUnavailableError):
            echo_provider_attempts(exc.attempts, err=True)
    raise typer.Exit(code=1) from exc


def echo_provider_attempts(attempts: Iterable[ProviderAttempt], err: bool = False) -> None:
    """Print one line per provider attempt in chain order."""

    for attempt in attempts:
        if attempt.succeeded:
            typer.echo(f"  {attempt.provider}: ok ({attempt.audio_bytes} bytes)", err=err)
        else:
            typer.echo(f"  {attempt.provider}: failed ({attempt.reason})", err=err)


def echo_voice_list(voices: Iterable[VoiceOption]) -> None:
    """Print `id<TAB>name` rows in catalog order."""

    for voice in voices:
        typer.echo(f"{voice.id}\t{voice.name}")
