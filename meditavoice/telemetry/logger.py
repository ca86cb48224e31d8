"""Structured service logging utilities.

Responsibilities:
- Emit concise, deterministic `key=value` event lines through `loguru`.
- Keep secrets and raw payloads out of log context.
"""

from __future__ import annotations

import json
import sys
from typing import TextIO

from loguru import logger


_SAFE_TOKEN_CHARACTERS = frozenset("-_.:/")


def configure_logging(sink: TextIO | None = None, level: str = "INFO") -> None:
    """Replace loguru handlers with one plain-message sink."""

    logger.remove()
    logger.add(sink or sys.stderr, format="{message}", level=level, colorize=False)


def _format_context_value(value: object) -> str:
    """Render a context value as a bare token, or a JSON string when it has spaces."""

    raw = str(value).strip()
    if not raw:
        return "none"
    if all(character.isalnum() or character in _SAFE_TOKEN_CHARACTERS for character in raw):
        return raw
    return json.dumps(raw, ensure_ascii=False)


def _format_context(context: dict[str, object]) -> str:
    """Serialize context key/value pairs in deterministic key order."""

    if not context:
        return ""
    tokens = [
        f"{key}={_format_context_value(context[key])}"
        for key in sorted(context.keys())
        if context[key] is not None
    ]
    return " " + " ".join(tokens) if tokens else ""


class RunLogger:
    """Emit deterministic stage logs for synthesis, generation, and API activity."""

    def _emit(self, level: str, event: str, stage: str, **context: object) -> None:
        """Emit one structured log line."""

        line = f"[phase] level={level} stage={stage} event={event}{_format_context(context)}"
        logger.log(level, line)

    def log_event(self, stage: str, event: str, **context: object) -> None:
        """Emit an informational event with optional context."""

        self._emit("INFO", event, stage, **context)

    def log_stage_start(self, stage: str, **context: object) -> None:
        """Emit a stage-start event."""

        self._emit("INFO", "start", stage, **context)

    def log_stage_complete(self, stage: str, **context: object) -> None:
        """Emit a stage-complete event."""

        self._emit("INFO", "complete", stage, **context)

    def log_stage_warning(self, stage: str, event: str, **context: object) -> None:
        """Emit a recoverable failure, such as a provider the chain will skip past."""

        self._emit("WARNING", event, stage, **context)

    def log_stage_failure(self, stage: str, error_type: str, **context: object) -> None:
        """Emit a stage-failure event without sensitive payload details."""

        self._emit("ERROR", "failure", stage, error_type=error_type, **context)
