"""Meditation script generation via Groq chat completions.

Responsibilities:
- Turn a user prompt into narration text with a rough duration estimate.
- List available generation models for the model picker.
"""

from __future__ import annotations

from ..clients.base import ProviderError
from ..clients.groq import GroqClient
from ..models.datatypes import GeneratedScript
from ..telemetry.logger import RunLogger
from .prompts import MEDITATION_SYSTEM_PROMPT, meditation_user_prompt


DEFAULT_GENERATION_MODEL = "llama3-70b-8192"
_CHARS_PER_SECOND = 15
MAX_STORED_CONTENT_CHARS = 10000


class MeditationScriptGenerator:
    """Generate meditation scripts with a Groq-hosted chat model."""

    def __init__(
        self,
        client: GroqClient,
        default_model: str = DEFAULT_GENERATION_MODEL,
        run_logger: RunLogger | None = None,
    ) -> None:
        """Initialize the generator with a Groq client and default model."""

        self.client = client
        self.default_model = default_model
        self.run_logger = run_logger or RunLogger()

    def generate(self, prompt: str, model: str | None = None) -> GeneratedScript:
        """Generate one script; provider failures propagate as `ProviderError`."""

        resolved_model = model or self.default_model
        self.run_logger.log_stage_start("generate", model=resolved_model, prompt_chars=len(prompt))
        try:
            content = self.client.chat_completion_text(
                model=resolved_model,
                system_prompt=MEDITATION_SYSTEM_PROMPT,
                user_prompt=meditation_user_prompt(prompt),
                temperature=0.7,
                max_tokens=2048,
            )
        except ProviderError as exc:
            self.run_logger.log_stage_failure(
                "generate", type(exc).__name__, failure_kind=exc.failure_kind
            )
            raise
        self.run_logger.log_stage_complete("generate", chars=len(content))
        return GeneratedScript(
            content=content,
            duration_seconds=estimate_duration_seconds(content),
            model=resolved_model,
        )

    def list_models(self) -> list[str]:
        """Return available model ids, or an empty list when listing fails."""

        try:
            return self.client.list_models()
        except ProviderError as exc:
            self.run_logger.log_stage_warning(
                "models", "listing_failed", failure_kind=exc.failure_kind
            )
            return []


def estimate_duration_seconds(content: str) -> int:
    """Estimate narration seconds from character count, rounding halves up."""

    return int(len(content) / _CHARS_PER_SECOND + 0.5)


def truncate_for_storage(content: str, max_chars: int = MAX_STORED_CONTENT_CHARS) -> str:
    """Cap stored script length, marking cut text with a trailing ellipsis."""

    if len(content) <= max_chars:
        return content
    return f"{content[: max_chars - 3]}..."
