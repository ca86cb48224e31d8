"""Domain exceptions for synthesis, storage, and CLI diagnostics."""

from __future__ import annotations

from typing import Sequence

from .models.datatypes import ProviderAttempt


class ServiceError(RuntimeError):
    """Raised when a specific service stage fails with an actionable hint."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped service error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint


class SpeechSynthesisUnavailableError(RuntimeError):
    """Raised when no TTS provider was eligible or every eligible provider failed."""

    def __init__(self, attempts: Sequence[ProviderAttempt] = ()) -> None:
        """Initialize the exhaustion error with the ordered provider attempts."""

        super().__init__("No TTS service available or all services failed")
        self.attempts = tuple(attempts)


class MeditationNotFoundError(LookupError):
    """Raised when a meditation record id does not exist in the store."""

    def __init__(self, meditation_id: int) -> None:
        """Initialize the error with the missing record id."""

        super().__init__(f"Meditation `{meditation_id}` not found.")
        self.meditation_id = meditation_id


class InvalidBlogPostError(ValueError):
    """Raised when a blog post payload is missing required fields."""


class InvalidInfluencerError(ValueError):
    """Raised when an influencer or referral payload fails validation."""


class InfluencerNotFoundError(LookupError):
    """Raised when an influencer id or referral code is unknown."""
