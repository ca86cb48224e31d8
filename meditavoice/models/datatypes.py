"""Core datatypes shared across Meditavoice modules.

Responsibilities:
- Represent immutable records exchanged between synthesis, storage, and API layers.
- Provide explicit typing for JSON serialization at the HTTP boundary.

Key types:
- `TextChunk`, `ProviderAttempt`, `VoiceOption`, `GeneratedScript`,
  `MeditationRecord`, `ContentEntry`, and `Influencer`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True, slots=True)
class TextChunk:
    """A bounded substring of cleaned narration text.

    Attributes:
        index: 0-based position of the chunk in the source text.
        text: Chunk text content.
        char_start: Inclusive character offset in the source text.
        char_end: Exclusive character offset in the source text.
    """

    index: int
    text: str
    char_start: int
    char_end: int


@dataclass(frozen=True, slots=True)
class ProviderAttempt:
    """Outcome of one provider in a synthesis fallback run.

    Attributes:
        provider: Provider identifier (`elevenlabs`, `openai`, `groq`, `playai`).
        succeeded: Whether the provider returned audio.
        reason: Failure reason for unsuccessful attempts.
        audio_bytes: Size of returned audio for successful attempts.
    """

    provider: str
    succeeded: bool
    reason: str | None = None
    audio_bytes: int = 0


@dataclass(frozen=True, slots=True)
class VoiceOption:
    """One selectable voice in the catalog returned to clients."""

    id: str
    name: str

    def as_dict(self) -> dict[str, str]:
        """Return the JSON shape served by the voices endpoint."""

        return {"id": self.id, "name": self.name}


@dataclass(frozen=True, slots=True)
class GeneratedScript:
    """Meditation script text returned by the text-generation provider.

    Attributes:
        content: Script text as returned by the model.
        duration_seconds: Rough narration length estimate.
        model: Model identifier used for generation.
    """

    content: str
    duration_seconds: int
    model: str


@dataclass(slots=True)
class MeditationRecord:
    """Persisted meditation row."""

    id: int
    prompt: str
    content: str | None
    rating: int | None
    model: str | None
    created_at: datetime

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable view using API field names."""

        return {
            "id": self.id,
            "prompt": self.prompt,
            "content": self.content,
            "rating": self.rating,
            "model": self.model,
            "createdAt": self.created_at.isoformat(),
        }


@dataclass(slots=True)
class ContentEntry:
    """A content-library row used by the blog publishing pipeline.

    Attributes:
        content_id: Stable external identifier (`blog-<slug>-<ms>`).
        channel: Distribution channel, `blog` for scheduled posts.
        slug: Post slug used for lookups.
        status: `scheduled` or `posted`.
        payload: Decoded post body.
        scheduled_for: Publication time, when scheduled.
        generated_at: Row creation time.
    """

    content_id: str
    channel: str
    slug: str
    status: str
    payload: dict[str, Any] = field(default_factory=dict)
    scheduled_for: datetime | None = None
    generated_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class Influencer:
    """A referral partner with a unique uppercase code and commission share."""

    id: str
    name: str
    code: str
    commission_rate: float
    payout_method: str
    created_at: datetime | None = None
    has_password: bool = False

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable view using API field names."""

        return {
            "id": self.id,
            "name": self.name,
            "code": self.code,
            "commissionRate": self.commission_rate,
            "payoutMethod": self.payout_method,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "hasPassword": self.has_password,
        }
