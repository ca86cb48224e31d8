"""Pydantic request bodies for the HTTP API.

Field names follow the camelCase JSON the web client already sends.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field, StrictInt, field_validator


class CreateMeditationRequest(BaseModel):
    prompt: str
    model: Optional[str] = None

    @field_validator("prompt")
    @classmethod
    def _prompt_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Prompt is required")
        return value


class RateMeditationRequest(BaseModel):
    rating: StrictInt = Field(ge=1, le=5)


class UpdateContentRequest(BaseModel):
    content: Optional[str] = None


class AudioRequest(BaseModel):
    """Inline synthesis request; `duration` is echoed back to the player."""

    text: Optional[str] = None
    voiceId: Optional[str] = None
    duration: Optional[float] = None


class SaveAudioRequest(BaseModel):
    text: Optional[str] = None
    voiceId: Optional[str] = None
    filename: Optional[str] = None


class SaveAudioFileRequest(BaseModel):
    audioData: Optional[str] = None
    filename: Optional[str] = None


class DownloadRequest(BaseModel):
    content: Optional[str] = None
    title: Optional[str] = None


class CheckoutRequest(BaseModel):
    amount: Any = None
    successUrl: Optional[str] = None
    cancelUrl: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class ScheduleBlogPostRequest(BaseModel):
    """Blog post body plus an optional ISO-8601 `scheduledFor` timestamp."""

    slug: Optional[str] = None
    title: Optional[str] = None
    date: Optional[str] = None
    category: Optional[str] = None
    excerpt: Optional[str] = None
    content: Any = None
    scheduledFor: Optional[str] = None

    def post_body(self) -> dict[str, Any]:
        """Return the stored post fields without the scheduling hint."""

        return {
            "slug": self.slug,
            "title": self.title,
            "date": self.date,
            "category": self.category,
            "excerpt": self.excerpt,
            "content": self.content,
        }


class CreateInfluencerRequest(BaseModel):
    name: Optional[str] = None
    code: Optional[str] = None
    commissionRate: Any = None
    payoutMethod: Optional[str] = None
    password: Optional[str] = None


class SetInfluencerPasswordRequest(BaseModel):
    influencerId: Optional[str] = None
    password: Optional[str] = None


class TrackReferralRequest(BaseModel):
    """Referral click sent by the landing page; extra client fields are ignored."""

    referral_code: Optional[str] = None
    referral_url: Optional[str] = None
    user_agent: Optional[str] = None
