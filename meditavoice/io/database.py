"""SQLAlchemy schema and engine helpers for the relational store.

Tables:
- `meditations`: generated scripts with optional rating and model.
- `content_library`: marketing content rows, including scheduled blog posts.
- `influencers`, `influencer_dashboard_passwords`, `influencer_events`: referral
  partners, their hashed dashboard passwords, and tracked referral events.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Float, Integer, String, Text, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Mapped, declarative_base, mapped_column
from sqlalchemy.pool import StaticPool

Base = declarative_base()


def utc_now() -> datetime:
    """Return the current timezone-aware UTC time."""

    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes read back from backends that drop offsets."""

    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class MeditationRow(Base):
    """ORM mapping for the `meditations` table."""

    __tablename__ = "meditations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    prompt: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    rating: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    model: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )


class ContentLibraryRow(Base):
    """ORM mapping for the `content_library` table."""

    __tablename__ = "content_library"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    content_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    channel: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    slug: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    scheduled_for: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    generated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )


class InfluencerRow(Base):
    """ORM mapping for the `influencers` table."""

    __tablename__ = "influencers"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    code: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    commission_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    payout_method: Mapped[str] = mapped_column(String(32), nullable=False, default="stripe")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )


class InfluencerPasswordRow(Base):
    """ORM mapping for the `influencer_dashboard_passwords` table."""

    __tablename__ = "influencer_dashboard_passwords"

    influencer_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )


class InfluencerEventRow(Base):
    """ORM mapping for the `influencer_events` table; `amount` is in cents."""

    __tablename__ = "influencer_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    influencer_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    event_type: Mapped[str] = mapped_column(String(32), nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    referral_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    ip_address: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )


def create_database_engine(database_url: str) -> Engine:
    """Create an engine and ensure all tables exist.

    In-memory SQLite URLs share one connection so every session sees the same data.
    """

    if database_url.startswith("sqlite") and (
        database_url in {"sqlite://", "sqlite:///:memory:"} or "mode=memory" in database_url
    ):
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    elif database_url.startswith("sqlite"):
        engine = create_engine(database_url, connect_args={"check_same_thread": False})
    else:
        engine = create_engine(database_url, pool_pre_ping=True)
    Base.metadata.create_all(engine)
    return engine
