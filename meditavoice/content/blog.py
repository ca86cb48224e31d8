"""Scheduled blog publishing over the content library.

Responsibilities:
- Validate and schedule blog posts as `scheduled` content-library rows.
- Flip due posts to `posted` when the daily publish job runs.
- Serve published posts for the public blog listing.
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone
import json
from typing import Any, Callable, Mapping

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from ..errors import InvalidBlogPostError
from ..io.database import ContentLibraryRow, as_utc, utc_now
from ..models.datatypes import ContentEntry
from ..telemetry.logger import RunLogger


BLOG_CHANNEL = "blog"
STATUS_SCHEDULED = "scheduled"
STATUS_POSTED = "posted"
_REQUIRED_TEXT_FIELDS = ("slug", "title", "date", "category", "excerpt")
_DEFAULT_PUBLISH_TIME = time(9, 0, tzinfo=timezone.utc)


class BlogPostLibrary:
    """Blog post scheduling and publishing backed by `content_library`."""

    def __init__(
        self,
        engine: Engine,
        clock: Callable[[], datetime] = utc_now,
        run_logger: RunLogger | None = None,
    ) -> None:
        """Initialize the library with an engine whose schema already exists."""

        self._sessions = sessionmaker(bind=engine, expire_on_commit=False)
        self._clock = clock
        self.run_logger = run_logger or RunLogger()

    def schedule_post(
        self,
        post: Mapping[str, Any],
        scheduled_for: str | datetime | None = None,
    ) -> ContentEntry:
        """Validate `post` and insert it with status `scheduled`.

        When `scheduled_for` is omitted, the post date at 09:00 UTC is used,
        or the current time when the post date cannot be parsed.
        """

        normalized = validate_blog_post(post)
        if scheduled_for is None:
            publish_at = default_publish_time(normalized["date"], self._clock)
        else:
            publish_at = parse_timestamp(scheduled_for)

        now = self._clock()
        content_id = f"blog-{normalized['slug']}-{int(now.timestamp() * 1000)}"
        with self._sessions.begin() as session:
            row = ContentLibraryRow(
                content_id=content_id,
                channel=BLOG_CHANNEL,
                slug=normalized["slug"],
                content=json.dumps(normalized, ensure_ascii=False),
                status=STATUS_SCHEDULED,
                scheduled_for=publish_at,
                generated_at=now,
            )
            session.add(row)
            session.flush()
            entry = _to_entry(row)

        self.run_logger.log_event(
            "blog", "scheduled", content_id=content_id, scheduled_for=publish_at.isoformat()
        )
        return entry

    def publish_due(self, now: datetime | None = None) -> list[ContentEntry]:
        """Mark every scheduled blog row due at or before `now` as posted."""

        cutoff = as_utc(now) if now is not None else self._clock()
        with self._sessions.begin() as session:
            rows = session.scalars(
                select(ContentLibraryRow).where(
                    ContentLibraryRow.channel == BLOG_CHANNEL,
                    ContentLibraryRow.status == STATUS_SCHEDULED,
                    ContentLibraryRow.scheduled_for.is_not(None),
                    ContentLibraryRow.scheduled_for <= cutoff,
                )
            ).all()
            for row in rows:
                row.status = STATUS_POSTED
            published = [_to_entry(row) for row in rows]

        if published:
            self.run_logger.log_event("blog", "published", count=len(published))
        return published

    def list_published(self) -> list[dict[str, Any]]:
        """Return posted blog bodies, newest scheduled date first, undated last."""

        with self._sessions() as session:
            rows = session.scalars(
                select(ContentLibraryRow)
                .where(
                    ContentLibraryRow.channel == BLOG_CHANNEL,
                    ContentLibraryRow.status == STATUS_POSTED,
                )
                .order_by(ContentLibraryRow.generated_at.desc())
            ).all()
            entries = [_to_entry(row) for row in rows]

        dated = [entry for entry in entries if entry.scheduled_for is not None]
        undated = [entry for entry in entries if entry.scheduled_for is None]
        dated.sort(key=lambda entry: entry.scheduled_for, reverse=True)
        return [entry.payload for entry in (*dated, *undated)]

    def get_published(self, slug: str) -> dict[str, Any] | None:
        """Return one posted blog body by slug."""

        with self._sessions() as session:
            row = session.scalars(
                select(ContentLibraryRow)
                .where(
                    ContentLibraryRow.channel == BLOG_CHANNEL,
                    ContentLibraryRow.status == STATUS_POSTED,
                    ContentLibraryRow.slug == slug,
                )
                .limit(1)
            ).first()
            return _to_entry(row).payload if row is not None else None


def validate_blog_post(post: Mapping[str, Any]) -> dict[str, Any]:
    """Return the normalized post body or raise `InvalidBlogPostError`."""

    normalized: dict[str, Any] = {}
    for field_name in _REQUIRED_TEXT_FIELDS:
        value = post.get(field_name)
        if not isinstance(value, str) or not value.strip():
            raise InvalidBlogPostError(
                "Missing or invalid: slug, title, date, category, excerpt, content (array)"
            )
        normalized[field_name] = value.strip()
    content = post.get("content")
    if not isinstance(content, list):
        raise InvalidBlogPostError(
            "Missing or invalid: slug, title, date, category, excerpt, content (array)"
        )
    normalized["content"] = list(content)
    return normalized


def parse_timestamp(value: str | datetime) -> datetime:
    """Parse an ISO-8601 timestamp (a trailing `Z` is accepted) as UTC."""

    if isinstance(value, datetime):
        return as_utc(value)  # type: ignore[return-value]
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError as exc:
        raise InvalidBlogPostError(f"Invalid scheduled time `{value}`.") from exc
    return as_utc(parsed)  # type: ignore[return-value]


def default_publish_time(post_date: str, clock: Callable[[], datetime] = utc_now) -> datetime:
    """Return `post_date` at 09:00 UTC, or the current time when unparsable."""

    try:
        parsed = date.fromisoformat(post_date.strip()[:10])
    except ValueError:
        return clock()
    return datetime.combine(parsed, _DEFAULT_PUBLISH_TIME)


def _to_entry(row: ContentLibraryRow) -> ContentEntry:
    """Convert an ORM row into a detached entry with decoded payload."""

    try:
        payload = json.loads(row.content)
    except json.JSONDecodeError:
        payload = {}
    return ContentEntry(
        content_id=row.content_id,
        channel=row.channel,
        slug=row.slug or "",
        status=row.status,
        payload=payload if isinstance(payload, dict) else {},
        scheduled_for=as_utc(row.scheduled_for),
        generated_at=as_utc(row.generated_at),
    )
