"""Unit tests for blog scheduling and publishing over the content library."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from meditavoice.content.blog import BlogPostLibrary, default_publish_time, validate_blog_post
from meditavoice.errors import InvalidBlogPostError
from meditavoice.io.database import create_database_engine


NOW = datetime(2026, 2, 10, 12, 0, tzinfo=timezone.utc)


def _post(slug: str, date: str = "2026-02-14") -> dict[str, object]:
    return {
        "slug": slug,
        "title": f"Post {slug}",
        "date": date,
        "category": "Mindfulness",
        "excerpt": "Short excerpt.",
        "content": ["Paragraph one.", "Paragraph two."],
    }


@pytest.fixture
def library() -> BlogPostLibrary:
    return BlogPostLibrary(create_database_engine("sqlite://"), clock=lambda: NOW)


def test_schedule_post_defaults_to_post_date_at_nine_utc(library: BlogPostLibrary) -> None:
    """Without `scheduled_for`, the post date at 09:00 UTC is used."""

    entry = library.schedule_post(_post("breath"))

    assert entry.status == "scheduled"
    assert entry.channel == "blog"
    assert entry.content_id == f"blog-breath-{int(NOW.timestamp() * 1000)}"
    assert entry.scheduled_for == datetime(2026, 2, 14, 9, 0, tzinfo=timezone.utc)
    assert entry.payload["content"] == ["Paragraph one.", "Paragraph two."]


def test_schedule_post_accepts_explicit_iso_timestamp(library: BlogPostLibrary) -> None:
    """An explicit `Z`-suffixed timestamp should be stored as UTC."""

    entry = library.schedule_post(_post("sleep"), "2026-03-01T18:30:00Z")

    assert entry.scheduled_for == datetime(2026, 3, 1, 18, 30, tzinfo=timezone.utc)


def test_unparsable_post_date_schedules_now() -> None:
    """An unparsable date should fall back to the current time."""

    assert default_publish_time("someday", clock=lambda: NOW) == NOW


@pytest.mark.parametrize("missing", ["slug", "title", "date", "category", "excerpt"])
def test_validate_rejects_missing_text_fields(missing: str) -> None:
    """Every required text field must be present and non-blank."""

    post = _post("x")
    post[missing] = "  "

    with pytest.raises(InvalidBlogPostError):
        validate_blog_post(post)


def test_validate_requires_content_list() -> None:
    """`content` must be a list of paragraphs."""

    post = _post("x")
    post["content"] = "not a list"

    with pytest.raises(InvalidBlogPostError):
        validate_blog_post(post)


def test_publish_due_only_flips_due_scheduled_posts(library: BlogPostLibrary) -> None:
    """Posts due at or before `now` become posted; future posts stay scheduled."""

    library.schedule_post(_post("due"), "2026-02-09T09:00:00Z")
    library.schedule_post(_post("exact"), "2026-02-10T12:00:00Z")
    library.schedule_post(_post("future"), "2026-02-20T09:00:00Z")

    published = library.publish_due(NOW)

    assert sorted(entry.slug for entry in published) == ["due", "exact"]
    assert all(entry.status == "posted" for entry in published)
    assert library.publish_due(NOW) == []
    assert library.get_published("future") is None


def test_list_published_is_newest_first(library: BlogPostLibrary) -> None:
    """Published posts should be ordered by scheduled time, newest first."""

    library.schedule_post(_post("older"), "2026-01-01T09:00:00Z")
    library.schedule_post(_post("newer"), "2026-02-01T09:00:00Z")
    library.publish_due(NOW)

    posts = library.list_published()

    assert [post["slug"] for post in posts] == ["newer", "older"]
    assert library.get_published("older")["title"] == "Post older"  # type: ignore[index]
