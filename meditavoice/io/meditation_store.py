"""Meditation record storage.

Responsibilities:
- Define the storage interface the HTTP layer depends on.
- Provide an in-memory store for development and tests, and a SQL store.

Key types:
- `MeditationStore`: interface for meditation persistence.
- `InMemoryMeditationStore`: process-local dictionary store.
- `SqlMeditationStore`: SQLAlchemy-backed store over the `meditations` table.
"""

from __future__ import annotations

from datetime import datetime
import threading
from typing import Callable

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from ..errors import MeditationNotFoundError
from ..models.datatypes import MeditationRecord
from .database import MeditationRow, as_utc, utc_now


MIN_RATING = 1
MAX_RATING = 5


class MeditationStore:
    """Interface for meditation persistence operations."""

    def create(self, *, prompt: str, content: str | None, model: str | None) -> MeditationRecord:
        """Persist a new meditation and return the stored record."""

        raise NotImplementedError

    def get(self, meditation_id: int) -> MeditationRecord | None:
        """Return one meditation, or `None` when the id is unknown."""

        raise NotImplementedError

    def list(self) -> list[MeditationRecord]:
        """Return all meditations ordered by creation time, oldest first."""

        raise NotImplementedError

    def rate(self, meditation_id: int, rating: int) -> MeditationRecord:
        """Set a 1-5 rating and return the updated record."""

        raise NotImplementedError

    def update_content(self, meditation_id: int, content: str) -> MeditationRecord:
        """Replace script content and return the updated record."""

        raise NotImplementedError

    def delete(self, meditation_id: int) -> None:
        """Delete a meditation; unknown ids are ignored."""

        raise NotImplementedError


def validate_rating(rating: int) -> int:
    """Return `rating` when it is an integer within 1-5, else raise `ValueError`."""

    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValueError("Rating must be an integer.")
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ValueError(f"Rating must be between {MIN_RATING} and {MAX_RATING}.")
    return rating


class InMemoryMeditationStore(MeditationStore):
    """Dictionary-backed store with sequential ids, safe across request threads."""

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        """Initialize an empty store with an injectable clock."""

        self._clock = clock
        self._records: dict[int, MeditationRecord] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def create(self, *, prompt: str, content: str | None, model: str | None) -> MeditationRecord:
        """Store a new record under the next sequential id."""

        with self._lock:
            record = MeditationRecord(
                id=self._next_id,
                prompt=prompt,
                content=content,
                rating=None,
                model=model,
                created_at=self._clock(),
            )
            self._next_id += 1
            self._records[record.id] = record
            return _copy(record)

    def get(self, meditation_id: int) -> MeditationRecord | None:
        """Return a copy of the stored record when present."""

        with self._lock:
            record = self._records.get(meditation_id)
            return _copy(record) if record is not None else None

    def list(self) -> list[MeditationRecord]:
        """Return copies ordered by creation time then id."""

        with self._lock:
            ordered = sorted(self._records.values(), key=lambda item: (item.created_at, item.id))
            return [_copy(record) for record in ordered]

    def rate(self, meditation_id: int, rating: int) -> MeditationRecord:
        """Update the stored rating."""

        validated = validate_rating(rating)
        with self._lock:
            record = self._require(meditation_id)
            record.rating = validated
            return _copy(record)

    def update_content(self, meditation_id: int, content: str) -> MeditationRecord:
        """Update the stored content."""

        with self._lock:
            record = self._require(meditation_id)
            record.content = content
            return _copy(record)

    def delete(self, meditation_id: int) -> None:
        """Remove the record when present."""

        with self._lock:
            self._records.pop(meditation_id, None)

    def _require(self, meditation_id: int) -> MeditationRecord:
        """Return the live record or raise `MeditationNotFoundError`; caller holds the lock."""

        record = self._records.get(meditation_id)
        if record is None:
            raise MeditationNotFoundError(meditation_id)
        return record


class SqlMeditationStore(MeditationStore):
    """SQLAlchemy-backed meditation store."""

    def __init__(self, engine: Engine) -> None:
        """Initialize the store with an engine whose schema already exists."""

        self._sessions = sessionmaker(bind=engine, expire_on_commit=False)

    def create(self, *, prompt: str, content: str | None, model: str | None) -> MeditationRecord:
        """Insert a row and return it with its generated id."""

        with self._sessions.begin() as session:
            row = MeditationRow(prompt=prompt, content=content, model=model)
            session.add(row)
            session.flush()
            return _to_record(row)

    def get(self, meditation_id: int) -> MeditationRecord | None:
        """Select one row by primary key."""

        with self._sessions() as session:
            row = session.get(MeditationRow, meditation_id)
            return _to_record(row) if row is not None else None

    def list(self) -> list[MeditationRecord]:
        """Select all rows ordered by `created_at` then id."""

        with self._sessions() as session:
            rows = session.scalars(
                select(MeditationRow).order_by(MeditationRow.created_at, MeditationRow.id)
            ).all()
            return [_to_record(row) for row in rows]

    def rate(self, meditation_id: int, rating: int) -> MeditationRecord:
        """Update the rating column."""

        validated = validate_rating(rating)
        with self._sessions.begin() as session:
            row = self._require(session, meditation_id)
            row.rating = validated
            return _to_record(row)

    def update_content(self, meditation_id: int, content: str) -> MeditationRecord:
        """Update the content column."""

        with self._sessions.begin() as session:
            row = self._require(session, meditation_id)
            row.content = content
            return _to_record(row)

    def delete(self, meditation_id: int) -> None:
        """Delete the row when present."""

        with self._sessions.begin() as session:
            row = session.get(MeditationRow, meditation_id)
            if row is not None:
                session.delete(row)

    @staticmethod
    def _require(session: Session, meditation_id: int) -> MeditationRow:
        """Load a row or raise `MeditationNotFoundError`."""

        row = session.get(MeditationRow, meditation_id)
        if row is None:
            raise MeditationNotFoundError(meditation_id)
        return row


def _to_record(row: MeditationRow) -> MeditationRecord:
    """Convert an ORM row into a detached record."""

    return MeditationRecord(
        id=row.id,
        prompt=row.prompt,
        content=row.content,
        rating=row.rating,
        model=row.model,
        created_at=as_utc(row.created_at) or utc_now(),
    )


def _copy(record: MeditationRecord) -> MeditationRecord:
    """Return a shallow copy so callers cannot mutate stored state."""

    return MeditationRecord(
        id=record.id,
        prompt=record.prompt,
        content=record.content,
        rating=record.rating,
        model=record.model,
        created_at=record.created_at,
    )
