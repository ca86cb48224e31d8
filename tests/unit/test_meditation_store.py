"""Unit tests for in-memory and SQL meditation stores."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
import time

import pytest

from meditavoice.errors import MeditationNotFoundError
from meditavoice.io.database import create_database_engine
from meditavoice.io.meditation_store import (
    InMemoryMeditationStore,
    MeditationStore,
    SqlMeditationStore,
)


@pytest.fixture(params=["memory", "sql"])
def store(request: pytest.FixtureRequest) -> MeditationStore:
    """Provide each store backend behind the shared interface."""

    if request.param == "memory":
        return InMemoryMeditationStore()
    return SqlMeditationStore(create_database_engine("sqlite://"))


def test_create_assigns_sequential_ids_and_get_returns_copy(store: MeditationStore) -> None:
    """Created records should be retrievable by id."""

    first = store.create(prompt="sleep", content="Close your eyes.", model="llama3-70b-8192")
    second = store.create(prompt="focus", content=None, model=None)

    assert second.id == first.id + 1
    loaded = store.get(first.id)
    assert loaded is not None
    assert loaded.prompt == "sleep"
    assert loaded.content == "Close your eyes."
    assert loaded.rating is None
    assert loaded.created_at.tzinfo is not None
    assert store.get(9999) is None


def test_list_orders_oldest_first(store: MeditationStore) -> None:
    """Listing should follow creation order."""

    ids = [store.create(prompt=f"p{index}", content="c", model=None).id for index in range(3)]

    assert [record.id for record in store.list()] == ids


def test_rate_validates_range_and_persists(store: MeditationStore) -> None:
    """Ratings must be 1-5 and are stored on the record."""

    record = store.create(prompt="p", content="c", model=None)

    assert store.rate(record.id, 5).rating == 5
    assert store.get(record.id).rating == 5  # type: ignore[union-attr]
    with pytest.raises(ValueError):
        store.rate(record.id, 6)
    with pytest.raises(ValueError):
        store.rate(record.id, True)


def test_update_and_rate_unknown_id_raise_not_found(store: MeditationStore) -> None:
    """Mutations on unknown ids should raise `MeditationNotFoundError`."""

    with pytest.raises(MeditationNotFoundError):
        store.rate(404, 3)
    with pytest.raises(MeditationNotFoundError):
        store.update_content(404, "text")


def test_update_content_and_delete(store: MeditationStore) -> None:
    """Content updates persist and deleted records disappear."""

    record = store.create(prompt="p", content="old", model=None)

    assert store.update_content(record.id, "new").content == "new"
    store.delete(record.id)
    store.delete(record.id)

    assert store.get(record.id) is None
    assert store.list() == []


def test_memory_store_returns_detached_copies() -> None:
    """Mutating a returned record should not change stored state."""

    store = InMemoryMeditationStore()
    record = store.create(prompt="p", content="c", model=None)
    record.content = "mutated"

    assert store.get(record.id).content == "c"  # type: ignore[union-attr]


def test_memory_store_orders_by_injected_clock() -> None:
    """The in-memory store should order by `created_at` from its clock."""

    start = datetime(2026, 1, 1, tzinfo=timezone.utc)
    ticks = iter([start + timedelta(minutes=5), start])
    store = InMemoryMeditationStore(clock=lambda: next(ticks))

    later = store.create(prompt="later", content="c", model=None)
    earlier = store.create(prompt="earlier", content="c", model=None)

    assert [record.id for record in store.list()] == [earlier.id, later.id]


def test_memory_store_assigns_unique_ids_under_concurrent_creates() -> None:
    """Concurrent request threads must never share an id or overwrite a record."""

    def slow_clock() -> datetime:
        time.sleep(0.01)
        return datetime.now(timezone.utc)

    store = InMemoryMeditationStore(clock=slow_clock)

    with ThreadPoolExecutor(max_workers=8) as pool:
        records = list(
            pool.map(
                lambda index: store.create(prompt=f"p{index}", content="c", model=None),
                range(8),
            )
        )

    assert sorted(record.id for record in records) == list(range(1, 9))
    assert len(store.list()) == 8
