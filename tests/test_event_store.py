"""Tests for the event store: snapshot queries, mutations, notifications and persistence."""

from __future__ import annotations

import logging
import time
from datetime import date, datetime, timedelta, timezone

import pytest

from chatcal.data import EventRepository, SqliteEventBackend
from chatcal.domain import StoreState, parse_timestamp
from chatcal.errors import StorageUnavailableError
from chatcal.services import EventStore


def _seed(store: EventStore) -> None:
    store.create("Lunch", "2025-01-01T12:00:00", "2025-01-01T13:00:00")
    store.create("Weekly Team Sync Call", "2025-01-02T09:00:00", "2025-01-02T10:00:00", "Standup")
    store.create("Dentist", "2025-01-01T16:00:00", "2025-01-01T17:00:00")


async def test_reads_before_initialize_see_an_empty_store(backend) -> None:
    store = EventStore(EventRepository(backend=backend))
    assert store.state is StoreState.UNINITIALIZED
    assert store.get_all() == []
    assert store.get_by_id("missing") is None
    assert store.find_by_title_substring("x") == []


async def test_initialize_marks_store_ready(store) -> None:
    assert store.state is StoreState.READY
    assert store.get_all() == []


async def test_created_event_is_returned_by_id(store) -> None:
    created = store.create("Lunch", "2025-01-01T12:00:00", "2025-01-01T13:00:00", "Tacos")
    assert store.get_by_id(created.id) == created
    assert created.title == "Lunch"
    assert created.description == "Tacos"
    assert created.start_time == parse_timestamp("2025-01-01T12:00:00")
    assert created.start_time.tzinfo is not None


async def test_get_all_keeps_insertion_order(store) -> None:
    store.create("Late", "2025-03-01T18:00:00", "2025-03-01T19:00:00")
    store.create("Early", "2025-01-01T08:00:00", "2025-01-01T09:00:00")
    assert [event.title for event in store.get_all()] == ["Late", "Early"]


async def test_ids_are_unique_for_rapid_creates(store) -> None:
    events = [store.create(f"Event {i}", "2025-01-01T12:00:00", "2025-01-01T13:00:00") for i in range(50)]
    identifiers = [event.id for event in events]
    assert len(set(identifiers)) == 50
    assert [int(identifier) for identifier in identifiers] == sorted(int(identifier) for identifier in identifiers)


async def test_find_by_title_substring_is_case_insensitive(store) -> None:
    _seed(store)
    titles = [event.title for event in store.find_by_title_substring("TEAM sync")]
    assert titles == ["Weekly Team Sync Call"]
    expected = [event for event in store.get_all() if "n" in event.title.lower()]
    assert store.find_by_title_substring("N") == expected
    assert store.find_by_title_substring("nothing like this") == []


async def test_get_for_date_filters_on_local_start_day(store) -> None:
    _seed(store)
    assert [event.title for event in store.get_for_date(date(2025, 1, 1))] == ["Lunch", "Dentist"]
    assert [event.title for event in store.get_for_date(datetime(2025, 1, 2, 23, 30))] == ["Weekly Team Sync Call"]
    assert store.get_for_date(date(2025, 1, 3)) == []


async def test_get_for_date_follows_rescheduled_events(store) -> None:
    _seed(store)
    lunch = store.find_by_title_substring("lunch")[0]
    store.update_by_id(lunch.id, {"start_time": "2025-01-02T12:00:00"})
    assert [event.title for event in store.get_for_date(date(2025, 1, 1))] == ["Dentist"]
    assert [event.title for event in store.get_for_date(date(2025, 1, 2))] == ["Lunch", "Weekly Team Sync Call"]


async def test_update_by_id_changes_only_given_fields(store) -> None:
    created = store.create("Lunch", "2025-01-01T12:00:00", "2025-01-01T13:00:00", "Tacos")
    before = (created.start_time, created.end_time, created.description)

    updated = store.update_by_id(created.id, {"title": "Brunch"})

    assert updated is not None
    fetched = store.get_by_id(created.id)
    assert fetched.title == "Brunch"
    assert (fetched.start_time, fetched.end_time, fetched.description) == before
    assert fetched.id == created.id


async def test_update_by_id_rejects_unknown_fields(store) -> None:
    created = store.create("Lunch", "2025-01-01T12:00:00", "2025-01-01T13:00:00")
    with pytest.raises(TypeError):
        store.update_by_id(created.id, {"id": "other"})
    assert store.get_by_id(created.id).title == "Lunch"


async def test_update_by_id_rejects_invalid_values(store) -> None:
    created = store.create("Lunch", "2025-01-01T12:00:00", "2025-01-01T13:00:00", "Tacos")
    calls: list[int] = []
    store.subscribe(lambda: calls.append(1))

    invalid_changes = [
        {"title": None},
        {"title": "   "},
        {"title": 42},
        {"title": "Brunch", "start_time": None},
        {"end_time": None},
        {"description": 7},
    ]
    for changes in invalid_changes:
        with pytest.raises(ValueError):
            store.update_by_id(created.id, changes)

    fetched = store.get_by_id(created.id)
    assert fetched.title == "Lunch"
    assert fetched.start_time == parse_timestamp("2025-01-01T12:00:00")
    assert fetched.description == "Tacos"
    assert calls == []
    assert store.find_by_title_substring("lunch") == [fetched]


async def test_update_missing_event_returns_none(store) -> None:
    assert store.update_by_id("nope", {"title": "x"}) is None
    assert store.update_first_by_title_substring("nope", {"title": "x"}) is None


async def test_update_first_by_title_substring_targets_first_match(store) -> None:
    first = store.create("Team lunch", "2025-01-01T12:00:00", "2025-01-01T13:00:00")
    second = store.create("Lunch with Bob", "2025-01-02T12:00:00", "2025-01-02T13:00:00")

    store.update_first_by_title_substring("LUNCH", {"description": "Pizza"})

    assert store.get_by_id(first.id).description == "Pizza"
    assert store.get_by_id(second.id).description is None


async def test_delete_by_id_removes_event(store) -> None:
    created = store.create("Lunch", "2025-01-01T12:00:00", "2025-01-01T13:00:00")
    assert store.delete_by_id(created.id) is True
    assert store.get_by_id(created.id) is None
    assert created.id not in [event.id for event in store.get_all()]
    assert store.get_for_date(date(2025, 1, 1)) == []
    assert store.delete_by_id(created.id) is False


async def test_delete_first_by_title_substring(store) -> None:
    _seed(store)
    assert store.delete_first_by_title_substring("team sync") is True
    assert store.find_by_title_substring("team") == []
    assert store.delete_first_by_title_substring("team sync") is False


async def test_listeners_run_in_order_after_each_mutation(store) -> None:
    calls: list[str] = []
    store.subscribe(lambda: calls.append("first"))
    store.subscribe(lambda: calls.append("second"))

    created = store.create("Lunch", "2025-01-01T12:00:00", "2025-01-01T13:00:00")
    store.update_by_id(created.id, {"title": "Brunch"})
    store.delete_by_id(created.id)

    assert calls == ["first", "second"] * 3


async def test_failed_lookups_do_not_notify(store) -> None:
    calls: list[int] = []
    store.subscribe(lambda: calls.append(1))
    store.update_by_id("missing", {"title": "x"})
    store.delete_first_by_title_substring("missing")
    assert calls == []


async def test_listener_registered_twice_is_called_twice(store) -> None:
    calls: list[int] = []

    def listener() -> None:
        calls.append(1)

    store.subscribe(listener)
    store.subscribe(listener)
    store.create("Lunch", "2025-01-01T12:00:00", "2025-01-01T13:00:00")
    assert len(calls) == 2

    store.unsubscribe(listener)
    store.create("Dinner", "2025-01-01T19:00:00", "2025-01-01T20:00:00")
    assert len(calls) == 2


async def test_failing_listener_does_not_block_others(store, caplog) -> None:
    calls: list[str] = []

    def broken() -> None:
        raise RuntimeError("boom")

    store.subscribe(broken)
    store.subscribe(lambda: calls.append("ok"))

    with caplog.at_level(logging.ERROR):
        created = store.create("Lunch", "2025-01-01T12:00:00", "2025-01-01T13:00:00")

    assert calls == ["ok"]
    assert store.get_by_id(created.id) is created
    assert "listener" in caplog.text


async def test_initial_load_notifies_listeners(backend) -> None:
    store = EventStore(EventRepository(backend=backend))
    calls: list[int] = []
    store.subscribe(lambda: calls.append(1))
    await store.initialize()
    assert calls == [1]


async def test_mutations_survive_reopen(db_path) -> None:
    first_backend = SqliteEventBackend(db_path)
    store = EventStore(EventRepository(backend=first_backend))
    await store.initialize()
    kept = store.create("Lunch", "2025-01-01T12:00:00", "2025-01-01T13:00:00", "Tacos")
    renamed = store.create("Standup", "2025-01-02T09:00:00", "2025-01-02T09:15:00")
    dropped = store.create("Dentist", "2025-01-03T16:00:00", "2025-01-03T17:00:00")
    store.update_by_id(renamed.id, {"title": "Daily standup", "description": None})
    store.delete_by_id(dropped.id)
    await store.close()

    reopened = EventStore(EventRepository(backend=SqliteEventBackend(db_path)))
    await reopened.initialize()
    try:
        assert [event.title for event in reopened.get_all()] == ["Lunch", "Daily standup"]
        assert reopened.get_by_id(kept.id) == kept
        assert reopened.get_by_id(dropped.id) is None

        newest = reopened.create("Dinner", "2025-01-04T19:00:00", "2025-01-04T20:00:00")
        assert newest.id not in {kept.id, renamed.id}
        assert int(newest.id) > int(renamed.id)
    finally:
        await reopened.close()


async def test_persistence_failure_keeps_snapshot(store, caplog) -> None:
    await store.flush()
    await store._repository.backend.close()

    with caplog.at_level(logging.ERROR):
        created = store.create("Lunch", "2025-01-01T12:00:00", "2025-01-01T13:00:00")
        await store.flush()

    assert store.get_by_id(created.id) is created
    assert "Failed to persist" in caplog.text


async def test_corrupt_database_fails_initialize_and_closes_connection(db_path) -> None:
    db_path.write_bytes(b"this is not a sqlite database" * 100)
    backend = SqliteEventBackend(db_path)
    store = EventStore(EventRepository(backend=backend))

    with pytest.raises(StorageUnavailableError):
        await store.initialize()

    assert store.state is StoreState.FAILED
    assert not backend.is_open


async def test_unopenable_database_fails_initialize(tmp_path) -> None:
    store = EventStore(EventRepository(backend=SqliteEventBackend(tmp_path)))

    with pytest.raises(StorageUnavailableError):
        await store.initialize()

    assert store.state is StoreState.FAILED
    with pytest.raises(StorageUnavailableError):
        store.create("Lunch", "2025-01-01T12:00:00", "2025-01-01T13:00:00")


@pytest.fixture
def new_york_time(monkeypatch):
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    monkeypatch.setenv("TZ", "America/New_York")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


async def test_get_for_date_uses_local_calendar_day(new_york_time, store) -> None:
    # 23:30 in New York is 04:30 UTC on the next day
    late = store.create("Late show", "2025-01-01T23:30:00", "2025-01-02T01:00:00")
    # 02:00 UTC is 21:00 in New York on the previous day
    early_utc = store.create("Call Tokyo", "2025-01-02T02:00:00+00:00", "2025-01-02T03:00:00+00:00")

    assert late.start_time.utcoffset() == timedelta(hours=-5)
    assert store.get_for_date(date(2025, 1, 1)) == [late, early_utc]
    assert store.get_for_date(date(2025, 1, 2)) == []

    utc_query = datetime(2025, 1, 2, 3, 0, tzinfo=timezone.utc)
    assert store.get_for_date(utc_query) == [late, early_utc]
    tokyo_query = datetime(2025, 1, 2, 12, 0, tzinfo=timezone(timedelta(hours=9)))
    assert store.get_for_date(tokyo_query) == [late, early_utc]
    assert store.get_for_date(datetime(2025, 1, 2, 0, 30)) == []


def test_backend_connection_is_not_a_constructor_argument(db_path) -> None:
    backend = SqliteEventBackend(db_path)
    assert not backend.is_open
    assert "_db" not in repr(backend)
    with pytest.raises(TypeError):
        SqliteEventBackend(db_path, _db=None)
