"""Tests for the persisted activity store."""
from __future__ import annotations

import json
import re
import threading
from datetime import datetime, timedelta, timezone

import pytest

import wellbeing_tracker.services.activity_store as activity_store_module
from wellbeing_tracker.errors import InvalidLogError, StorageVersionError
from wellbeing_tracker.models import ActivityType, Exercise, TrainingDetails
from wellbeing_tracker.services import DEFAULT_STORAGE_KEY, ActivityStore


def test_add_log_appends_with_fresh_id(store, training_log) -> None:
    first = store.add_log(training_log())
    before = {log.id for log in store.logs}

    added = store.add_log(training_log(duration=45))

    assert len(store) == 2
    assert added.id not in before
    assert re.fullmatch(r"\d+-[0-9a-z]{9}", added.id)
    assert store.logs == [first, added]


def test_add_log_does_not_modify_candidate(store, training_log) -> None:
    candidate = training_log()
    candidate.id = "client-chosen"

    added = store.add_log(candidate)

    assert candidate.id == "client-chosen"
    assert added.id != "client-chosen"


def test_add_log_keeps_insertion_order(store, training_log) -> None:
    later = store.add_log(training_log(date=datetime(2024, 3, 1)))
    earlier = store.add_log(training_log(date=datetime(2024, 1, 1)))

    assert [log.id for log in store.logs] == [later.id, earlier.id]


def test_add_log_regenerates_colliding_id(store, training_log, monkeypatch) -> None:
    ids = iter(["1-aaaaaaaaa", "1-aaaaaaaaa", "2-bbbbbbbbb"])
    monkeypatch.setattr(activity_store_module, "generate_log_id", lambda: next(ids))

    store.add_log(training_log())
    second = store.add_log(training_log())

    assert second.id == "2-bbbbbbbbb"


def test_training_without_exercises_is_rejected(store, storage, training_log) -> None:
    store.add_log(training_log())
    snapshot = storage.read(DEFAULT_STORAGE_KEY)

    with pytest.raises(InvalidLogError) as excinfo:
        store.add_log(training_log(exercises=[]))

    assert "details.exercises" in excinfo.value.fields
    assert len(store) == 1
    assert storage.read(DEFAULT_STORAGE_KEY) == snapshot


def test_stretching_without_poses_is_rejected(store, stretching_log) -> None:
    with pytest.raises(InvalidLogError) as excinfo:
        store.add_log(stretching_log(poses=[]))

    assert "details.poses" in excinfo.value.fields
    assert store.logs == []


@pytest.mark.parametrize("duration", [0, -5])
def test_meditation_needs_positive_duration(store, storage, meditation_log, duration) -> None:
    with pytest.raises(InvalidLogError) as excinfo:
        store.add_log(meditation_log(duration=duration))

    assert "details.duration" in excinfo.value.fields
    assert store.logs == []
    assert storage.read(DEFAULT_STORAGE_KEY) is None


def test_log_without_date_is_rejected(store, training_log) -> None:
    with pytest.raises(InvalidLogError) as excinfo:
        store.add_log(training_log(date=None))

    assert "date" in excinfo.value.fields


def test_mismatched_details_are_rejected(store, meditation_log) -> None:
    candidate = meditation_log()
    candidate.details = TrainingDetails(exercises=[Exercise(name="Row", sets=1, reps=1)], duration=10)

    with pytest.raises(InvalidLogError) as excinfo:
        store.add_log(candidate)

    assert "details" in excinfo.value.fields


def test_remove_log_is_idempotent(store, training_log, meditation_log) -> None:
    keep = store.add_log(meditation_log())
    doomed = store.add_log(training_log())

    assert store.remove_log(doomed.id) is True
    after_first = store.logs
    assert store.remove_log(doomed.id) is False
    assert store.logs == after_first == [keep]


def test_remove_missing_log_does_not_write(store, storage) -> None:
    assert store.remove_log("no-such-id") is False
    assert storage.read(DEFAULT_STORAGE_KEY) is None


def test_update_log_merges_fields(store, training_log) -> None:
    log = store.add_log(training_log(notes="before"))

    updated = store.update_log(log.id, {"notes": "after", "date": datetime(2024, 2, 2)})

    assert updated.id == log.id
    assert updated.notes == "after"
    assert updated.date == datetime(2024, 2, 2)
    assert updated.details == log.details
    assert store.get_log(log.id) == updated


def test_update_missing_log_is_noop(store, storage) -> None:
    assert store.update_log("no-such-id", {"notes": "x"}) is None
    assert store.logs == []
    assert storage.read(DEFAULT_STORAGE_KEY) is None


def test_update_log_revalidates_merged_log(store, training_log) -> None:
    log = store.add_log(training_log())

    with pytest.raises(InvalidLogError):
        store.update_log(log.id, {"details": TrainingDetails(exercises=[], duration=30)})

    assert store.get_log(log.id) == log


def test_update_log_rejects_type_and_id_changes(store, training_log) -> None:
    log = store.add_log(training_log())

    with pytest.raises(InvalidLogError):
        store.update_log(log.id, {"activity_type": ActivityType.MEDITATION})
    with pytest.raises(InvalidLogError):
        store.update_log(log.id, {"id": "other"})
    with pytest.raises(InvalidLogError):
        store.update_log(log.id, {"colour": "blue"})

    assert store.get_log(log.id) == log


def test_every_mutation_persists_snapshot(store, storage, training_log, meditation_log) -> None:
    training = store.add_log(training_log())
    store.add_log(meditation_log())
    store.update_log(training.id, {"notes": "heavy day"})

    reloaded = ActivityStore.open(storage)

    assert reloaded.logs == store.logs
    assert reloaded.get_log(training.id).notes == "heavy day"


def test_autosave_disabled_defers_writes(storage, training_log) -> None:
    with ActivityStore.open(storage, autosave=False) as store:
        store.add_log(training_log())
        assert storage.read(DEFAULT_STORAGE_KEY) is None

    payload = json.loads(storage.read(DEFAULT_STORAGE_KEY))
    assert len(payload["logs"]) == 1


def test_store_uses_its_own_key(storage, training_log) -> None:
    store = ActivityStore.open(storage, key="someone-else")
    store.add_log(training_log())

    assert storage.read(DEFAULT_STORAGE_KEY) is None
    assert ActivityStore.open(storage).logs == []


def test_load_rejects_newer_schema_version(storage) -> None:
    storage.write(DEFAULT_STORAGE_KEY, json.dumps({"version": 99, "logs": []}))

    with pytest.raises(StorageVersionError):
        ActivityStore.open(storage)


def test_selectors_do_not_mutate(store, training_log, stretching_log, meditation_log) -> None:
    store.add_log(training_log(date=datetime(2024, 1, 5)))
    store.add_log(stretching_log(date=datetime(2024, 1, 9)))
    store.add_log(training_log(date=datetime(2024, 1, 7)))
    before = store.logs

    assert [log.date.day for log in store.logs_by_type(ActivityType.TRAINING)] == [5, 7]
    assert [log.date.day for log in store.history()] == [9, 7, 5]
    assert [log.date.day for log in store.history(ActivityType.TRAINING)] == [7, 5]
    assert store.stats().total_activities == 3
    assert store.logs == before


def test_single_breathing_meditation_scenario(store, meditation_log) -> None:
    store.add_log(meditation_log(duration=10))

    meditation = store.activity_stats(ActivityType.MEDITATION)
    assert meditation.total_sessions == 1
    assert meditation.total_duration == 10
    assert store.activity_stats(ActivityType.TRAINING).total_sessions == 0
    assert store.activity_stats(ActivityType.STRETCHING).total_sessions == 0


@pytest.mark.parametrize("exercises, duration", [
    ([Exercise(name="Squat", sets=0, reps=10)], 30),
    ([Exercise(name="Squat", sets=3, reps=0)], 30),
    ([Exercise(name="", sets=3, reps=10)], 30),
    ([Exercise(name="Squat", sets=3, reps=10)], -5),
])
def test_add_log_rejects_logs_storage_would_refuse(store, storage, training_log, exercises, duration) -> None:
    with pytest.raises(InvalidLogError):
        store.add_log(training_log(exercises=exercises, duration=duration))

    assert store.logs == []
    assert storage.read(DEFAULT_STORAGE_KEY) is None


def test_added_logs_survive_reopening(store, storage, training_log, stretching_log, meditation_log) -> None:
    store.add_log(training_log(exercises=[Exercise(name="Row", sets=1, reps=1)], duration=0))
    store.add_log(stretching_log())
    store.add_log(meditation_log(technique="counting", guided_session=False))

    assert ActivityStore.open(storage).logs == store.logs


def test_update_rejects_logs_storage_would_refuse(store, storage, training_log) -> None:
    log = store.add_log(training_log())
    snapshot = storage.read(DEFAULT_STORAGE_KEY)

    with pytest.raises(InvalidLogError):
        store.update_log(log.id, {"details": TrainingDetails(
            exercises=[Exercise(name="Squat", sets=0, reps=10)], duration=30,
        )})

    assert store.get_log(log.id) == log
    assert storage.read(DEFAULT_STORAGE_KEY) == snapshot


def test_aware_dates_are_stored_as_naive_utc(store, storage, training_log) -> None:
    plus_two = timezone(timedelta(hours=2))
    aware = store.add_log(training_log(date=datetime(2024, 1, 10, 9, 30, tzinfo=plus_two)))
    store.add_log(training_log(date=datetime(2024, 1, 1)))

    assert aware.date == datetime(2024, 1, 10, 7, 30)
    assert store.activity_stats(ActivityType.TRAINING).last_session == datetime(2024, 1, 10, 7, 30)
    assert [log.date.day for log in store.history()] == [10, 1]
    assert ActivityStore.open(storage).logs == store.logs


def test_update_converts_aware_date(store, training_log) -> None:
    log = store.add_log(training_log())

    updated = store.update_log(log.id, {"date": datetime(2024, 2, 1, 12, 0, tzinfo=timezone.utc)})

    assert updated.date == datetime(2024, 2, 1, 12, 0)
    assert updated.date.tzinfo is None


def test_candidate_changes_do_not_reach_store(store, training_log) -> None:
    candidate = training_log()
    added = store.add_log(candidate)

    candidate.details.exercises.append(Exercise(name="Curl", sets=0, reps=0))
    candidate.details.duration = -1

    stored = store.get_log(added.id)
    assert len(stored.details.exercises) == 1
    assert stored.details.duration == 30


def test_concurrent_removals_remove_the_right_logs(store, training_log) -> None:
    ids = [store.add_log(training_log()).id for _ in range(40)]
    doomed = ids[::2]
    barrier = threading.Barrier(len(doomed))

    def remove(log_id: str) -> None:
        barrier.wait()
        store.remove_log(log_id)

    threads = [threading.Thread(target=remove, args=(log_id,)) for log_id in doomed]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert [log.id for log in store.logs] == ids[1::2]
