# tests/test_storage.py

import json
from datetime import datetime
from pathlib import Path

import pytest

from daykeeper.dates import DateKey
from daykeeper.errors import InvalidHour, NotFound, StorageFailure
from daykeeper.storage import TaskStore, group_by_hour, load_tasks


def _descriptions(tasks):
    return [(t.hour, t.description) for t in tasks]


def test_empty_store_returns_empty_lists(store: TaskStore, day: DateKey) -> None:
    assert store.tasks_for(day) == []
    assert store.tasks_for_range(day, 2) == [(day, []), (day.successor(1), [])]
    assert not store.path.exists()


def test_add_is_visible_and_pending(store: TaskStore, day: DateKey) -> None:
    task_id = store.add(day, 9, "write report")

    tasks = store.tasks_for(day)
    assert len(tasks) == 1
    assert tasks[0].id == task_id
    assert tasks[0].description == "write report"
    assert tasks[0].hour == 9
    assert tasks[0].done is False


def test_add_records_creation_time(store: TaskStore, day: DateKey, now: datetime) -> None:
    store.add(day, 9, "write report", now=now)
    store.add(day, 10, "no clock")

    created = {t.description: t.created_at for t in store.tasks_for(day)}
    assert created == {"write report": "2024-06-15T10:30:00", "no clock": ""}


def test_add_persists_before_returning(store: TaskStore, day: DateKey) -> None:
    store.add(day, 9, "write report")

    reopened = TaskStore(store.path)
    assert _descriptions(reopened.tasks_for(day)) == [(9, "write report")]

    raw = json.loads(store.path.read_text(encoding="utf-8"))
    assert raw["tasks"][0]["date"] == "2024-06-15"


def test_tasks_ordered_by_hour_then_index(store: TaskStore, day: DateKey) -> None:
    store.add(day, 14, "lunch review")
    store.add(day, 9, "standup")
    store.add(day.successor(1), 8, "other day")
    store.add(day, 9, "emails")

    assert _descriptions(store.tasks_for(day)) == [
        (9, "standup"),
        (9, "emails"),
        (14, "lunch review"),
    ]
    assert [t.description for t in store.slot(day, 9)] == ["standup", "emails"]


def test_add_rejects_bad_hour(store: TaskStore, day: DateKey) -> None:
    with pytest.raises(InvalidHour):
        store.add(day, 24, "too late")
    assert not store.path.exists()


def test_mark_completes_addressed_task(store: TaskStore, day: DateKey) -> None:
    store.add(day, 9, "standup")
    store.add(day, 9, "emails")

    store.mark(day, 9, 1)

    done = {t.description: t.done for t in store.tasks_for(day)}
    assert done == {"standup": False, "emails": True}


def test_mark_twice_stays_complete(store: TaskStore, day: DateKey) -> None:
    store.add(day, 9, "standup")
    store.mark(day, 9, 0)
    before = store.path.read_bytes()

    task = store.mark(day, 9, 0)

    assert task.done is True
    assert store.path.read_bytes() == before


@pytest.mark.parametrize("hour, index", [(10, 0), (9, 1), (9, 5)])
def test_mark_missing_task(store: TaskStore, day: DateKey, hour: int, index: int) -> None:
    store.add(day, 9, "standup")
    before = store.path.read_bytes()

    with pytest.raises(NotFound):
        store.mark(day, hour, index)
    assert store.path.read_bytes() == before


def test_change_moves_task_and_repacks(store: TaskStore, day: DateKey) -> None:
    first = store.add(day, 9, "standup")
    store.add(day, 9, "emails")
    store.add(day, 11, "review")
    store.mark(day, 9, 0)

    store.change(day, 9, 0, 11)

    old_slot = store.slot(day, 9)
    new_slot = store.slot(day, 11)
    assert [t.description for t in old_slot] == ["emails"]
    assert [t.description for t in new_slot] == ["review", "standup"]

    moved = new_slot[1]
    assert moved.id == first
    assert moved.done is True
    # the task left behind now answers to index 0
    store.mark(day, 9, 0)
    assert store.slot(day, 9)[0].done is True


def test_change_to_same_hour_moves_to_end(store: TaskStore, day: DateKey) -> None:
    store.add(day, 9, "standup")
    store.add(day, 9, "emails")

    store.change(day, 9, 0, 9)

    assert [t.description for t in store.slot(day, 9)] == ["emails", "standup"]


def test_change_missing_or_bad_hour(store: TaskStore, day: DateKey) -> None:
    store.add(day, 9, "standup")
    with pytest.raises(NotFound):
        store.change(day, 8, 0, 10)
    with pytest.raises(InvalidHour):
        store.change(day, 9, 0, 30)
    assert _descriptions(store.tasks_for(day)) == [(9, "standup")]


def test_tasks_for_range(store: TaskStore, day: DateKey) -> None:
    store.add(day.successor(1), 7, "gym")
    store.add(day, 9, "standup")
    store.add(day.successor(5), 7, "outside range")

    days = store.tasks_for_range(day, 3)

    assert [d for d, _ in days] == [day, day.successor(1), day.successor(2)]
    assert [_descriptions(tasks) for _, tasks in days] == [[(9, "standup")], [(7, "gym")], []]


def test_group_by_hour(store: TaskStore, day: DateKey) -> None:
    store.add(day, 9, "a")
    store.add(day, 12, "b")
    store.add(day, 9, "c")

    slots = group_by_hour(store.tasks_for(day))
    assert list(slots) == [9, 12]
    assert [t.description for t in slots[9]] == ["a", "c"]


def test_corrupt_file_is_a_storage_failure(tmp_path: Path, day: DateKey) -> None:
    path = tmp_path / "tasks.json"
    path.write_text("{not json", encoding="utf-8")
    store = TaskStore(path)

    with pytest.raises(StorageFailure):
        store.tasks_for(day)
    with pytest.raises(StorageFailure):
        store.add(day, 9, "standup")
    assert path.read_text(encoding="utf-8") == "{not json"


def test_malformed_task_is_a_storage_failure(tmp_path: Path) -> None:
    path = tmp_path / "tasks.json"
    path.write_text(json.dumps({"tasks": [{"date": "2024-06-15", "hour": 99}]}), encoding="utf-8")
    with pytest.raises(StorageFailure):
        load_tasks(path)


def test_write_failure_leaves_old_file(tmp_path: Path, day: DateKey, monkeypatch) -> None:
    store = TaskStore(tmp_path / "tasks.json")
    store.add(day, 9, "standup")
    before = store.path.read_bytes()

    def boom(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr("daykeeper.storage.os.replace", boom)
    with pytest.raises(StorageFailure):
        store.add(day, 10, "never saved")

    assert store.path.read_bytes() == before
    assert [p.name for p in tmp_path.iterdir()] == ["tasks.json"]


def test_git_history_commits_each_change(tmp_path: Path, day: DateKey, monkeypatch) -> None:
    calls = []
    monkeypatch.setattr("daykeeper.storage.commit_history",
                        lambda path, message: calls.append(message) or True)
    store = TaskStore(tmp_path / "tasks.json", git_history=True)

    store.add(day, 9, "standup")
    store.mark(day, 9, 0)
    store.mark(day, 9, 0)

    assert calls == ["add 15-06-24 9 standup", "mark 15-06-24 9.0"]
