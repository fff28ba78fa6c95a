# tests/test_task_store.py

from __future__ import annotations

from pathlib import Path

import pytest

from todolist.errors import InvalidPriority, StorageUnavailable
from todolist.tasks.task_models import Priority, Task
from todolist.tasks.task_store import TaskStore

from .fakes import FakeClock


def test_insert_get_update_delete(tmp_path: Path) -> None:
    clock = FakeClock(now=1_000)
    store = TaskStore(tmp_path / "tasks.sqlite3", clock=clock)

    task_id = store.insert_task(Task(description="Buy milk", priority=Priority.MEDIUM))
    assert task_id > 0

    got = store.get_task(task_id)
    assert got is not None
    assert got.id == task_id
    assert got.description == "Buy milk"
    assert got.priority is Priority.MEDIUM
    assert got.updated_at == 1_000

    clock.advance(500)
    assert store.update_task(Task(id=task_id, description="Buy milk and eggs", priority=Priority.HIGH))
    got2 = store.get_task(task_id)
    assert got2 is not None
    assert got2.id == task_id
    assert got2.description == "Buy milk and eggs"
    assert got2.priority is Priority.HIGH
    assert got2.updated_at == 1_500

    assert store.delete_task(task_id) is True
    assert store.get_task(task_id) is None
    assert store.list_tasks() == []


def test_update_missing_id_is_noop(store: TaskStore) -> None:
    assert store.update_task(Task(id=999, description="ghost", priority=Priority.LOW)) is False
    assert store.update_task(Task(description="no id")) is False
    assert store.count_tasks() == 0


def test_delete_is_idempotent(store: TaskStore) -> None:
    task_id = store.insert_task(Task(description="once"))
    assert store.delete_task(task_id) is True
    assert store.delete_task(task_id) is False
    assert store.count_tasks() == 0


def test_list_orders_by_updated_at_desc(tmp_path: Path) -> None:
    store = TaskStore(tmp_path / "tasks.sqlite3", clock=FakeClock(script=[1, 2, 3]))
    a = store.insert_task(Task(description="A"))
    b = store.insert_task(Task(description="B"))
    assert [t.description for t in store.list_tasks()] == ["B", "A"]

    # Touching A moves it back to the top.
    store.update_task(Task(id=a, description="A2"))
    assert [t.id for t in store.list_tasks()] == [a, b]


def test_updated_at_strictly_increases_with_frozen_clock(store: TaskStore) -> None:
    # The fixture clock never moves on its own.
    task_id = store.insert_task(Task(description="x"))
    first = store.get_task(task_id)
    assert first is not None

    store.update_task(Task(id=task_id, description="y"))
    second = store.get_task(task_id)
    assert second is not None
    assert second.updated_at > first.updated_at

    other = store.insert_task(Task(description="z"))
    assert [t.id for t in store.list_tasks()] == [other, task_id]


def test_ids_are_not_reused_and_data_survives_reopen(tmp_path: Path) -> None:
    db = tmp_path / "tasks.sqlite3"
    store = TaskStore(db, clock=FakeClock(now=10))
    first = store.insert_task(Task(description="first"))
    store.delete_task(first)

    reopened = TaskStore(db, clock=FakeClock(now=5))
    second = reopened.insert_task(Task(description="second"))
    assert second > first

    got = reopened.get_task(second)
    assert got is not None
    # Clock went backwards across restarts; stamps still move forward.
    assert got.updated_at > 10


def test_returned_tasks_are_copies(store: TaskStore) -> None:
    task_id = store.insert_task(Task(description="original"))
    got = store.get_task(task_id)
    assert got is not None
    got.description = "mutated locally"

    again = store.get_task(task_id)
    assert again is not None
    assert again.description == "original"


def test_unopenable_path_raises_storage_unavailable(tmp_path: Path) -> None:
    # A directory where the database file should be.
    bad = tmp_path / "as_dir.sqlite3"
    bad.mkdir()
    with pytest.raises(StorageUnavailable):
        TaskStore(bad)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (1, Priority.HIGH),
        ("2", Priority.MEDIUM),
        ("low", Priority.LOW),
        (" High ", Priority.HIGH),
        (Priority.MEDIUM, Priority.MEDIUM),
    ],
)
def test_priority_parse(raw: object, expected: Priority) -> None:
    assert Priority.parse(raw) is expected


@pytest.mark.parametrize("raw", [0, 4, "urgent", "", None, True, 2.0, "²", "-1"])
def test_priority_parse_rejects_out_of_range(raw: object) -> None:
    with pytest.raises(InvalidPriority):
        Priority.parse(raw)


def test_priority_display_helpers() -> None:
    assert [p.label for p in Priority] == ["High", "Medium", "Low"]
    assert [p.color for p in Priority] == ["red", "orange", "yellow"]
