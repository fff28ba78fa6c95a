# tests/conftest.py

from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path
from types import SimpleNamespace

import pytest
import pytest_asyncio

from todolist.core.state import AppState
from todolist.tasks.task_database import TaskDatabase
from todolist.tasks.task_store import TaskStore
from todolist.ui.task_list import TaskListModel

from .fakes import FakeClock, FlakyStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the console commands.

    We intentionally use a SimpleNamespace rather than reading the environment,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="todolist-test",
        log_level="DEBUG",
        console_enabled=False,
        date_format="%d/%m/%Y",
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "todolist.sqlite3",
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store(settings: SimpleNamespace, clock: FakeClock) -> TaskStore:
    return TaskStore(settings.tasks_db_path, clock=clock)


@pytest.fixture()
def flaky(store: TaskStore) -> FlakyStore:
    return FlakyStore(store)


@pytest_asyncio.fixture()
async def db(flaky: FlakyStore) -> AsyncIterator[TaskDatabase]:
    """
    TaskDatabase on the test's event loop.

    NOTE: backed by a real SQLite file; FlakyStore only adds a failure switch.
    """
    database = TaskDatabase(flaky)
    yield database
    await database.close()


@pytest_asyncio.fixture()
async def state(settings: SimpleNamespace, db: TaskDatabase) -> AsyncIterator[AppState]:
    task_list = TaskListModel(date_format=settings.date_format)
    task_list.bind(db)
    yield AppState(settings=settings, db=db, task_list=task_list)
    await task_list.unbind()

