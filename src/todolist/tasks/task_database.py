# src/todolist/tasks/task_database.py

from __future__ import annotations

"""
Async task database with live queries.

Two lanes:
- disk lane: a single worker thread that runs every store call, so writes are
  serialized and snapshot recomputation happens right after each commit
- main lane: the asyncio loop that owns the database; futures resolve there and
  snapshots are handed over with call_soon_threadsafe (FIFO, so per-subscription
  emissions follow commit order)

Writes are fire-and-forget: insert/update/delete schedule the work immediately
and return a future the caller may ignore or await.
"""

import asyncio
import logging
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, TypeVar

from ..core.ports import TaskRepo
from ..errors import StorageUnavailable
from .live_query import QuerySubscription
from .task_models import Task
from .task_store import TaskStore

logger = logging.getLogger(__name__)

R = TypeVar("R")


@dataclass(slots=True)
class _Binding:
    sub: QuerySubscription[Any]
    # None -> whole table (get_all), otherwise a single row (get_by_id).
    task_id: int | None
    compute: Callable[[TaskRepo], Any]

    def affected_by(self, task_id: int) -> bool:
        return self.task_id is None or self.task_id == task_id


class TaskDatabase:
    """
    The only entry point to task storage for the rest of the app.

    One instance per process, built by the composition root and passed around
    by reference.
    """

    def __init__(self, store: TaskRepo, *, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._store = store
        self._loop = loop or asyncio.get_running_loop()
        self._disk = ThreadPoolExecutor(max_workers=1, thread_name_prefix="todolist-disk")

        self._lock = threading.Lock()
        self._live: dict[QuerySubscription[Any], _Binding] = {}
        self._failure: StorageUnavailable | None = None
        self._closed = False

    @classmethod
    def open(cls, db_path: str | Path, *, loop: asyncio.AbstractEventLoop | None = None) -> TaskDatabase:
        return cls(TaskStore(db_path), loop=loop)

    @property
    def store(self) -> TaskRepo:
        return self._store

    @property
    def failure(self) -> StorageUnavailable | None:
        return self._failure

    def live_count(self) -> int:
        with self._lock:
            return len(self._live)

    # ---- commands (fire-and-forget) ----

    def insert(self, task: Task) -> asyncio.Future[int]:
        record = replace(task, id=None)

        def op() -> tuple[int, int | None]:
            new_id = self._store.insert_task(record)
            return new_id, new_id

        return self._submit_write("insert", op)

    def update(self, task: Task) -> asyncio.Future[bool]:
        if task.id is None:
            raise ValueError("update requires a task id")
        record = replace(task)
        task_id = int(task.id)

        def op() -> tuple[bool, int | None]:
            changed = self._store.update_task(record)
            return changed, (task_id if changed else None)

        return self._submit_write("update", op)

    def delete(self, task: Task) -> asyncio.Future[bool]:
        if task.id is None:
            raise ValueError("delete requires a task id")
        task_id = int(task.id)

        def op() -> tuple[bool, int | None]:
            changed = self._store.delete_task(task_id)
            return changed, (task_id if changed else None)

        return self._submit_write("delete", op)

    # ---- live queries ----

    def get_all(self) -> QuerySubscription[list[Task]]:
        """Every task, most recently updated first."""
        return self._subscribe("tasks:all", None, lambda store: store.list_tasks())

    def get_by_id(self, task_id: int) -> QuerySubscription[Task | None]:
        """The task with `task_id`, or None while it does not exist."""
        task_id = int(task_id)
        return self._subscribe(f"tasks:{task_id}", task_id, lambda store: store.get_task(task_id))

    # ---- lifecycle ----

    async def close(self) -> None:
        """
        Detach all subscriptions and stop the disk lane.

        Writes already scheduled run to completion before this returns.
        """
        if self._closed:
            return
        self._closed = True

        with self._lock:
            subs = list(self._live)
        for sub in subs:
            sub.close()

        await self._loop.run_in_executor(None, self._disk.shutdown, True)
        self._store.close()
        logger.info("TaskDatabase closed.")

    # ---- internals ----

    def _check_usable(self) -> None:
        if self._failure is not None:
            raise StorageUnavailable(f"task database is unavailable: {self._failure}")
        if self._closed:
            raise StorageUnavailable("task database is closed")

    def _submit_write(self, name: str, op: Callable[[], tuple[R, int | None]]) -> asyncio.Future[R]:
        self._check_usable()
        fut = self._loop.run_in_executor(self._disk, self._run_write, name, op)
        fut.add_done_callback(lambda f: self._log_write_result(name, f))
        return fut

    @staticmethod
    def _log_write_result(name: str, fut: asyncio.Future[Any]) -> None:
        if fut.cancelled():
            return
        exc = fut.exception()
        if exc is not None:
            logger.error("Task %s failed: %s", name, exc)

    def _run_write(self, name: str, op: Callable[[], tuple[R, int | None]]) -> R:
        # Disk lane.
        try:
            result, changed_id = op()
        except StorageUnavailable as e:
            self._fail_all(e)
            raise

        if changed_id is not None:
            with self._lock:
                affected = [b for b in self._live.values() if b.affected_by(changed_id)]
            self._refresh(affected)
        return result

    def _subscribe(
        self, name: str, task_id: int | None, compute: Callable[[TaskRepo], Any]
    ) -> QuerySubscription[Any]:
        self._check_usable()
        sub: QuerySubscription[Any] = QuerySubscription(name, on_detach=self._detach)
        binding = _Binding(sub=sub, task_id=task_id, compute=compute)
        self._disk.submit(self._attach, binding)
        return sub

    def _attach(self, binding: _Binding) -> None:
        # Disk lane: registering here orders the initial snapshot with respect to writes.
        with self._lock:
            if binding.sub.detached:
                return
            failure = self._failure
            if failure is None:
                self._live[binding.sub] = binding
        if failure is not None:
            self._to_main(binding.sub._fail, failure)
            return
        self._refresh([binding])

    def _detach(self, sub: QuerySubscription[Any]) -> None:
        with self._lock:
            self._live.pop(sub, None)

    def _refresh(self, bindings: list[_Binding]) -> None:
        for binding in bindings:
            try:
                snapshot = binding.compute(self._store)
            except StorageUnavailable as e:
                self._fail_all(e)
                return
            self._to_main(binding.sub._push, snapshot)

    def _fail_all(self, exc: StorageUnavailable) -> None:
        with self._lock:
            if self._failure is None:
                self._failure = exc
            bindings = list(self._live.values())
            self._live.clear()

        logger.error("Task storage unavailable, failing %d subscription(s): %s", len(bindings), exc)
        for binding in bindings:
            self._to_main(binding.sub._fail, exc)

    def _to_main(self, fn: Callable[..., None], *args: Any) -> None:
        try:
            self._loop.call_soon_threadsafe(fn, *args)
        except RuntimeError:
            # Loop already closed: nobody is left to consume the snapshot.
            logger.debug("Event loop closed; dropping delivery to %s", fn)
