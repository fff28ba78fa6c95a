# src/todolist/ui/task_list.py

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from dataclasses import dataclass

from ..errors import StorageUnavailable
from ..tasks.live_query import QuerySubscription
from ..tasks.task_database import TaskDatabase
from ..tasks.task_models import Priority, Task

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TaskRow:
    position: int
    task_id: int
    description: str
    priority: Priority
    color: str
    updated: str


class TaskListModel:
    """
    List state for the task screen.

    bind() follows db.get_all() and replaces the rows with every snapshot, so
    the list is never more than one completed write behind storage.
    Positions are 0-based, in display order (most recently updated first).
    """

    def __init__(self, *, date_format: str = "%d/%m/%Y") -> None:
        self.date_format = date_format
        self.error: StorageUnavailable | None = None

        self._tasks: list[Task] = []
        self._updates = 0
        self._changed = asyncio.Condition()
        self._sub: QuerySubscription[list[Task]] | None = None
        self._follower: asyncio.Task[None] | None = None

    def __len__(self) -> int:
        return len(self._tasks)

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks)

    @property
    def updates(self) -> int:
        """How many snapshots have been applied so far."""
        return self._updates

    @property
    def bound(self) -> bool:
        return self._sub is not None and not self._sub.closed

    def set_tasks(self, tasks: list[Task]) -> None:
        self._tasks = list(tasks)
        self._updates += 1

    def task_at(self, position: int) -> Task:
        if not 0 <= position < len(self._tasks):
            raise IndexError(f"No task at position {position} (list has {len(self._tasks)})")
        return self._tasks[position]

    def rows(self) -> list[TaskRow]:
        return [
            TaskRow(
                position=i,
                task_id=int(t.id or 0),
                description=t.description,
                priority=t.priority,
                color=t.priority.color,
                updated=t.updated_at_datetime().strftime(self.date_format),
            )
            for i, t in enumerate(self._tasks)
        ]

    # ---- binding to storage ----

    def bind(self, db: TaskDatabase) -> None:
        if self.bound:
            return
        self.error = None
        self._sub = db.get_all()
        self._follower = asyncio.create_task(self._follow(self._sub), name="task-list-follower")

    async def unbind(self) -> None:
        if self._sub is not None:
            self._sub.close()
            self._sub = None
        if self._follower is not None:
            follower, self._follower = self._follower, None
            with contextlib.suppress(asyncio.CancelledError):
                await follower

    async def _follow(self, sub: QuerySubscription[list[Task]]) -> None:
        try:
            async for tasks in sub:
                logger.debug("Received %d task(s) from db", len(tasks))
                async with self._changed:
                    self.set_tasks(tasks)
                    self._changed.notify_all()
        except StorageUnavailable as e:
            logger.error("Task list lost its storage: %s", e)
            async with self._changed:
                self.error = e
                self._changed.notify_all()

    async def wait_until(self, predicate: Callable[[list[Task]], bool]) -> list[Task]:
        """Wait until the current rows satisfy `predicate` (or storage fails)."""
        async with self._changed:
            await self._changed.wait_for(lambda: self.error is not None or predicate(self._tasks))
        if self.error is not None:
            raise self.error
        return self.tasks

    def delete_at(self, db: TaskDatabase, position: int) -> asyncio.Future[bool]:
        """Swipe-to-delete: remove the task shown at `position`."""
        return db.delete(self.task_at(position))
