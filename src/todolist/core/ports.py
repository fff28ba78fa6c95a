# src/todolist/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The async database depends on a Protocol instead of the concrete SQLite store.
This keeps storage swappable and makes failure paths easy to fake in tests.
"""

from typing import Protocol

from ..tasks.task_models import Task


class TaskRepo(Protocol):
    """Synchronous single-row task storage. Implementations raise StorageUnavailable."""

    def insert_task(self, task: Task) -> int: ...
    def update_task(self, task: Task) -> bool: ...
    def delete_task(self, task_id: int) -> bool: ...
    def get_task(self, task_id: int) -> Task | None: ...
    def list_tasks(self) -> list[Task]: ...
    def count_tasks(self) -> int: ...
    def close(self) -> None: ...
