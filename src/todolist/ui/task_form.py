# src/todolist/ui/task_form.py

from __future__ import annotations

"""
Add/edit form for a single task.

Create vs edit is decided only by the carried task id:
- task_id is None -> submit() inserts
- task_id is set  -> submit() updates that row

Editing pre-fills the form from a one-shot read of get_by_id (first snapshot,
then detach). Later changes to the row while the form is open are not
reflected.
"""

import asyncio
import logging
from dataclasses import dataclass

from ..errors import InvalidPriority
from ..tasks.task_database import TaskDatabase
from ..tasks.task_models import Priority, Task

logger = logging.getLogger(__name__)

# Radio group order: choice 1 -> HIGH, 2 -> MEDIUM, 3 -> LOW.
PRIORITY_CHOICES: tuple[Priority, ...] = (Priority.HIGH, Priority.MEDIUM, Priority.LOW)


def priority_from_choice(choice: int | None) -> Priority:
    """Map the selected radio position to a Priority (nothing selected -> HIGH)."""
    if choice is None:
        return Priority.HIGH
    if not 1 <= choice <= len(PRIORITY_CHOICES):
        raise InvalidPriority(choice)
    return PRIORITY_CHOICES[choice - 1]


def choice_for_priority(priority: Priority) -> int:
    return PRIORITY_CHOICES.index(priority) + 1


@dataclass(slots=True)
class TaskForm:
    task_id: int | None = None
    description: str = ""
    choice: int | None = None

    @property
    def is_edit(self) -> bool:
        return self.task_id is not None

    @property
    def priority(self) -> Priority:
        return priority_from_choice(self.choice)

    def select_priority(self, raw: object) -> None:
        """Select by user input ("low", "2", Priority.HIGH, ...). Raises InvalidPriority."""
        self.choice = choice_for_priority(Priority.parse(raw))

    def populate(self, task: Task) -> None:
        self.description = task.description
        self.choice = choice_for_priority(task.priority)

    async def load(self, db: TaskDatabase) -> bool:
        """
        Pre-fill from storage in edit mode.

        Returns False when there is nothing to load (create mode, or the row is gone).
        """
        if self.task_id is None:
            return False

        task = await db.get_by_id(self.task_id).first()
        if task is None:
            logger.info("Task id=%s not found, form left empty", self.task_id)
            return False

        logger.debug("Received task id=%s for editing", self.task_id)
        self.populate(task)
        return True

    def build_task(self) -> Task:
        return Task(description=self.description, priority=self.priority, id=self.task_id)

    def submit(self, db: TaskDatabase) -> asyncio.Future[int] | asyncio.Future[bool]:
        """
        Validate and send to the database (fire-and-forget).

        InvalidPriority is raised here and never reaches the store.
        """
        task = self.build_task()
        if task.id is None:
            return db.insert(task)
        return db.update(task)
