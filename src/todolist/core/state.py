# src/todolist/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..tasks.task_database import TaskDatabase
from ..ui.task_list import TaskListModel


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules.
    settings: object

    db: TaskDatabase
    task_list: TaskListModel

    # Set once storage fails; the console stops accepting commands.
    blocked: bool = False
