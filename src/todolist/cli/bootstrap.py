# src/todolist/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- builds the single TaskDatabase for this process and wires it into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.state import AppState
from ..tasks.task_database import TaskDatabase
from ..tasks.task_store import TaskStore
from ..ui.task_list import TaskListModel

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Must be called from inside the running event loop: the database delivers
    its results there. If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    db = TaskDatabase(TaskStore(settings.tasks_db_path))
    task_list = TaskListModel(date_format=getattr(settings, "date_format", "%d/%m/%Y"))
    task_list.bind(db)

    logger.info("Task database opened at %s", settings.tasks_db_path)
    return AppState(settings=settings, db=db, task_list=task_list)


async def shutdown_state(state: AppState) -> None:
    """Detach views, let pending writes finish, close storage."""
    try:
        await state.task_list.unbind()
    except Exception:
        logger.exception("Failed to unbind task list.")

    await state.db.close()
