# src/todolist/errors.py

from __future__ import annotations


class TodoError(Exception):
    """Base class for all todolist errors."""


class StorageUnavailable(TodoError):
    """
    The task database cannot be opened or a write could not be committed.

    Terminal: once raised, neither reads nor writes on the same database can be
    trusted. Recovery means opening a new TaskDatabase.
    """


class InvalidPriority(TodoError, ValueError):
    """A priority outside {1, 2, 3} was submitted from the form side."""

    def __init__(self, raw: object) -> None:
        super().__init__(f"Invalid priority: {raw!r} (expected high/medium/low or 1/2/3)")
        self.raw = raw
