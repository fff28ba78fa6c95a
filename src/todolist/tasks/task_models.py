# src/todolist/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum

from ..errors import InvalidPriority


class Priority(IntEnum):
    """
    Task priority as persisted in the `priority` column.

    Lower value = more urgent.
    """

    HIGH = 1
    MEDIUM = 2
    LOW = 3

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @property
    def color(self) -> str:
        return _PRIORITY_COLORS[self]

    @classmethod
    def parse(cls, raw: object) -> Priority:
        """
        Validate user input ("high", "2", 3, Priority.LOW, ...).

        Raises InvalidPriority for anything outside {1, 2, 3}.
        """
        if isinstance(raw, Priority):
            return raw
        if isinstance(raw, bool):
            raise InvalidPriority(raw)
        if isinstance(raw, int):
            try:
                return cls(raw)
            except ValueError:
                raise InvalidPriority(raw) from None
        if isinstance(raw, str):
            s = raw.strip()
            if s.isdecimal():
                return cls.parse(int(s))
            try:
                return cls[s.upper()]
            except KeyError:
                raise InvalidPriority(raw) from None
        raise InvalidPriority(raw)

    @classmethod
    def from_db(cls, raw: int | None) -> Priority:
        # Rows are only ever written with valid values; fall back instead of crashing a list.
        if raw is None:
            return cls.HIGH
        try:
            return cls(int(raw))
        except ValueError:
            return cls.HIGH


_PRIORITY_COLORS = {
    Priority.HIGH: "red",
    Priority.MEDIUM: "orange",
    Priority.LOW: "yellow",
}


@dataclass(slots=True)
class Task:
    description: str
    priority: Priority = Priority.HIGH

    # Assigned by the store on insert.
    id: int | None = None
    # Epoch milliseconds, stamped by the store on every write.
    updated_at: int = 0

    def updated_at_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.updated_at / 1000.0)
