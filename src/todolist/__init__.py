"""todolist: a small to-do list backed by SQLite with live queries."""

__version__ = "0.1.0"
