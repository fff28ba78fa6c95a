# src/todolist/tasks/task_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import threading
import time
from collections.abc import Callable, Iterator
from pathlib import Path

from ..errors import StorageUnavailable
from .task_models import Priority, Task

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

Clock = Callable[[], int]


def _ms_now() -> int:
    return int(time.time() * 1000)


class TaskStore:
    """
    SQLite task store (synchronous).

    Single table, single-row statements only:
    - insert_task / update_task / delete_task
    - get_task / list_tasks / count_tasks

    Thread-safety:
    - each method opens its own SQLite connection
    - writes are serialized by an internal lock, so updated_at stamps
      are handed out in commit order

    Every sqlite3.Error is re-raised as StorageUnavailable.
    """

    def __init__(self, db_path: str | Path = "todolist.sqlite3", *, clock: Clock | None = None) -> None:
        self._db_path = Path(db_path)
        self._clock: Clock = clock or _ms_now
        self._write_lock = threading.Lock()
        self._last_stamp = 0

        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageUnavailable(f"Cannot create directory for {self._db_path}: {e}") from e

        self._ensure_schema()
        total = self.count_tasks()
        logger.info("TaskStore ready db=%s total=%s", self._db_path, total)

    @property
    def db_path(self) -> Path:
        return self._db_path

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    @contextlib.contextmanager
    def _connection(self, op: str) -> Iterator[sqlite3.Connection]:
        conn: sqlite3.Connection | None = None
        try:
            conn = self._get_conn()
            yield conn
        except sqlite3.Error as e:
            logger.error("TaskStore %s failed db=%s: %s", op, self._db_path, e)
            raise StorageUnavailable(f"{op} failed on {self._db_path}: {e}") from e
        finally:
            if conn is not None:
                conn.close()

    def _ensure_schema(self) -> None:
        with self._connection("open") as conn:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    description TEXT NOT NULL,
                    priority INTEGER NOT NULL,
                    updated_at INTEGER NOT NULL
                )
                """
            )
            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_updated ON tasks(updated_at)")
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS store_meta (
                    name TEXT PRIMARY KEY,
                    value INTEGER NOT NULL
                )
                """
            )

            (version,) = cur.execute("PRAGMA user_version").fetchone()
            if int(version) == 0:
                cur.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
            elif int(version) != SCHEMA_VERSION:
                # Schema evolution is handled outside this store.
                logger.warning(
                    "TaskStore schema version %s != %s db=%s", version, SCHEMA_VERSION, self._db_path
                )

            # The last handed-out stamp outlives the rows that carried it.
            (last,) = cur.execute(
                """
                SELECT MAX(
                    COALESCE((SELECT MAX(updated_at) FROM tasks), 0),
                    COALESCE((SELECT value FROM store_meta WHERE name = 'last_stamp'), 0)
                )
                """
            ).fetchone()
            self._last_stamp = int(last)

            conn.commit()

    def _next_stamp(self, conn: sqlite3.Connection) -> int:
        # Caller holds the write lock; the stamp commits with the caller's write.
        stamp = max(int(self._clock()), self._last_stamp + 1)
        conn.execute(
            """
            INSERT INTO store_meta(name, value) VALUES ('last_stamp', ?)
            ON CONFLICT(name) DO UPDATE SET value = excluded.value
            """,
            (stamp,),
        )
        self._last_stamp = stamp
        return stamp

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=int(row["id"]),
            description=str(row["description"] or ""),
            priority=Priority.from_db(row["priority"]),
            updated_at=int(row["updated_at"] or 0),
        )

    # ---- public API ----

    def count_tasks(self) -> int:
        with self._connection("count") as conn:
            (n,) = conn.execute("SELECT COUNT(*) FROM tasks").fetchone()
            return int(n)

    def insert_task(self, task: Task) -> int:
        """Persist a new row; any id carried by `task` is ignored."""
        with self._write_lock, self._connection("insert") as conn:
            now = self._next_stamp(conn)
            cur = conn.execute(
                "INSERT INTO tasks(description, priority, updated_at) VALUES (?, ?, ?)",
                (task.description, int(task.priority), now),
            )
            conn.commit()
            rowid = cur.lastrowid
            if rowid is None:
                raise StorageUnavailable("SQLite did not return lastrowid for tasks insert")
            task_id = int(rowid)
            logger.debug("Task added id=%s priority=%s updated_at=%s", task_id, int(task.priority), now)
            return task_id

    def update_task(self, task: Task) -> bool:
        """
        Overwrite description/priority of an existing row and restamp updated_at.

        Returns False (and changes nothing) when the id does not exist.
        """
        if task.id is None:
            return False

        with self._write_lock, self._connection("update") as conn:
            now = self._next_stamp(conn)
            cur = conn.execute(
                "UPDATE tasks SET description = ?, priority = ?, updated_at = ? WHERE id = ?",
                (task.description, int(task.priority), now, int(task.id)),
            )
            conn.commit()
            changed = cur.rowcount == 1
            logger.debug("Task update id=%s changed=%s", task.id, changed)
            return changed

    def delete_task(self, task_id: int) -> bool:
        """Idempotent: deleting a missing row returns False."""
        with self._write_lock, self._connection("delete") as conn:
            cur = conn.execute("DELETE FROM tasks WHERE id = ?", (int(task_id),))
            conn.commit()
            changed = cur.rowcount == 1
            logger.debug("Task delete id=%s changed=%s", task_id, changed)
            return changed

    def get_task(self, task_id: int) -> Task | None:
        with self._connection("get") as conn:
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (int(task_id),)).fetchone()
            return self._row_to_task(row) if row else None

    def list_tasks(self) -> list[Task]:
        """All tasks, most recently touched first (ties: newest id first)."""
        with self._connection("list") as conn:
            rows = conn.execute(
                """
                SELECT *
                FROM tasks
                ORDER BY updated_at DESC, id DESC
                """
            ).fetchall()
            return [self._row_to_task(r) for r in rows]
