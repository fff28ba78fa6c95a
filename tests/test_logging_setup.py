# tests/test_logging_setup.py

from __future__ import annotations

import logging

from todolist.logging_setup import _ConsoleNoiseFilter


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


def test_console_filter_keeps_own_logs_and_errors_only() -> None:
    f = _ConsoleNoiseFilter()
    assert f.filter(_record("todolist.tasks.task_store", logging.DEBUG))
    assert f.filter(_record("todolist", logging.INFO))

    assert not f.filter(_record("py.warnings", logging.WARNING))
    assert not f.filter(_record("asyncio", logging.INFO))
    assert not f.filter(_record("todolistx", logging.INFO))

    assert f.filter(_record("py.warnings", logging.ERROR))
    assert f.filter(_record("asyncio", logging.ERROR))
