# src/todolist/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
import threading
from datetime import datetime

from ..cli.commands import describe_error, quick_add, registry as command_registry
from ..core.state import AppState
from ..errors import InvalidPriority, StorageUnavailable

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


async def _read_line(prompt: str) -> str:
    """
    Read one line without blocking the event loop.

    A daemon thread is used so a pending input() never holds up interpreter exit.
    """
    loop = asyncio.get_running_loop()
    fut: asyncio.Future[str] = loop.create_future()

    def _settle(value: str | None, exc: BaseException | None) -> None:
        if fut.done():
            return
        if exc is not None:
            fut.set_exception(exc)
        else:
            fut.set_result(value or "")

    def reader() -> None:
        try:
            line = input(prompt)
        except (EOFError, OSError) as e:
            loop.call_soon_threadsafe(_settle, None, e)
        else:
            loop.call_soon_threadsafe(_settle, line, None)

    threading.Thread(target=reader, name="console-input", daemon=True).start()
    return await fut


async def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started (db=%s).", getattr(state.settings, "tasks_db_path", "?"))
    _print_ts("[CONSOLE] Type a task to add it. Use /help for commands. Use /exit to quit.\n")

    while not state.blocked:
        try:
            user_input = (await _read_line(">>> ")).strip()
        except (EOFError, OSError):
            logger.info("Console input closed, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            if user_input.startswith("/"):
                response = await command_registry.handle(state, user_input, emit=_print_ts)
            else:
                response = await quick_add(state, user_input)
        except StorageUnavailable as e:
            logger.error("Storage failure while handling %r: %s", user_input, e)
            state.blocked = True
            response = f"[ERROR] Task storage is unavailable, nothing more can be saved: {e}"
        except (InvalidPriority, IndexError) as e:
            response = describe_error(e)
        except Exception:
            logger.exception("Command handler crashed.")
            response = describe_error(RuntimeError())

        if response is not None:
            _print_ts(response)

        if state.task_list.error is not None and not state.blocked:
            state.blocked = True
            _print_ts(f"[ERROR] Task storage is unavailable: {state.task_list.error}")

    logger.info("Console connector finished.")
