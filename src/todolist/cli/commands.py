# src/todolist/cli/commands.py

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import cast

from ..core.state import AppState
from ..errors import InvalidPriority
from ..tasks.task_models import Priority, Task
from ..ui.task_form import TaskForm

CommandEmitter = Callable[[str], None]
CommandResult = str | Awaitable[str]
CommandHandler2 = Callable[[AppState, list[str]], CommandResult]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], CommandResult]
CommandHandler = CommandHandler2 | CommandHandler3

# How long a command waits for the list to reflect its own write.
LIST_SYNC_TIMEOUT_S = 5.0

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            result = cast(CommandHandler3, handler)(state, args, emit)
        else:
            result = cast(CommandHandler2, handler)(state, args)

        if inspect.isawaitable(result):
            return await result
        return result

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _parse_position(state: AppState, raw: str) -> Task:
    """User positions are 1-based, as printed by /list."""
    try:
        pos = int(raw)
    except ValueError:
        raise IndexError(f"Not a list position: {raw!r}") from None
    return state.task_list.task_at(pos - 1)


def _split_priority(args: list[str]) -> tuple[Priority | None, list[str]]:
    """Leading "high"/"2"/... selects a priority; everything else is text."""
    if not args:
        return None, args
    try:
        return Priority.parse(args[0]), args[1:]
    except InvalidPriority:
        if args[0].isdecimal():
            raise
        return None, args


async def _await_list(state: AppState, predicate: Callable[[list[Task]], bool]) -> None:
    if not state.task_list.bound:
        return
    try:
        await asyncio.wait_for(state.task_list.wait_until(predicate), timeout=LIST_SYNC_TIMEOUT_S)
    except TimeoutError:
        logger.warning("Task list did not catch up within %.1fs", LIST_SYNC_TIMEOUT_S)


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_list(state: AppState, args: list[str]) -> str:
    model = state.task_list
    if model.error is not None:
        return f"Task storage is unavailable: {model.error}"
    if not len(model):
        return "No tasks yet. Add one with /add [high|medium|low] <text>."
    lines = [f"Tasks ({len(model)}):"]
    for row in model.rows():
        lines.append(
            f"{row.position + 1}. [P{int(row.priority)} {row.priority.label}] {row.description}"
            f"  ({row.updated}, #{row.task_id})"
        )
    return "\n".join(lines)


async def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <text>            -> new task, HIGH priority
    /add low <text>        -> new task with the given priority
    """
    priority, words = _split_priority(args)
    text = " ".join(words).strip()
    if not text:
        return "Usage: /add [high|medium|low] <text>"
    return await _add_task(state, text, priority)


async def quick_add(state: AppState, text: str) -> str:
    """Plain console text: stored as typed, default priority."""
    return await _add_task(state, text.strip(), None)


async def _add_task(state: AppState, text: str, priority: Priority | None) -> str:
    form = TaskForm(description=text)
    if priority is not None:
        form.select_priority(priority)

    new_id = await form.submit(state.db)
    await _await_list(state, lambda tasks: any(t.id == new_id for t in tasks))
    return f"Added task #{new_id} [{form.priority.label}]: {text}"


async def cmd_edit(state: AppState, args: list[str]) -> str:
    """
    /edit <pos> <text>            -> new description, same priority
    /edit <pos> <priority> [text] -> new priority (and optionally description)
    """
    if not args:
        return "Usage: /edit <pos> [high|medium|low] [text]"

    target = _parse_position(state, args[0])
    form = TaskForm(task_id=target.id)
    if not await form.load(state.db):
        return f"Task #{target.id} no longer exists."

    priority, words = _split_priority(args[1:])
    if priority is None and not words:
        return "Nothing to change. Usage: /edit <pos> [high|medium|low] [text]"
    if priority is not None:
        form.select_priority(priority)
    if words:
        form.description = " ".join(words).strip()

    changed = await form.submit(state.db)
    if not changed:
        return f"Task #{target.id} no longer exists."

    await _await_list(
        state,
        lambda tasks: any(
            t.id == target.id and t.description == form.description and t.priority == form.priority
            for t in tasks
        ),
    )
    return f"Updated task #{target.id} [{form.priority.label}]: {form.description}"


async def cmd_show(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /show <pos>"
    target = _parse_position(state, args[0])
    task = await state.db.get_by_id(int(target.id or 0)).first()
    if task is None:
        return f"Task #{target.id} no longer exists."
    date_format = getattr(state.settings, "date_format", "%d/%m/%Y")
    return (
        f"Task #{task.id}\n"
        f"  Description: {task.description}\n"
        f"  Priority: {int(task.priority)} ({task.priority.label}, {task.priority.color})\n"
        f"  Updated: {task.updated_at_datetime().strftime(date_format)}"
    )


async def cmd_delete(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /del <pos>"
    target = _parse_position(state, args[0])
    removed = await state.db.delete(target)
    if removed:
        await _await_list(state, lambda tasks: all(t.id != target.id for t in tasks))
        return f"Deleted task #{target.id}: {target.description}"
    return f"Task #{target.id} was already gone."


def cmd_status(state: AppState, args: list[str]) -> str:
    settings = state.settings
    storage = "UNAVAILABLE" if state.db.failure is not None else "OK"
    return (
        "Status:\n"
        f"  Database: {getattr(settings, 'tasks_db_path', '?')} ({storage})\n"
        f"  Tasks shown: {len(state.task_list)}\n"
        f"  Live queries: {state.db.live_count()}"
    )


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("list", cmd_list, help_text="Show tasks, most recently updated first.", aliases=["ls"])
registry.register("add", cmd_add, help_text="Add a task: /add [high|medium|low] <text>.", aliases=["new"])
registry.register("edit", cmd_edit, help_text="Edit a task: /edit <pos> [high|medium|low] [text].")
registry.register("show", cmd_show, help_text="Show one task: /show <pos>.")
registry.register("del", cmd_delete, help_text="Delete a task: /del <pos>.", aliases=["rm", "done"])
registry.register("status", cmd_status, help_text="Show database status.")


def describe_error(exc: BaseException) -> str:
    """User-facing text for errors raised by command handlers."""
    if isinstance(exc, InvalidPriority):
        return str(exc)
    if isinstance(exc, IndexError):
        return f"{exc}. Use /list to see positions."
    return "Internal error while handling a command."
