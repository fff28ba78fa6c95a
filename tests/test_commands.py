# tests/test_commands.py

from __future__ import annotations

import pytest

from todolist.cli.commands import CommandRegistry, registry
from todolist.core.state import AppState
from todolist.errors import InvalidPriority
from todolist.tasks.task_models import Priority


@pytest.mark.asyncio
async def test_command_registry_routes_2_and_3_params(state: AppState) -> None:
    reg = CommandRegistry()
    called = {"h2": 0, "h3": 0}
    notes: list[str] = []

    def h2(state, args):
        called["h2"] += 1
        return "h2"

    async def h3(state, args, emit):
        called["h3"] += 1
        if emit is not None:
            emit("note")
        return "h3:" + ",".join(args)

    reg.register("a", h2, "a")
    reg.register("b", h3, "b", aliases=["bee"])

    assert await reg.handle(state, "/a x") == "h2"
    assert await reg.handle(state, "/bee y z", emit=notes.append) == "h3:y,z"
    assert called == {"h2": 1, "h3": 1}
    assert notes == ["note"]


@pytest.mark.asyncio
async def test_command_registry_unknown_and_non_command(state: AppState) -> None:
    reg = CommandRegistry()
    assert await reg.handle(state, "hello") is None
    assert "Unknown command" in (await reg.handle(state, "/nope") or "")
    assert "Empty command" in (await reg.handle(state, "/") or "")


@pytest.mark.asyncio
async def test_add_edit_delete_through_commands(state: AppState) -> None:
    out = await registry.handle(state, "/add medium Buy milk")
    assert out is not None and out.startswith("Added task #")
    assert "[Medium]: Buy milk" in out

    listing = await registry.handle(state, "/list")
    assert listing is not None
    assert "1. [P2 Medium] Buy milk" in listing

    out = await registry.handle(state, "/edit 1 high Buy milk and eggs")
    assert out is not None and "[High]: Buy milk and eggs" in out
    (task,) = state.task_list.tasks
    assert task.description == "Buy milk and eggs"
    assert task.priority is Priority.HIGH

    shown = await registry.handle(state, "/show 1")
    assert shown is not None
    assert "Priority: 1 (High, red)" in shown

    out = await registry.handle(state, "/del 1")
    assert out == f"Deleted task #{task.id}: Buy milk and eggs"
    assert state.task_list.tasks == []
    assert "No tasks yet" in (await registry.handle(state, "/list") or "")


@pytest.mark.asyncio
async def test_add_defaults_to_high_and_edit_keeps_priority(state: AppState) -> None:
    await registry.handle(state, "/add Walk the dog")
    (task,) = state.task_list.tasks
    assert task.priority is Priority.HIGH

    await registry.handle(state, "/edit 1 low")
    await registry.handle(state, "/edit 1 Walk the dog twice")
    (task,) = state.task_list.tasks
    assert task.description == "Walk the dog twice"
    assert task.priority is Priority.LOW


@pytest.mark.asyncio
async def test_most_recent_first_in_listing(state: AppState) -> None:
    await registry.handle(state, "/add A")
    await registry.handle(state, "/add B")
    listing = await registry.handle(state, "/list") or ""
    assert listing.index("1. [P1 High] B") < listing.index("2. [P1 High] A")


@pytest.mark.asyncio
async def test_bad_input_is_rejected_before_storage(state: AppState) -> None:
    with pytest.raises(InvalidPriority):
        await registry.handle(state, "/add 7 something")
    with pytest.raises(IndexError):
        await registry.handle(state, "/del 3")
    assert "Usage" in (await registry.handle(state, "/add") or "")
    assert state.db.store.count_tasks() == 0


@pytest.mark.asyncio
async def test_status_reports_storage(state: AppState) -> None:
    await state.task_list.wait_until(lambda _: state.task_list.updates >= 1)
    out = await registry.handle(state, "/status") or ""
    assert "(OK)" in out
    assert "Live queries: 1" in out
