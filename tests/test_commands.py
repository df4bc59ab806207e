# tests/test_commands.py

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import pytest

from pocket_tasks.cli.commands import CommandRegistry, parse_due, registry
from pocket_tasks.core.errors import ValidationError

from .fakes import NOW


@pytest.mark.asyncio
async def test_command_registry_routes_and_aliases(state) -> None:
    reg = CommandRegistry()
    called = {"a": 0}

    async def handler(state, args):
        called["a"] += 1
        return "a:" + ",".join(args)

    reg.register("a", handler, "a", aliases=["alpha"])

    assert await reg.handle(state, "/a x y") == "a:x,y"
    assert await reg.handle(state, '/ALPHA "x y"') == "a:x y"
    assert called["a"] == 2


@pytest.mark.asyncio
async def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert await reg.handle(state, "hello") is None
    assert "Unknown command" in (await reg.handle(state, "/nope") or "")
    assert "Empty command" in (await reg.handle(state, "/") or "")


def test_parse_due() -> None:
    assert parse_due("+30", NOW) == NOW + timedelta(minutes=30)
    assert parse_due("+2h", NOW) == NOW + timedelta(hours=2)
    assert parse_due("+1d", NOW) == NOW + timedelta(days=1)
    assert parse_due("2024-06-10T12:00:00+00:00", NOW) == NOW
    with pytest.raises(ValidationError):
        parse_due("tomorrow", NOW)


@pytest.mark.asyncio
async def test_add_list_done_rm(state) -> None:
    out = await registry.handle(state, "/add Buy milk --due +1d --cat Home --prio high")
    assert out is not None and "reminder scheduled" in out

    (task,) = state.task_store.tasks
    assert task.title == "Buy milk"
    assert task.category == "Home"
    assert task.priority.value == "high"

    listing = await registry.handle(state, "/list Home")
    assert "Buy milk" in (listing or "")
    assert await registry.handle(state, "/list Work") == "No tasks found."

    assert "done" in (await registry.handle(state, f"/done {task.id}") or "")
    assert state.task_store.get(task.id).is_checked is True

    assert await registry.handle(state, f"/rm {task.id}") == f"Deleted task #{task.id}."
    assert state.task_store.tasks == ()


@pytest.mark.asyncio
async def test_errors_become_messages(state) -> None:
    assert "Invalid input" in (await registry.handle(state, "/add --cat Work") or "")
    assert "No such task" in (await registry.handle(state, "/done 42") or "")
    assert "Invalid input" in (await registry.handle(state, "/done abc") or "")


@pytest.mark.asyncio
async def test_find_and_cats(state) -> None:
    await registry.handle(state, "/add Write report --cat Work")
    await registry.handle(state, "/add Water plants --cat Home")

    found = await registry.handle(state, "/find REPORT")
    assert "Write report" in (found or "")
    assert "Water plants" not in (found or "")

    assert await registry.handle(state, "/cats") == "Categories: All, Home, Work"


@pytest.mark.asyncio
async def test_extras_commands(state, tmp_path: Path) -> None:
    await registry.handle(state, "/add Trip")
    (task,) = state.task_store.tasks

    assert "Location added" in (await registry.handle(state, f"/loc {task.id} 41.0082 28.9784") or "")
    assert "Voice note added" in (await registry.handle(state, f"/audio {task.id} /tmp/clip.m4a") or "")

    src = tmp_path / "ticket.pdf"
    src.write_bytes(b"pdf")
    out = await registry.handle(state, f'/attach {task.id} "{src}"')
    assert "Attached ticket.pdf (3 bytes)" in (out or "")

    updated = state.task_store.get(task.id)
    assert updated.location is not None and updated.location.latitude == pytest.approx(41.0082)
    assert updated.audio_note == "/tmp/clip.m4a"
    assert Path(updated.attached_file).read_bytes() == b"pdf"


@pytest.mark.asyncio
async def test_edit_command(state) -> None:
    await registry.handle(state, "/add Call bank --due +1h")
    (task,) = state.task_store.tasks

    out = await registry.handle(state, f"/edit {task.id} --title 'Call the bank' --prio low")

    assert "Call the bank" in (out or "")
    assert state.task_store.get(task.id).priority.value == "low"
