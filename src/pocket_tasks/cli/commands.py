# src/pocket_tasks/cli/commands.py

from __future__ import annotations

import logging
import re
import shlex
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta

from ..connectors.local_device import PathFilePicker
from ..core.errors import CapabilityDenied, NotFoundError, PersistenceError, ValidationError
from ..core.state import AppState
from ..tasks.task_filter import ALL_CATEGORIES
from ..tasks.task_models import Location, Priority, Task, TaskDraft, to_utc

CommandHandler = Callable[[AppState, list[str]], Awaitable[str]]

logger = logging.getLogger(__name__)

_RELATIVE_DUE = re.compile(r"^\+(\d+)([mhd]?)$")
_UNITS = {"": "minutes", "m": "minutes", "h": "hours", "d": "days"}


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

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

    def help_lines(self) -> list[str]:
        return [f"/{name} - {text}" for name, text in sorted(self._help.items())]

    async def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError as e:
            return f"Cannot parse command: {e}"
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            return await handler(state, args)
        except ValidationError as e:
            return f"Invalid input: {e}"
        except NotFoundError as e:
            return f"No such task (id={e.task_id})."
        except CapabilityDenied as e:
            return f"Not available: {e}"
        except PersistenceError as e:
            logger.error("Command /%s: %s", name, e)
            return "Saved in memory, but writing to disk failed. It will be retried on the next change."


registry = CommandRegistry()


# ---- parsing helpers ----


def parse_due(raw: str, now: datetime) -> datetime:
    """
    "+30" / "+30m" / "+2h" / "+1d" relative to now, or an ISO date/datetime
    in local time ("2024-06-10", "2024-06-10T18:00").
    """
    m = _RELATIVE_DUE.match(raw.strip())
    if m:
        amount, unit = int(m.group(1)), m.group(2)
        return now + timedelta(**{_UNITS[unit]: amount})
    try:
        return to_utc(datetime.fromisoformat(raw.strip()))
    except ValueError as e:
        raise ValidationError(f"bad due date {raw!r} (use +30m, +2h, +1d or YYYY-MM-DD[THH:MM])") from e


def parse_task_id(raw: str) -> int:
    try:
        return int(raw)
    except ValueError as e:
        raise ValidationError(f"bad task id {raw!r}") from e


def _parse_options(args: list[str], allowed: set[str]) -> tuple[list[str], dict[str, str]]:
    positional: list[str] = []
    opts: dict[str, str] = {}
    it = iter(args)
    for a in it:
        if a.startswith("--"):
            key = a[2:]
            if key not in allowed:
                raise ValidationError(f"unknown option {a}")
            value = next(it, None)
            if value is None:
                raise ValidationError(f"option {a} needs a value")
            opts[key] = value
        else:
            positional.append(a)
    return positional, opts


def _parse_priority(raw: str) -> Priority:
    try:
        return Priority(raw.strip().lower())
    except ValueError as e:
        raise ValidationError(f"priority must be low, medium or high (got {raw!r})") from e


def format_task(t: Task) -> str:
    box = "[x]" if t.is_checked else "[ ]"
    due = t.deadline.astimezone().strftime("%Y-%m-%d %H:%M")
    extras = []
    if t.notification_id:
        extras.append("reminder")
    if t.location:
        extras.append(f"@{t.location.latitude:.5f},{t.location.longitude:.5f}")
    if t.audio_note:
        extras.append("voice")
    if t.attached_file:
        extras.append("file")
    tail = f"  ({', '.join(extras)})" if extras else ""
    cat = t.category or "-"
    return f"{t.id}  {box} {t.priority.value:<6} {due}  {cat:<10} {t.title}{tail}"


def format_tasks(tasks: list[Task]) -> str:
    if not tasks:
        return "No tasks found."
    return "\n".join(format_task(t) for t in tasks)


# ---- handlers ----


async def cmd_help(state: AppState, args: list[str]) -> str:
    return "Available commands:\n  " + "\n  ".join(registry.help_lines())


async def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <title...> [--due +1d|YYYY-MM-DD] [--cat Work] [--prio high]
    """
    words, opts = _parse_options(args, {"due", "cat", "prio"})
    now = state.clock()
    deadline = parse_due(opts["due"], now) if "due" in opts else now
    draft = TaskDraft(
        title=" ".join(words),
        deadline=deadline,
        category=opts.get("cat", ""),
        priority=_parse_priority(opts["prio"]) if "prio" in opts else Priority.MEDIUM,
    )
    task = await state.task_store.add(draft)
    note = "reminder scheduled" if task.notification_id else "no reminder"
    return f"Added task #{task.id}: {task.title} ({note})"


async def cmd_list(state: AppState, args: list[str]) -> str:
    """/list [category]"""
    category = args[0] if args else ALL_CATEGORIES
    return format_tasks(list(state.task_store.filtered_view("", category)))


async def cmd_find(state: AppState, args: list[str]) -> str:
    """/find <text...> [--cat Work]"""
    words, opts = _parse_options(args, {"cat"})
    view = state.task_store.filtered_view(" ".join(words), opts.get("cat", ALL_CATEGORIES))
    return format_tasks(list(view))


async def cmd_cats(state: AppState, args: list[str]) -> str:
    cats = sorted(state.task_store.available_categories() - {ALL_CATEGORIES})
    return "Categories: " + ", ".join([ALL_CATEGORIES, *cats])


async def cmd_done(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /done <id>"
    task = await state.task_store.toggle_complete(parse_task_id(args[0]))
    return f"Task #{task.id} marked as {'done' if task.is_checked else 'not done'}."


async def cmd_rm(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /rm <id>"
    task_id = parse_task_id(args[0])
    state.task_store.get(task_id)
    await state.task_store.delete(task_id)
    return f"Deleted task #{task_id}."


async def cmd_edit(state: AppState, args: list[str]) -> str:
    """/edit <id> [--title ...] [--due ...] [--cat ...] [--prio ...]"""
    positional, opts = _parse_options(args, {"title", "due", "cat", "prio"})
    if not positional or not opts:
        return "Usage: /edit <id> [--title T] [--due +1d] [--cat C] [--prio high]"
    task = await state.task_store.edit(
        parse_task_id(positional[0]),
        title=opts.get("title"),
        category=opts.get("cat"),
        priority=_parse_priority(opts["prio"]) if "prio" in opts else None,
        deadline=parse_due(opts["due"], state.clock()) if "due" in opts else None,
    )
    return "Updated:\n" + format_task(task)


async def cmd_loc(state: AppState, args: list[str]) -> str:
    """/loc <id> <latitude> <longitude>"""
    if len(args) != 3:
        return "Usage: /loc <id> <latitude> <longitude>"
    task_id = parse_task_id(args[0])
    try:
        lat, lon = float(args[1]), float(args[2])
    except ValueError as e:
        raise ValidationError("latitude/longitude must be numbers") from e
    state.location.set(Location(latitude=lat, longitude=lon))
    task = await state.task_store.attach_location(task_id)
    return f"Location added to task #{task.id}."


async def cmd_audio(state: AppState, args: list[str]) -> str:
    """/audio <id> <clip path or uri>"""
    if len(args) != 2:
        return "Usage: /audio <id> <clip path>"
    task = await state.task_store.attach_audio_note(parse_task_id(args[0]), args[1])
    return f"Voice note added to task #{task.id}."


async def cmd_attach(state: AppState, args: list[str]) -> str:
    """/attach <id> <file path>"""
    if len(args) != 2:
        return "Usage: /attach <id> <file path>"
    task_id = parse_task_id(args[0])
    picked = await PathFilePicker(args[1]).pick()
    if picked is None:
        return f"File not found: {args[1]}"
    task = await state.task_store.attach_file(task_id, picked.uri)
    if task is None:
        return "Nothing attached."
    return f"Attached {picked.name} ({picked.size} bytes) to task #{task.id}: {task.attached_file}"


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("add", cmd_add, help_text="Add a task: /add <title> [--due +1d] [--cat C] [--prio high].")
registry.register("list", cmd_list, help_text="List tasks: /list [category].", aliases=["ls"])
registry.register("find", cmd_find, help_text="Search titles: /find <text> [--cat C].")
registry.register("cats", cmd_cats, help_text="Show categories.")
registry.register("done", cmd_done, help_text="Toggle completion: /done <id>.")
registry.register("rm", cmd_rm, help_text="Delete a task: /rm <id>.", aliases=["del"])
registry.register("edit", cmd_edit, help_text="Edit a task: /edit <id> [--title T] [--due D] [--cat C] [--prio P].")
registry.register("loc", cmd_loc, help_text="Attach a location: /loc <id> <lat> <lon>.")
registry.register("audio", cmd_audio, help_text="Attach a voice note: /audio <id> <clip>.")
registry.register("attach", cmd_attach, help_text="Copy a file into the task: /attach <id> <path>.")
