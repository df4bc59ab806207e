# src/pocket_tasks/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete adapters into the TaskStore and AppState.
"""

from __future__ import annotations

import logging

from ..config import Settings, get_settings
from ..connectors.local_device import LocalFileSystem, LoopNotificationService, StaticLocationProvider
from ..core.ports import NotificationRequest
from ..core.state import AppState
from ..storage.sqlite_kv import SqliteKeyValueStorage
from ..tasks.attachments import AttachmentManager
from ..tasks.reminders import ReminderScheduler
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings: Settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)
    settings.attachments_dir.mkdir(parents=True, exist_ok=True)


def _print_reminder(request: NotificationRequest) -> None:
    print(f"\n[{request.title}] {request.body}", flush=True)


def create_initial_state(*, settings: Settings | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    The store is not loaded here; call `await state.task_store.load()` once the loop runs.
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    notifications = LoopNotificationService(on_fire=_print_reminder)
    reminders = ReminderScheduler(
        notifications,
        reminder_title=settings.reminder_title,
        sound=settings.reminder_sound,
    )
    attachments = AttachmentManager(LocalFileSystem(), settings.attachments_dir)
    location = StaticLocationProvider()

    task_store = TaskStore(
        SqliteKeyValueStorage(settings.db_path),
        reminders,
        attachments=attachments,
        location=location,
        storage_key=settings.storage_key,
    )
    logger.debug("State wired db=%s attachments=%s", settings.db_path, settings.attachments_dir)

    return AppState(
        settings=settings,
        task_store=task_store,
        notifications=notifications,
        attachments=attachments,
        location=location,
    )
