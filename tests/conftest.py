# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from pocket_tasks.connectors.local_device import (
    LocalFileSystem,
    LoopNotificationService,
    StaticLocationProvider,
)
from pocket_tasks.core.state import AppState
from pocket_tasks.tasks.attachments import AttachmentManager
from pocket_tasks.tasks.reminders import ReminderScheduler
from pocket_tasks.tasks.task_store import TaskStore

from .fakes import (
    FakeFilePicker,
    FakeLocationProvider,
    FakeNotificationService,
    FixedClock,
    InMemoryStorage,
)


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture()
def events() -> list[tuple]:
    """Shared call log for storage + notifications (ordering assertions)."""
    return []


@pytest.fixture()
def storage(events: list[tuple]) -> InMemoryStorage:
    return InMemoryStorage(events=events)


@pytest.fixture()
def notifier(events: list[tuple]) -> FakeNotificationService:
    return FakeNotificationService(events=events)


@pytest.fixture()
def reminders(notifier: FakeNotificationService, clock: FixedClock) -> ReminderScheduler:
    return ReminderScheduler(notifier, clock=clock)


@pytest.fixture()
def picker() -> FakeFilePicker:
    return FakeFilePicker()


@pytest.fixture()
def attachments(tmp_path: Path, picker: FakeFilePicker) -> AttachmentManager:
    return AttachmentManager(LocalFileSystem(), tmp_path / "documents", picker=picker)


@pytest.fixture()
def location() -> FakeLocationProvider:
    return FakeLocationProvider()


@pytest.fixture()
def store(
    storage: InMemoryStorage,
    reminders: ReminderScheduler,
    attachments: AttachmentManager,
    location: FakeLocationProvider,
    clock: FixedClock,
) -> TaskStore:
    """
    TaskStore wired with deterministic fakes.

    NOTE: attachments use the real LocalFileSystem under tmp_path because
    the copy-into-task-directory behavior is part of what we want to test.
    """
    return TaskStore(
        storage,
        reminders,
        attachments=attachments,
        location=location,
        clock=clock,
    )


@pytest.fixture()
def state(
    tmp_path: Path,
    storage: InMemoryStorage,
    reminders: ReminderScheduler,
    attachments: AttachmentManager,
    clock: FixedClock,
) -> AppState:
    """
    AppState for command tests.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    location = StaticLocationProvider()
    return AppState(
        settings=SimpleNamespace(data_dir=tmp_path, app_name="pocket-tasks-test"),
        task_store=TaskStore(
            storage,
            reminders,
            attachments=attachments,
            location=location,
            clock=clock,
        ),
        notifications=LoopNotificationService(clock=clock),
        attachments=attachments,
        location=location,
        clock=clock,
    )
