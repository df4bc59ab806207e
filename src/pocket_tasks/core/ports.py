# src/pocket_tasks/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the task core.

The core depends on Protocols instead of concrete implementations.
This keeps storage, OS notifications and device capabilities swappable
and makes testing easier (see tests/fakes.py).

Capability ports raise CapabilityDenied when the user refused the permission.
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Awaitable, Protocol

if TYPE_CHECKING:
    from ..tasks.reminders import SchedulingResult
    from ..tasks.task_models import FileDescriptor, Location


@dataclass(slots=True, frozen=True)
class NotificationRequest:
    """One-shot local notification, delivered at trigger_at."""

    title: str
    body: str
    sound: bool
    trigger_at: datetime


# ---- external collaborators (device / OS side) ----


class KeyValueStorage(Protocol):
    """Durable key-value backend. read() returns None when the key was never written."""

    def read(self, key: str) -> Awaitable[bytes | None]: ...
    def write(self, key: str, value: bytes) -> Awaitable[None]: ...


class NotificationService(Protocol):
    """
    OS notification service.

    cancel() raises NotificationHandleUnknown for handles it does not know
    (already fired, or never issued).
    is_pending() tells whether a handle is still waiting to be delivered; handles
    issued by an earlier process are not pending for an in-process service.
    """

    def schedule(self, request: NotificationRequest) -> Awaitable[str]: ...
    def cancel(self, handle: str) -> Awaitable[None]: ...
    def is_pending(self, handle: str) -> Awaitable[bool]: ...


class FileSystem(Protocol):
    def make_directory(self, path: Path) -> Awaitable[None]: ...
    def copy(self, src: str, dst: Path) -> Awaitable[None]: ...


class FilePicker(Protocol):
    """Returns None when the user dismissed the picker."""

    def pick(self) -> Awaitable[FileDescriptor | None]: ...


class AudioRecorder(Protocol):
    def start(self) -> Awaitable[None]: ...
    def stop(self) -> Awaitable[str]: ...


# ---- ports the TaskStore is constructed with ----


class NotificationPort(Protocol):
    def schedule(self, title: str, deadline: datetime) -> Awaitable[SchedulingResult]: ...
    def cancel(self, handle: str) -> Awaitable[bool]: ...
    def is_pending(self, handle: str) -> Awaitable[bool]: ...


class AttachmentPort(Protocol):
    def pick_source(self) -> Awaitable[FileDescriptor | None]: ...
    def persist_to_task(self, task_id: int, source_uri: str) -> Awaitable[str]: ...


class LocationPort(Protocol):
    def current_location(self) -> Awaitable[Location]: ...
