# tests/fakes.py

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from pocket_tasks.core.errors import CapabilityDenied, NotificationHandleUnknown
from pocket_tasks.core.ports import NotificationRequest
from pocket_tasks.tasks.task_models import FileDescriptor, Location

NOW = datetime(2024, 6, 10, 12, 0, 0, tzinfo=UTC)


class FixedClock:
    """Deterministic clock; advance() moves it forward."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kw: float) -> None:
        self.now = self.now + timedelta(**kw)


@dataclass(slots=True)
class InMemoryStorage:
    """
    Fake KeyValueStorage.

    Every write is recorded into `events` as ("write", [ids in snapshot]) so
    tests can assert ordering against notification calls sharing the same log.
    """

    data: dict[str, bytes] = field(default_factory=dict)
    events: list[tuple] = field(default_factory=list)
    fail_writes: bool = False
    fail_reads: bool = False

    async def read(self, key: str) -> bytes | None:
        if self.fail_reads:
            raise OSError("disk unavailable")
        return self.data.get(key)

    async def write(self, key: str, value: bytes) -> None:
        if self.fail_writes:
            raise OSError("disk full")
        self.data[key] = value
        ids = [r["id"] for r in json.loads(value.decode("utf-8"))]
        self.events.append(("write", ids))


@dataclass(slots=True)
class FakeNotificationService:
    """Fake OS notification service; handles are n1, n2, ..."""

    events: list[tuple] = field(default_factory=list)
    scheduled: dict[str, NotificationRequest] = field(default_factory=dict)
    cancelled: list[str] = field(default_factory=list)
    schedule_calls: int = 0
    fail_schedule: bool = False
    fail_cancel: bool = False
    fail_lookup: bool = False

    async def schedule(self, request: NotificationRequest) -> str:
        self.schedule_calls += 1
        if self.fail_schedule:
            raise RuntimeError("notification service unavailable")
        handle = f"n{self.schedule_calls}"
        self.scheduled[handle] = request
        self.events.append(("schedule", handle))
        return handle

    async def cancel(self, handle: str) -> None:
        if self.fail_cancel:
            raise RuntimeError("cancel failed")
        if handle not in self.scheduled:
            raise NotificationHandleUnknown(handle)
        del self.scheduled[handle]
        self.cancelled.append(handle)
        self.events.append(("cancel", handle))

    async def is_pending(self, handle: str) -> bool:
        if self.fail_lookup:
            raise RuntimeError("lookup failed")
        return handle in self.scheduled

    def fire(self, handle: str) -> None:
        """Simulate the OS delivering the notification."""
        self.scheduled.pop(handle, None)


@dataclass(slots=True)
class FakeFilePicker:
    result: FileDescriptor | None = None

    async def pick(self) -> FileDescriptor | None:
        return self.result


@dataclass(slots=True)
class FakeLocationProvider:
    location: Location | None = None
    calls: int = 0

    async def current_location(self) -> Location:
        self.calls += 1
        if self.location is None:
            raise CapabilityDenied("location")
        return self.location


@dataclass(slots=True)
class FakeAudioRecorder:
    clip_uri: str = "file:///cache/clip-1.m4a"
    started: int = 0
    stopped: int = 0
    denied: bool = False

    async def start(self) -> None:
        if self.denied:
            raise CapabilityDenied("audio")
        self.started += 1

    async def stop(self) -> str:
        self.stopped += 1
        return self.clip_uri
