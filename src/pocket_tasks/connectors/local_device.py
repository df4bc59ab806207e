# src/pocket_tasks/connectors/local_device.py

"""
Desktop stand-ins for the device capabilities the core talks to.

- LocalFileSystem: pathlib/shutil, run in worker threads
- LoopNotificationService: one asyncio timer per reminder, "delivered" via logging/callback
- StaticLocationProvider: fixed coordinates (or a denied permission)
- PathFilePicker: a file chosen up front (e.g. from a command argument)

Reminders live only as long as the event loop. Handles are random UUIDs, so a
handle stored by an earlier run never collides with one issued now; such old
handles simply report as not pending.
"""

from __future__ import annotations

import asyncio
import logging
import shutil
import uuid
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from ..core.errors import CapabilityDenied, NotificationHandleUnknown
from ..core.ports import NotificationRequest
from ..tasks.task_models import FileDescriptor, Location, utc_now

logger = logging.getLogger(__name__)

ReminderCallback = Callable[[NotificationRequest], None]


class LocalFileSystem:
    async def make_directory(self, path: Path) -> None:
        await asyncio.to_thread(Path(path).mkdir, parents=True, exist_ok=True)

    async def copy(self, src: str, dst: Path) -> None:
        await asyncio.to_thread(shutil.copyfile, src, dst)


class LoopNotificationService:
    """In-process notification service backed by loop.call_later()."""

    def __init__(
        self,
        *,
        on_fire: ReminderCallback | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._on_fire = on_fire
        self._clock = clock
        self._timers: dict[str, asyncio.TimerHandle] = {}

    @property
    def pending(self) -> list[str]:
        return list(self._timers)

    def _fire(self, handle: str, request: NotificationRequest) -> None:
        self._timers.pop(handle, None)
        logger.info("Reminder fired handle=%s: %s - %s", handle, request.title, request.body)
        if self._on_fire is not None:
            try:
                self._on_fire(request)
            except Exception:
                logger.exception("Reminder callback failed handle=%s", handle)

    async def schedule(self, request: NotificationRequest) -> str:
        loop = asyncio.get_running_loop()
        delay = max(0.0, (request.trigger_at - self._clock()).total_seconds())
        handle = uuid.uuid4().hex
        self._timers[handle] = loop.call_later(delay, self._fire, handle, request)
        logger.debug("Reminder timer set handle=%s in=%.0fs", handle, delay)
        return handle

    async def cancel(self, handle: str) -> None:
        timer = self._timers.pop(handle, None)
        if timer is None:
            raise NotificationHandleUnknown(handle)
        timer.cancel()

    async def is_pending(self, handle: str) -> bool:
        return handle in self._timers

    def shutdown(self) -> None:
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()


class StaticLocationProvider:
    def __init__(self, location: Location | None = None) -> None:
        self._location = location

    def set(self, location: Location | None) -> None:
        self._location = location

    async def current_location(self) -> Location:
        if self._location is None:
            raise CapabilityDenied("location", "no position available")
        return self._location


class PathFilePicker:
    def __init__(self, path: str | Path | None = None) -> None:
        self._path = Path(path) if path is not None else None

    async def pick(self) -> FileDescriptor | None:
        if self._path is None:
            return None
        if not self._path.is_file():
            logger.warning("Picked file does not exist: %s", self._path)
            return None
        size = await asyncio.to_thread(lambda: self._path.stat().st_size)
        return FileDescriptor(name=self._path.name, uri=str(self._path), size=size)
