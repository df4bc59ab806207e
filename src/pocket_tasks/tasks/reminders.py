# src/pocket_tasks/tasks/reminders.py

from __future__ import annotations

"""
Deadline reminders.

Thin policy layer over the OS notification service:
- never schedule for a deadline that is not strictly in the future,
- never let a service failure escape (the task is created regardless),
- treat cancelling an unknown/already-fired handle as success.
- report whether a stored handle is still pending, so stale handles from an
  earlier run can be replaced.

The outcome of schedule() is explicit (Scheduled / SkippedPastDeadline /
Failed) so callers can tell "skipped" from "service broke"; callers that only
care about the handle read SchedulingResult.handle.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from ..core.errors import NotificationHandleUnknown
from ..core.ports import NotificationRequest, NotificationService
from .task_models import to_utc, utc_now

logger = logging.getLogger(__name__)

DEFAULT_REMINDER_TITLE = "Task Reminder"


class SchedulingOutcome(str, Enum):
    SCHEDULED = "scheduled"
    SKIPPED_PAST_DEADLINE = "skipped_past_deadline"
    FAILED = "failed"


@dataclass(slots=True, frozen=True)
class SchedulingResult:
    outcome: SchedulingOutcome
    handle: str | None = None
    reason: str | None = None

    @property
    def scheduled(self) -> bool:
        return self.outcome == SchedulingOutcome.SCHEDULED


def reminder_body(title: str) -> str:
    return f'"{title}" is due!'


class ReminderScheduler:
    def __init__(
        self,
        service: NotificationService,
        *,
        reminder_title: str = DEFAULT_REMINDER_TITLE,
        sound: bool = True,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._service = service
        self._reminder_title = reminder_title
        self._sound = sound
        self._clock = clock

    async def schedule(self, title: str, deadline: datetime) -> SchedulingResult:
        trigger_at = to_utc(deadline)
        if trigger_at <= self._clock():
            logger.debug("Reminder skipped (deadline %s not in the future)", trigger_at.isoformat())
            return SchedulingResult(SchedulingOutcome.SKIPPED_PAST_DEADLINE)

        request = NotificationRequest(
            title=self._reminder_title,
            body=reminder_body(title),
            sound=self._sound,
            trigger_at=trigger_at,
        )
        try:
            handle = await self._service.schedule(request)
        except Exception as e:
            logger.warning("Reminder scheduling failed for %r: %s", title, e, exc_info=True)
            return SchedulingResult(SchedulingOutcome.FAILED, reason=str(e) or type(e).__name__)

        if not handle:
            logger.warning("Notification service returned an empty handle for %r", title)
            return SchedulingResult(SchedulingOutcome.FAILED, reason="empty handle")

        logger.debug("Reminder scheduled handle=%s at=%s", handle, trigger_at.isoformat())
        return SchedulingResult(SchedulingOutcome.SCHEDULED, handle=str(handle))

    async def cancel(self, handle: str) -> bool:
        """
        Best-effort cancellation. Never raises.

        Returns True when the handle is gone (cancelled now, or already
        fired/unknown to the service), False when the service failed.
        """
        try:
            await self._service.cancel(handle)
        except NotificationHandleUnknown:
            logger.debug("Reminder handle=%s already gone", handle)
            return True
        except Exception:
            logger.exception("Reminder cancel failed handle=%s", handle)
            return False
        logger.debug("Reminder cancelled handle=%s", handle)
        return True

    async def is_pending(self, handle: str) -> bool:
        """
        Whether the service still holds this handle.

        When the service cannot answer the handle is assumed alive, so a
        reminder is never scheduled twice because of a transient error.
        """
        try:
            return bool(await self._service.is_pending(handle))
        except Exception:
            logger.exception("Reminder lookup failed handle=%s", handle)
            return True
