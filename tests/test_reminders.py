# tests/test_reminders.py

from __future__ import annotations

import asyncio
from datetime import timedelta

import pytest

from pocket_tasks.connectors.local_device import LoopNotificationService
from pocket_tasks.core.errors import NotificationHandleUnknown
from pocket_tasks.tasks.reminders import ReminderScheduler, SchedulingOutcome

from .fakes import NOW, FakeNotificationService, FixedClock


@pytest.mark.asyncio
async def test_schedule_future_deadline(reminders, notifier) -> None:
    result = await reminders.schedule("Pay rent", NOW + timedelta(hours=3))

    assert result.outcome == SchedulingOutcome.SCHEDULED
    assert result.handle == "n1"
    request = notifier.scheduled["n1"]
    assert request.title == "Task Reminder"
    assert request.body == '"Pay rent" is due!'
    assert request.trigger_at == NOW + timedelta(hours=3)


@pytest.mark.asyncio
@pytest.mark.parametrize("delta", [timedelta(0), timedelta(seconds=-1), timedelta(days=-30)])
async def test_schedule_skips_non_future_deadlines(reminders, notifier, delta) -> None:
    result = await reminders.schedule("x", NOW + delta)

    assert result.outcome == SchedulingOutcome.SKIPPED_PAST_DEADLINE
    assert result.handle is None
    assert notifier.schedule_calls == 0


@pytest.mark.asyncio
async def test_schedule_failure_is_reported_not_raised(reminders, notifier) -> None:
    notifier.fail_schedule = True

    result = await reminders.schedule("x", NOW + timedelta(days=1))

    assert result.outcome == SchedulingOutcome.FAILED
    assert result.handle is None
    assert "unavailable" in (result.reason or "")


@pytest.mark.asyncio
async def test_custom_title_and_sound(notifier) -> None:
    scheduler = ReminderScheduler(notifier, reminder_title="Hatırlatma", sound=False, clock=FixedClock())

    result = await scheduler.schedule("x", NOW + timedelta(minutes=5))

    request = notifier.scheduled[result.handle]
    assert request.title == "Hatırlatma"
    assert request.sound is False


@pytest.mark.asyncio
async def test_cancel_outcomes(reminders, notifier) -> None:
    result = await reminders.schedule("x", NOW + timedelta(days=1))

    assert await reminders.cancel(result.handle) is True
    # Second cancel: the service no longer knows the handle.
    assert await reminders.cancel(result.handle) is True

    notifier.fail_cancel = True
    assert await reminders.cancel("n1") is False


@pytest.mark.asyncio
async def test_loop_service_fires_and_forgets_handle() -> None:
    fired = []
    clock = FixedClock()
    service = LoopNotificationService(on_fire=fired.append, clock=clock)
    scheduler = ReminderScheduler(service, clock=clock)

    result = await scheduler.schedule("soon", NOW + timedelta(milliseconds=10))
    assert result.handle in service.pending

    await asyncio.sleep(0.05)

    assert [r.body for r in fired] == ['"soon" is due!']
    assert service.pending == []
    with pytest.raises(NotificationHandleUnknown):
        await service.cancel(result.handle)
    # The scheduler treats an already-fired handle as cancelled.
    assert await scheduler.cancel(result.handle) is True


@pytest.mark.asyncio
async def test_loop_service_cancel_stops_timer() -> None:
    fired = []
    clock = FixedClock()
    service = LoopNotificationService(on_fire=fired.append, clock=clock)

    result = await ReminderScheduler(service, clock=clock).schedule("later", NOW + timedelta(milliseconds=10))
    await service.cancel(result.handle)
    await asyncio.sleep(0.05)

    assert fired == []


def test_fake_service_is_a_notification_service() -> None:
    # Structural check: ReminderScheduler accepts the fake without adapters.
    ReminderScheduler(FakeNotificationService())


@pytest.mark.asyncio
async def test_is_pending_follows_the_service(reminders, notifier) -> None:
    result = await reminders.schedule("x", NOW + timedelta(days=1))

    assert await reminders.is_pending(result.handle) is True
    notifier.fire(result.handle)
    assert await reminders.is_pending(result.handle) is False

    notifier.fail_lookup = True
    assert await reminders.is_pending(result.handle) is True


@pytest.mark.asyncio
async def test_loop_service_handles_differ_between_instances() -> None:
    clock = FixedClock()
    first, second = LoopNotificationService(clock=clock), LoopNotificationService(clock=clock)
    request_at = NOW + timedelta(days=1)

    a = await ReminderScheduler(first, clock=clock).schedule("a", request_at)
    b = await ReminderScheduler(second, clock=clock).schedule("b", request_at)

    assert a.handle != b.handle
    assert await second.is_pending(a.handle) is False
    first.shutdown()
    second.shutdown()
