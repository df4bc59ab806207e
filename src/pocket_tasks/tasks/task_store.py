# src/pocket_tasks/tasks/task_store.py

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime
from typing import Any

from ..core.errors import CapabilityDenied, NotFoundError, PersistenceError, ValidationError
from ..core.ports import AttachmentPort, KeyValueStorage, LocationPort, NotificationPort
from .task_codec import SnapshotDecodeError, decode_snapshot, encode_snapshot
from .task_filter import ALL_CATEGORIES, FilteredView, available_categories, filter_tasks
from .task_models import (
    AttachedFileExtra,
    AudioNoteExtra,
    Extra,
    LocationExtra,
    Priority,
    Task,
    TaskDraft,
    to_utc,
    utc_now,
)

logger = logging.getLogger(__name__)
# Per-write chatter; kept off the interactive console by logging_setup.
snapshot_logger = logging.getLogger(f"{__name__}.snapshot")

DEFAULT_STORAGE_KEY = "tasks"


class TaskStore:
    """
    Owner of the task collection.

    Every mutation follows the same order:
    1) release/acquire side effects (reminders, attachment copies),
    2) replace the in-memory collection,
    3) write the full snapshot and await it,
    4) return.

    There is no rollback: if the write fails, PersistenceError is raised and
    the in-memory collection stays ahead of the durable one until the next
    successful write.

    Concurrency:
    - meant to be driven from one asyncio task at a time (no locks)
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        reminders: NotificationPort,
        *,
        attachments: AttachmentPort | None = None,
        location: LocationPort | None = None,
        storage_key: str = DEFAULT_STORAGE_KEY,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._storage = storage
        self._reminders = reminders
        self._attachments = attachments
        self._location = location
        self._key = storage_key
        self._clock = clock

        self._tasks: tuple[Task, ...] = ()
        # High-water mark: ids are never handed out twice, even after deletes.
        self._last_id = 0

    # ---- low-level helpers ----

    def _find(self, task_id: int) -> int | None:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                return i
        return None

    def _next_id(self) -> int:
        now_ms = int(self._clock().timestamp() * 1000)
        task_id = max(now_ms, self._last_id + 1)
        self._last_id = task_id
        return task_id

    def _replace_task(self, task: Task) -> None:
        self._tasks = tuple(task if t.id == task.id else t for t in self._tasks)

    async def _persist(self) -> None:
        payload = encode_snapshot(self._tasks)
        try:
            await self._storage.write(self._key, payload)
        except PersistenceError:
            raise
        except Exception as e:
            logger.exception("Snapshot write failed key=%s", self._key)
            raise PersistenceError(f"failed to write snapshot: {e}") from e
        snapshot_logger.debug("Snapshot written key=%s tasks=%d bytes=%d", self._key, len(self._tasks), len(payload))

    # ---- read API ----

    @property
    def tasks(self) -> tuple[Task, ...]:
        return self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    def get(self, task_id: int) -> Task:
        idx = self._find(task_id)
        if idx is None:
            raise NotFoundError(task_id)
        return self._tasks[idx]

    def filtered_view(self, query: str = "", category: str = ALL_CATEGORIES) -> FilteredView:
        return filter_tasks(self._tasks, query, category)

    def available_categories(self) -> set[str]:
        return available_categories(self._tasks)

    # ---- lifecycle ----

    async def load(self) -> list[Task]:
        """
        Hydrate from the durable snapshot.

        Missing or malformed content gives an empty collection (malformed is
        logged). A failing backend read raises PersistenceError and leaves
        the current collection untouched.

        Stored reminder handles the notification service no longer holds
        (fired, or issued by an earlier process) are replaced: the reminder
        is scheduled again, or dropped when the deadline has passed. If any
        handle changed the snapshot is written back.
        """
        try:
            raw = await self._storage.read(self._key)
        except PersistenceError:
            raise
        except Exception as e:
            logger.exception("Snapshot read failed key=%s", self._key)
            raise PersistenceError(f"failed to read snapshot: {e}") from e

        tasks: list[Task] = []
        if raw:
            try:
                tasks = decode_snapshot(raw)
            except SnapshotDecodeError:
                logger.exception("Malformed snapshot key=%s; starting with an empty list", self._key)
                tasks = []

        tasks, revived = await self._revive_reminders(tasks)

        self._tasks = tuple(tasks)
        self._last_id = max([self._last_id, *(t.id for t in tasks)])
        if revived:
            await self._persist()
        logger.info("TaskStore loaded key=%s total=%d revived=%d", self._key, len(tasks), revived)
        return list(tasks)

    async def _revive_reminders(self, tasks: list[Task]) -> tuple[list[Task], int]:
        out: list[Task] = []
        revived = 0
        for task in tasks:
            handle = task.notification_id
            if handle is not None and not await self._reminders.is_pending(handle):
                result = await self._reminders.schedule(task.title, task.deadline)
                logger.debug(
                    "Stale reminder %s of task id=%s replaced by %s", handle, task.id, result.handle
                )
                task = replace(task, notification_id=result.handle)
                revived += 1
            out.append(task)
        return out, revived

    async def persist(self) -> None:
        """Write the current collection as-is."""
        await self._persist()

    # ---- mutations ----

    async def add(self, draft: TaskDraft) -> Task:
        title = draft.title or ""
        if not title.strip():
            raise ValidationError("title is required")

        deadline = to_utc(draft.deadline)
        task_id = self._next_id()

        result = await self._reminders.schedule(title, deadline)
        if not result.scheduled:
            logger.info("Task id=%s created without reminder (%s)", task_id, result.outcome.value)

        task = Task(
            id=task_id,
            title=title,
            deadline=deadline,
            category=draft.category or "",
            priority=draft.priority,
            is_checked=False,
            notification_id=result.handle,
        )
        self._tasks = (*self._tasks, task)
        await self._persist()
        logger.info("Task added id=%s title=%r reminder=%s", task.id, task.title, task.notification_id)
        return task

    async def delete(self, task_id: int) -> None:
        idx = self._find(task_id)
        if idx is None:
            logger.debug("Delete ignored, unknown id=%s", task_id)
            return
        task = self._tasks[idx]

        if task.notification_id is not None:
            ok = await self._reminders.cancel(task.notification_id)
            if not ok:
                logger.warning(
                    "Reminder %s of task id=%s could not be cancelled; deleting anyway",
                    task.notification_id,
                    task_id,
                )

        self._tasks = tuple(t for t in self._tasks if t.id != task_id)
        await self._persist()
        logger.info("Task deleted id=%s", task_id)

    async def toggle_complete(self, task_id: int) -> Task:
        task = self.get(task_id)
        updated = replace(task, is_checked=not task.is_checked)
        self._replace_task(updated)
        await self._persist()
        logger.debug("Task id=%s checked=%s", task_id, updated.is_checked)
        return updated

    async def merge_extras(self, task_id: int, *extras: Extra) -> Task:
        """
        Shallow-merge extras into an existing task, in order.

        Every extra is validated before anything changes; fields not named by
        an extra keep their values.
        """
        task = self.get(task_id)
        changes: dict[str, Any] = {}
        for extra in extras:
            extra.validate()
            changes.update(extra.changes())

        if not changes:
            return task

        updated = replace(task, **changes)
        self._replace_task(updated)
        await self._persist()
        logger.info("Task id=%s extras merged: %s", task_id, ", ".join(sorted(changes)))
        return updated

    async def edit(
        self,
        task_id: int,
        *,
        title: str | None = None,
        category: str | None = None,
        priority: Priority | None = None,
        deadline: datetime | None = None,
    ) -> Task:
        """
        Edit the core fields of a task.

        A new deadline (or a new title while a reminder is held) replaces the
        reminder: the old handle is cancelled first, then a fresh one is
        scheduled (none when the new deadline is not in the future).
        """
        task = self.get(task_id)
        if title is not None and not title.strip():
            raise ValidationError("title is required")

        changes: dict[str, Any] = {}
        if title is not None and title != task.title:
            changes["title"] = title
        if category is not None and category != task.category:
            changes["category"] = category
        if priority is not None and priority != task.priority:
            changes["priority"] = priority
        if deadline is not None and to_utc(deadline) != task.deadline:
            changes["deadline"] = to_utc(deadline)

        if not changes:
            return task

        reschedule = "deadline" in changes or ("title" in changes and task.notification_id is not None)
        if reschedule:
            if task.notification_id is not None:
                ok = await self._reminders.cancel(task.notification_id)
                if not ok:
                    logger.warning(
                        "Superseded reminder %s of task id=%s could not be cancelled",
                        task.notification_id,
                        task_id,
                    )
            result = await self._reminders.schedule(
                changes.get("title", task.title), changes.get("deadline", task.deadline)
            )
            changes["notification_id"] = result.handle

        updated = replace(task, **changes)
        self._replace_task(updated)
        await self._persist()
        logger.info("Task edited id=%s fields=%s", task_id, ", ".join(sorted(changes)))
        return updated

    # ---- capability-backed extras ----

    async def attach_location(self, task_id: int) -> Task:
        self.get(task_id)
        if self._location is None:
            raise CapabilityDenied("location", "no location provider configured")
        loc = await self._location.current_location()
        return await self.merge_extras(task_id, LocationExtra(loc))

    async def attach_audio_note(self, task_id: int, uri: str) -> Task:
        return await self.merge_extras(task_id, AudioNoteExtra(uri))

    async def attach_file(self, task_id: int, source_uri: str | None = None) -> Task | None:
        """
        Copy a file into the task directory and record it on the task.

        Without source_uri the attachment port's picker is asked; a dismissed
        picker returns None and changes nothing.
        """
        self.get(task_id)
        if self._attachments is None:
            raise CapabilityDenied("files", "no attachment manager configured")

        if source_uri is None:
            picked = await self._attachments.pick_source()
            if picked is None:
                return None
            source_uri = picked.uri

        path = await self._attachments.persist_to_task(task_id, source_uri)
        return await self.merge_extras(task_id, AttachedFileExtra(path))
