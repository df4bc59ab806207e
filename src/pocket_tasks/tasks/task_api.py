# src/pocket_tasks/tasks/task_api.py

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from ..core.errors import CapabilityDenied, ValidationError
from ..core.ports import AudioRecorder
from ..core.state import AppState
from .task_models import Priority, Task, TaskDraft
from .task_store import TaskStore

logger = logging.getLogger(__name__)


async def add_task_due_in(
    state: AppState,
    *,
    title: str,
    due_in_minutes: int = 0,
    category: str = "",
    priority: Priority = Priority.MEDIUM,
    now: datetime | None = None,
) -> Task:
    """
    Convenience helper: add a task due N minutes from now.
    Uses state.task_store (already constructed in bootstrap).
    """
    base = now if now is not None else state.clock()
    deadline = base + timedelta(minutes=max(0, int(due_in_minutes)))
    return await state.task_store.add(
        TaskDraft(title=title, deadline=deadline, category=category, priority=priority)
    )


class AudioNoteSession:
    """
    Start/stop recording flow for a voice note.

    start() binds the recording to a task; stop() finishes the clip and
    stores its URI on that task. Only one recording runs at a time.
    """

    def __init__(self, store: TaskStore, recorder: AudioRecorder | None) -> None:
        self._store = store
        self._recorder = recorder
        self._task_id: int | None = None

    @property
    def recording(self) -> bool:
        return self._task_id is not None

    async def start(self, task_id: int) -> None:
        if self._recorder is None:
            raise CapabilityDenied("audio", "no recorder available")
        if self._task_id is not None:
            raise ValidationError(f"already recording for task id={self._task_id}")
        self._store.get(task_id)
        await self._recorder.start()
        self._task_id = task_id
        logger.info("Audio recording started task_id=%s", task_id)

    async def stop(self) -> Task | None:
        if self._recorder is None or self._task_id is None:
            return None
        task_id, self._task_id = self._task_id, None
        uri = await self._recorder.stop()
        if not uri:
            logger.warning("Recorder returned no clip for task_id=%s", task_id)
            return None
        logger.info("Audio recording stopped task_id=%s uri=%s", task_id, uri)
        return await self._store.attach_audio_note(task_id, uri)
