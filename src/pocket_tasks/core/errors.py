# src/pocket_tasks/core/errors.py

"""
Error kinds raised by the task core.

Only ValidationError and NotFoundError abort an operation before anything
changes. PersistenceError is raised after the in-memory mutation already
happened. Scheduling/cancellation problems never leave the core.
"""

from __future__ import annotations


class TaskStoreError(Exception):
    """Base class for every error the task core raises."""


class ValidationError(TaskStoreError, ValueError):
    """Input rejected before any state change (e.g. blank title)."""


class NotFoundError(TaskStoreError, LookupError):
    def __init__(self, task_id: int) -> None:
        super().__init__(f"task not found: id={task_id}")
        self.task_id = task_id


class PersistenceError(TaskStoreError):
    """
    Durable read/write failed.

    On write failures the in-memory collection is kept as the best-known
    truth; the durable snapshot may lag behind until the next successful write.
    """


class CapabilityDenied(TaskStoreError):
    """A device capability (location/audio/files/notifications) was refused."""

    def __init__(self, capability: str, detail: str = "") -> None:
        msg = f"{capability} permission denied"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)
        self.capability = capability


class NotificationHandleUnknown(TaskStoreError, LookupError):
    """Raised by notification services when a handle is unknown or already fired."""
