# src/pocket_tasks/core/state.py

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

from ..tasks.task_models import utc_now

if TYPE_CHECKING:
    from ..connectors.local_device import LoopNotificationService, StaticLocationProvider
    from ..tasks.attachments import AttachmentManager
    from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: Any

    task_store: TaskStore
    notifications: LoopNotificationService
    attachments: AttachmentManager
    location: StaticLocationProvider

    clock: Callable[[], datetime] = utc_now
