# src/pocket_tasks/tasks/task_codec.py

"""
Snapshot (de)serialization.

The durable format is a single JSON array of task records using the
camelCase keys the mobile app wrote:

    [{"id": 1718000000000, "title": "...", "category": "", "priority": "medium",
      "deadline": "2024-06-10T09:00:00+00:00", "isChecked": false,
      "notificationId": null, "location": {"latitude": 1.0, "longitude": 2.0},
      "audioNote": null, "attachedFile": null}, ...]

Decoding is lenient (unknown keys ignored, legacy values mapped), encoding is
deterministic so that encode(decode(encode(x))) == encode(x).
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

from .task_models import Location, Priority, Task, to_utc

logger = logging.getLogger(__name__)


class SnapshotDecodeError(ValueError):
    """The stored snapshot is not a JSON array of records."""


def _deadline_to_str(dt: datetime) -> str:
    return to_utc(dt).isoformat()


def _parse_deadline(raw: Any) -> datetime | None:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        # JS Date.now()-style epoch milliseconds.
        try:
            return datetime.fromtimestamp(float(raw) / 1000.0, UTC)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(raw, str) and raw.strip():
        s = raw.strip()
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        try:
            return to_utc(datetime.fromisoformat(s))
        except ValueError:
            return None
    return None


def _parse_location(raw: Any) -> Location | None:
    if not isinstance(raw, dict):
        return None
    try:
        return Location(latitude=float(raw["latitude"]), longitude=float(raw["longitude"]))
    except (KeyError, TypeError, ValueError):
        return None


def _opt_str(raw: Any) -> str | None:
    if raw is None:
        return None
    s = str(raw)
    return s or None


def task_to_record(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "title": task.title,
        "category": task.category,
        "priority": task.priority.value,
        "deadline": _deadline_to_str(task.deadline),
        "isChecked": task.is_checked,
        "notificationId": task.notification_id,
        "location": (
            {"latitude": float(task.location.latitude), "longitude": float(task.location.longitude)}
            if task.location is not None
            else None
        ),
        "audioNote": task.audio_note,
        "attachedFile": task.attached_file,
    }


def record_to_task(record: Any) -> Task | None:
    """Decode one record; returns None when it lacks a usable id or title."""
    if not isinstance(record, dict):
        return None

    raw_id = record.get("id")
    if isinstance(raw_id, bool) or not isinstance(raw_id, (int, float, str)):
        return None
    try:
        task_id = int(raw_id)
    except (ValueError, OverflowError):
        return None

    title = record.get("title")
    if not isinstance(title, str) or not title.strip():
        return None

    deadline = _parse_deadline(record.get("deadline"))
    if deadline is None:
        # Tasks without a readable deadline are kept; the deadline is pinned
        # to the creation instant encoded in the id.
        deadline = _parse_deadline(max(task_id, 0)) or datetime.fromtimestamp(0, UTC)

    return Task(
        id=task_id,
        title=title,
        deadline=deadline,
        category=str(record.get("category") or ""),
        priority=Priority.from_db(record.get("priority")),
        is_checked=bool(record.get("isChecked", False)),
        notification_id=_opt_str(record.get("notificationId")),
        location=_parse_location(record.get("location")),
        audio_note=_opt_str(record.get("audioNote")),
        attached_file=_opt_str(record.get("attachedFile")),
    )


def encode_snapshot(tasks: Iterable[Task]) -> bytes:
    records = [task_to_record(t) for t in tasks]
    return json.dumps(records, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def decode_snapshot(raw: bytes) -> list[Task]:
    """
    Decode a stored snapshot.

    Raises SnapshotDecodeError when the payload is not a JSON array.
    Individual unusable records (and duplicate ids) are skipped with a warning.
    """
    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise SnapshotDecodeError(f"snapshot is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise SnapshotDecodeError(f"snapshot must be a JSON array, got {type(data).__name__}")

    out: list[Task] = []
    seen: set[int] = set()
    for i, record in enumerate(data):
        task = record_to_task(record)
        if task is None:
            logger.warning("Skipping unreadable task record #%d", i)
            continue
        if task.id in seen:
            logger.warning("Skipping duplicate task id=%s (record #%d)", task.id, i)
            continue
        seen.add(task.id)
        out.append(task)
    return out
