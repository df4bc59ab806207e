# src/pocket_tasks/tasks/task_models.py

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from ..core.errors import ValidationError


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def from_db(cls, raw: Any) -> Priority:
        """
        Decode a stored priority.

        Accepts the canonical values (any case) and the labels written by the
        first mobile release (Düşük / Orta / Yüksek). Anything else is medium.
        """
        if not raw or not isinstance(raw, str):
            return cls.MEDIUM
        key = raw.strip().lower()
        legacy = _LEGACY_PRIORITY.get(key)
        if legacy is not None:
            return legacy
        try:
            return cls(key)
        except ValueError:
            return cls.MEDIUM


_LEGACY_PRIORITY = {
    "düşük": Priority.LOW,
    "orta": Priority.MEDIUM,
    "yüksek": Priority.HIGH,
}


def to_utc(dt: datetime) -> datetime:
    """Normalize to an aware UTC datetime (naive values are taken as local time)."""
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt.astimezone(UTC)


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True, frozen=True)
class Location:
    latitude: float
    longitude: float


@dataclass(slots=True, frozen=True)
class Task:
    id: int
    title: str
    deadline: datetime

    category: str = ""
    priority: Priority = Priority.MEDIUM
    is_checked: bool = False

    # Set only while a reminder is scheduled for this task.
    notification_id: str | None = None

    location: Location | None = None
    audio_note: str | None = None
    attached_file: str | None = None

    @property
    def has_reminder(self) -> bool:
        return self.notification_id is not None


@dataclass(slots=True, frozen=True)
class TaskDraft:
    """User input for a new task; id and reminder handle are assigned by the store."""

    title: str
    deadline: datetime
    category: str = ""
    priority: Priority = Priority.MEDIUM


@dataclass(slots=True, frozen=True)
class FileDescriptor:
    """What a file picker hands back: display name, source URI, byte size."""

    name: str
    uri: str
    size: int | None = None


# ---- extras (tagged variant merged into an existing task) ----


@dataclass(slots=True, frozen=True)
class LocationExtra:
    location: Location

    def validate(self) -> None:
        lat, lon = self.location.latitude, self.location.longitude
        if not (-90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0):
            raise ValidationError(f"location out of range: lat={lat} lon={lon}")

    def changes(self) -> dict[str, Any]:
        return {"location": self.location}


@dataclass(slots=True, frozen=True)
class AudioNoteExtra:
    uri: str

    def validate(self) -> None:
        if not self.uri or not self.uri.strip():
            raise ValidationError("audio note uri is required")

    def changes(self) -> dict[str, Any]:
        return {"audio_note": self.uri}


@dataclass(slots=True, frozen=True)
class AttachedFileExtra:
    path: str

    def validate(self) -> None:
        if not self.path or not self.path.strip():
            raise ValidationError("attached file path is required")

    def changes(self) -> dict[str, Any]:
        return {"attached_file": self.path}


# Fields a GenericExtra may touch. id/notification_id are owned by the store,
# deadline changes go through TaskStore.edit() so the reminder follows.
MERGEABLE_FIELDS = frozenset(
    {"title", "category", "priority", "is_checked", "location", "audio_note", "attached_file"}
)


@dataclass(slots=True, frozen=True)
class GenericExtra:
    """
    Arbitrary field updates, e.g. {"category": "Home", "location": {...}}.

    A location may be a Location or a {"latitude", "longitude"} mapping; a
    priority may be a Priority or its string value.
    """

    fields: dict[str, Any] = field(default_factory=dict)

    def validate(self) -> None:
        self.changes()

    def changes(self) -> dict[str, Any]:
        unknown = sorted(set(self.fields) - MERGEABLE_FIELDS)
        if unknown:
            raise ValidationError(f"fields cannot be merged: {', '.join(unknown)}")

        out: dict[str, Any] = {}
        for name, value in self.fields.items():
            if name == "title":
                if not isinstance(value, str) or not value.strip():
                    raise ValidationError("title is required")
            elif name == "category":
                if not isinstance(value, str):
                    raise ValidationError("category must be a string")
            elif name == "is_checked":
                if not isinstance(value, bool):
                    raise ValidationError("is_checked must be a bool")
            elif name == "priority":
                value = _coerce_priority(value)
            elif name == "location":
                value = _coerce_location(value)
            elif value is not None and not isinstance(value, str):
                raise ValidationError(f"{name} must be a string or None")
            out[name] = value
        return out


def _coerce_priority(value: Any) -> Priority:
    if isinstance(value, Priority):
        return value
    if isinstance(value, str):
        try:
            return Priority(value.strip().lower())
        except ValueError:
            pass
    raise ValidationError(f"unknown priority: {value!r}")


def _coerce_location(value: Any) -> Location | None:
    if value is None:
        return None
    if isinstance(value, Mapping):
        try:
            lat, lon = value["latitude"], value["longitude"]
        except KeyError as e:
            raise ValidationError(f"location is missing {e.args[0]}") from e
        if not all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in (lat, lon)):
            raise ValidationError("location coordinates must be numbers")
        value = Location(latitude=float(lat), longitude=float(lon))
    if not isinstance(value, Location):
        raise ValidationError(f"location must be a Location or a mapping, got {type(value).__name__}")
    LocationExtra(value).validate()
    return value


Extra = LocationExtra | AudioNoteExtra | AttachedFileExtra | GenericExtra
