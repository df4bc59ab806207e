# src/pocket_tasks/tasks/attachments.py

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from urllib.parse import unquote, urlparse

from ..core.errors import CapabilityDenied, ValidationError
from ..core.ports import FilePicker, FileSystem
from .task_models import FileDescriptor

logger = logging.getLogger(__name__)


def source_file_name(source_uri: str) -> str:
    """
    Last path segment of a file path or URI.

    "file:///cache/Doc%20A.pdf" -> "Doc A.pdf", "/tmp/a.txt" -> "a.txt".
    """
    raw = (source_uri or "").strip()
    parsed = urlparse(raw)
    # Windows drive letters parse as a one-letter scheme.
    path = parsed.path if parsed.scheme and len(parsed.scheme) > 1 else raw
    name = PurePosixPath(unquote(path).replace("\\", "/")).name
    if not name or name in (".", ".."):
        raise ValidationError(f"cannot derive a file name from {source_uri!r}")
    return name


def source_local_path(source_uri: str) -> str:
    parsed = urlparse(source_uri)
    if parsed.scheme == "file":
        return unquote(parsed.path)
    return source_uri


class AttachmentManager:
    """
    Copies picked files into a per-task directory:

        <base_dir>/tasks/<task_id>/<file name>

    Directories are created lazily and are not removed when the task is
    deleted. Two attachments with the same file name for the same task
    overwrite each other.
    """

    def __init__(
        self,
        fs: FileSystem,
        base_dir: str | Path,
        *,
        picker: FilePicker | None = None,
    ) -> None:
        self._fs = fs
        self._base_dir = Path(base_dir)
        self._picker = picker

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def task_directory(self, task_id: int) -> Path:
        return self._base_dir / "tasks" / str(int(task_id))

    async def pick_source(self) -> FileDescriptor | None:
        if self._picker is None:
            raise CapabilityDenied("files", "no file picker available")
        picked = await self._picker.pick()
        if picked is None:
            logger.debug("File picker dismissed")
        return picked

    async def persist_to_task(self, task_id: int, source_uri: str) -> str:
        """Copy (never move) source_uri into the task directory; returns the new path."""
        name = source_file_name(source_uri)
        task_dir = self.task_directory(task_id)
        await self._fs.make_directory(task_dir)

        dst = task_dir / name
        await self._fs.copy(source_local_path(source_uri), dst)
        logger.info("Attachment copied task_id=%s -> %s", task_id, dst)
        return str(dst)
