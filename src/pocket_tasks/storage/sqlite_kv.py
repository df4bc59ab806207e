# src/pocket_tasks/storage/sqlite_kv.py

from __future__ import annotations

import asyncio
import contextlib
import logging
import sqlite3
import time
from pathlib import Path

from ..core.errors import PersistenceError

logger = logging.getLogger(__name__)


class SqliteKeyValueStorage:
    """
    SQLite key-value backend for the task snapshot.

    One table, `kv(key, value, updated_at)`, created on first open.

    Each call opens its own connection and runs in a worker thread, so the
    event loop is never blocked on disk I/O. A write replaces the whole value
    in a single transaction; a failed write leaves the previous value intact.
    """

    def __init__(self, db_path: str | Path = "pocket_tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info("SqliteKeyValueStorage ready db=%s", self._db_path)

    @property
    def db_path(self) -> Path:
        return self._db_path

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value BLOB NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    def _read_sync(self, key: str) -> bytes | None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT value FROM kv WHERE key = ?", (key,))
            row = cur.fetchone()
            if row is None:
                return None
            value = row["value"]
            return value.encode("utf-8") if isinstance(value, str) else bytes(value)
        finally:
            conn.close()

    def _write_sync(self, key: str, value: bytes) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO kv(key, value, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, sqlite3.Binary(value), time.time()),
            )
            conn.commit()
        finally:
            conn.close()

    # ---- public API ----

    async def read(self, key: str) -> bytes | None:
        try:
            return await asyncio.to_thread(self._read_sync, key)
        except sqlite3.Error as e:
            raise PersistenceError(f"read failed key={key}: {e}") from e

    async def write(self, key: str, value: bytes) -> None:
        try:
            await asyncio.to_thread(self._write_sync, key, value)
        except sqlite3.Error as e:
            raise PersistenceError(f"write failed key={key}: {e}") from e
        logger.debug("kv write key=%s bytes=%d", key, len(value))
