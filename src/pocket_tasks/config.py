# src/pocket_tasks/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Nothing below the composition root reads the environment itself.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "POCKET"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths ----
    data_dir: Path
    db_path: Path
    attachments_dir: Path

    # ---- Storage ----
    storage_key: str

    # ---- Reminders ----
    reminder_title: str
    reminder_sound: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "pocket-tasks").strip() or "pocket-tasks"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/pocket_tasks"))
        db_path = _env_path(_k("DB_PATH"), data_dir / "pocket_tasks.sqlite3")
        # Attachments go to <attachments_dir>/tasks/<id>/
        attachments_dir = _env_path(_k("ATTACHMENTS_DIR"), data_dir / "documents")

        storage_key = _env(_k("STORAGE_KEY"), "tasks").strip() or "tasks"

        reminder_title = _env(_k("REMINDER_TITLE"), "Task Reminder")
        reminder_sound = _env_bool(_k("REMINDER_SOUND"), True)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            db_path=db_path,
            attachments_dir=attachments_dir,
            storage_key=storage_key,
            reminder_title=reminder_title,
            reminder_sound=reminder_sound,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    """Process-wide settings; .env is read (without overriding the real environment) on first use."""
    global _SETTINGS
    if _SETTINGS is None:
        load_dotenv(override=False)
        _SETTINGS = Settings.from_env()
    return _SETTINGS
