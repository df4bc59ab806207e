# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.

All paths default to locations under POCKET_DATA_DIR.
"""

ENV_VARS = {
    # App / logging
    "POCKET_APP_NAME": "App display name (default: pocket-tasks).",
    "POCKET_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Paths (gitignored)
    "POCKET_DATA_DIR": "Local data directory (default: .local/pocket_tasks).",
    "POCKET_DB_PATH": "SQLite key-value file holding the task snapshot (default: <data_dir>/pocket_tasks.sqlite3).",
    "POCKET_ATTACHMENTS_DIR": "Root for copied attachments, <dir>/tasks/<id>/ (default: <data_dir>/documents).",
    # Storage
    "POCKET_STORAGE_KEY": "Key under which the task snapshot is stored (default: tasks).",
    # Reminders
    "POCKET_REMINDER_TITLE": "Title of deadline notifications (default: Task Reminder).",
    "POCKET_REMINDER_SOUND": "Play a sound with reminders (true/false, default: true).",
}
