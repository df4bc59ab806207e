"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskDraft, extras)
- task_codec.py: JSON snapshot encode/decode
- task_store.py: in-memory collection + persistence + reminder bookkeeping
- reminders.py: deadline reminders over the OS notification service
- attachments.py: per-task copies of attached files
- task_filter.py: title/category filtering
- task_api.py: small high-level helpers used by the rest of the app
"""
