"""Personal task list with deadline reminders and attachments."""

__version__ = "0.1.0"
