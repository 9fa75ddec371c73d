# schemas/reminder.py
from typing import Optional
from datetime import datetime

from pydantic import BaseModel


class ReminderPayload(BaseModel):
    """What a notification channel needs to announce a block."""
    start_time: str
    end_time: str
    activity: str
    topic: Optional[str] = None


class ReminderRunResult(BaseModel):
    timestamp: datetime
    users_checked: int = 0
    reminders_processed: int = 0
    reminders_sent: int = 0
    reminders_failed: int = 0
    logs_created: int = 0
    tasks_marked_missed: int = 0
    user_errors: int = 0


class ReflectionRunResult(BaseModel):
    timestamp: datetime
    users_checked: int = 0
    reflections_sent: int = 0
    reflections_failed: int = 0
    user_errors: int = 0
