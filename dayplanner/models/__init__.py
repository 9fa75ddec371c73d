# dayplanner/models/__init__.py

from dayplanner.core.config import Base

# Import all models here so metadata.create_all and app-wide imports see every table
from .user import User, ReminderChannel
from .plan import Plan, PlanBlock
from .task_log import TaskLog, TaskStatus
from .daily_reflection import DailyReflection, Mood

__all__ = [
    "Base",
    "User",
    "ReminderChannel",
    "Plan",
    "PlanBlock",
    "TaskLog",
    "TaskStatus",
    "DailyReflection",
    "Mood",
]
