from .user import crud_user
from .plan import crud_plan
from .task_log import crud_task_log
from .daily_reflection import crud_daily_reflection

__all__ = ["crud_user", "crud_plan", "crud_task_log", "crud_daily_reflection"]
