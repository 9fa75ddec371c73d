# dayplanner/schemas/__init__.py

from .user import (
    UserCreate,
    UserSettingsUpdate,
    UserOut,
    TimezoneOption,
)
from .plan import (
    PlanBlockBase,
    PlanBlockCreate,
    PlanBlockUpdate,
    PlanBlockOut,
    PlanCreate,
    PlanUpdate,
    PlanOut,
    PlanDetail,
    PlanSummary,
)
from .task_log import (
    SnoozeEntry,
    TaskLogOut,
    NextTaskView,
    CurrentTaskView,
    CurrentTaskResponse,
    SnoozeRequest,
    MarkDoneResponse,
    SnoozeResponse,
)
from .discipline import (
    ScoreBreakdown,
    ScoreFeedback,
    DailyScore,
    TodayScore,
    WeeklyScore,
    ReflectionScore,
    DisciplineSummary,
)
from .reflection import (
    DailyReflectionCreate,
    DailyReflectionOut,
    ReflectionStats,
    ReflectionSubmitResponse,
)
from .reminder import (
    ReminderPayload,
    ReminderRunResult,
    ReflectionRunResult,
)


__all__ = [
    # Users
    "UserCreate", "UserSettingsUpdate", "UserOut", "TimezoneOption",

    # Plans
    "PlanBlockBase", "PlanBlockCreate", "PlanBlockUpdate", "PlanBlockOut",
    "PlanCreate", "PlanUpdate", "PlanOut", "PlanDetail", "PlanSummary",

    # Tasks
    "SnoozeEntry", "TaskLogOut", "NextTaskView", "CurrentTaskView",
    "CurrentTaskResponse", "SnoozeRequest", "MarkDoneResponse", "SnoozeResponse",

    # Discipline
    "ScoreBreakdown", "ScoreFeedback", "DailyScore", "TodayScore",
    "WeeklyScore", "ReflectionScore", "DisciplineSummary",

    # Reflections
    "DailyReflectionCreate", "DailyReflectionOut", "ReflectionStats",
    "ReflectionSubmitResponse",

    # Reminders
    "ReminderPayload", "ReminderRunResult", "ReflectionRunResult",
]
