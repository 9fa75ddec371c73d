# schemas/task_log.py
from typing import List, Literal, Optional
from uuid import UUID
from datetime import date, datetime

from pydantic import BaseModel, Field, ConfigDict, field_validator

from dayplanner.models.task_log import TaskStatus


class SnoozeEntry(BaseModel):
    snoozed_at: datetime
    duration_minutes: int


class TaskLogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    plan_block_id: UUID
    date: date
    status: TaskStatus
    snooze_count: int
    snooze_history: List[SnoozeEntry] = Field(default_factory=list)
    completed_at: Optional[datetime] = None
    points_earned: int
    last_notified_at: Optional[datetime] = None


# ----------------------
# Current / next task views
# ----------------------

class NextTaskView(BaseModel):
    id: UUID
    activity: str
    topic: Optional[str] = None
    start_time: str
    end_time: str


class CurrentTaskView(NextTaskView):
    remaining_minutes: int
    remaining_formatted: str = Field(..., description='"Xh Ym" or "Ym"')
    snooze_count: int = 0
    status: TaskStatus = TaskStatus.pending


class CurrentTaskResponse(BaseModel):
    current_task: Optional[CurrentTaskView] = None
    next_task: Optional[NextTaskView] = None
    current_time: Optional[str] = None
    timezone: Optional[str] = None
    message: Optional[str] = None


# ----------------------
# Actions
# ----------------------

SnoozeDuration = Literal[10, 30, "next"]


class SnoozeRequest(BaseModel):
    duration: SnoozeDuration = Field(..., description='10, 30, or "next" (until the next task ends)')

    @field_validator('duration', mode='before')
    @classmethod
    def coerce_numeric_string(cls, v):
        if isinstance(v, str) and v.strip().isdigit():
            return int(v)
        return v


class MarkDoneResponse(BaseModel):
    message: str
    points_earned: int
    on_time: bool
    task_log: TaskLogOut


class SnoozeResponse(BaseModel):
    message: str
    snooze_count: int
    snooze_duration: int
    feedback_message: Optional[str] = None
    task_log: TaskLogOut
