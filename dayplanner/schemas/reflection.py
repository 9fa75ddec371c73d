# schemas/reflection.py
from typing import Optional
from uuid import UUID
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict

from dayplanner.models.daily_reflection import Mood


class DailyReflectionCreate(BaseModel):
    mood: Mood
    date: Optional[date] = None


class ReflectionStats(BaseModel):
    discipline_score: int = 0
    tasks_completed: int = 0
    tasks_missed: int = 0
    total_snoozes: int = 0


class DailyReflectionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    date: date
    mood: Mood
    discipline_score: int
    tasks_completed: int
    tasks_missed: int
    total_snoozes: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ReflectionSubmitResponse(BaseModel):
    message: str
    reflection: DailyReflectionOut
