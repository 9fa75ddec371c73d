# schemas/discipline.py
from typing import List, Optional
from datetime import date

from pydantic import BaseModel, Field

from dayplanner.models.daily_reflection import Mood


class ScoreBreakdown(BaseModel):
    total_points: int = 0
    max_possible_points: int = 0
    percentage: int = 0
    completed_on_time: int = 0
    completed_late: int = 0
    snoozed: int = 0
    missed: int = 0
    total_snoozes: int = 0


class ScoreFeedback(BaseModel):
    emoji: str
    message: str


class DailyScore(BaseModel):
    date: date
    score: int


class TodayScore(BaseModel):
    score: int
    breakdown: ScoreBreakdown
    feedback: ScoreFeedback


class WeeklyScore(BaseModel):
    average: int
    best_day: str
    daily_scores: List[DailyScore] = Field(default_factory=list)


class ReflectionScore(BaseModel):
    date: date
    mood: Mood
    score: int


class DisciplineSummary(BaseModel):
    today: TodayScore
    weekly: WeeklyScore
    recent_reflections: List[ReflectionScore] = Field(default_factory=list)
    denominator: str
