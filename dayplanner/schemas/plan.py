# schemas/plan.py
from typing import List, Optional
from uuid import UUID
from datetime import date, datetime

from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator

from dayplanner.core.timeutils import is_valid_time, time_to_minutes


# ----------------------
# PlanBlock Schemas
# ----------------------

def _clean_activity(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError('Activity is required')
    return v


def _clean_topic(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    return v.strip() or None


class PlanBlockBase(BaseModel):
    start_time: str = Field(..., description="Block start, HH:mm (24-hour)")
    end_time: str = Field(..., description="Block end, HH:mm (24-hour)")
    activity: str = Field(..., min_length=1, max_length=200)
    topic: Optional[str] = Field(None, max_length=200)

    @field_validator('start_time', 'end_time')
    @classmethod
    def validate_time(cls, v: str) -> str:
        if not is_valid_time(v):
            raise ValueError('Time must be in HH:mm format')
        return v

    @field_validator('activity')
    @classmethod
    def strip_activity(cls, v: str) -> str:
        return _clean_activity(v)

    @field_validator('topic')
    @classmethod
    def strip_topic(cls, v: Optional[str]) -> Optional[str]:
        return _clean_topic(v)

    @model_validator(mode='after')
    def check_order(self):
        if time_to_minutes(self.start_time) >= time_to_minutes(self.end_time):
            raise ValueError('Start time must be before end time')
        return self


class PlanBlockCreate(PlanBlockBase):
    pass


class PlanBlockUpdate(BaseModel):
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    activity: Optional[str] = Field(None, min_length=1, max_length=200)
    topic: Optional[str] = Field(None, max_length=200)

    # omitted fields are left alone; only topic may be cleared with null
    @field_validator('start_time', 'end_time', 'activity', mode='before')
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError('Field cannot be null')
        return v

    @field_validator('start_time', 'end_time')
    @classmethod
    def validate_time(cls, v: str) -> str:
        if not is_valid_time(v):
            raise ValueError('Time must be in HH:mm format')
        return v

    @field_validator('activity')
    @classmethod
    def strip_activity(cls, v: str) -> str:
        return _clean_activity(v)

    @field_validator('topic')
    @classmethod
    def strip_topic(cls, v: Optional[str]) -> Optional[str]:
        return _clean_topic(v)


class PlanBlockOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    plan_id: UUID
    start_time: str
    end_time: str
    activity: str
    topic: Optional[str] = None
    order: int


# ----------------------
# Plan Schemas
# ----------------------

class PlanCreate(BaseModel):
    title: str = Field(..., max_length=100)
    date: Optional[date] = None
    blocks: List[PlanBlockCreate] = Field(default_factory=list)

    @field_validator('title')
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('Plan title is required')
        return v


class PlanUpdate(BaseModel):
    """Any subset of fields; `blocks` replaces the whole block list."""
    title: Optional[str] = Field(None, max_length=100)
    active: Optional[bool] = None
    date: Optional[date] = None
    blocks: Optional[List[PlanBlockCreate]] = None

    @field_validator('title')
    @classmethod
    def strip_title(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError('Plan title cannot be empty')
        return v


class PlanOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    title: str
    date: Optional[date] = None
    active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PlanDetail(PlanOut):
    blocks: List[PlanBlockOut] = Field(default_factory=list)


class PlanSummary(PlanOut):
    block_count: int = 0
