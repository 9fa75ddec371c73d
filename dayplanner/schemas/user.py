# schemas/user.py
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional
from datetime import datetime
from uuid import UUID


# =====================================================================
# 1. INPUT SCHEMAS
# =====================================================================

class UserCreate(BaseModel):
    email: str = Field(..., max_length=255)
    email_verified: bool = False
    timezone: str = "UTC"
    reminder_email: bool = True
    reminder_telegram: bool = False
    telegram_chat_id: Optional[str] = None

    @field_validator('email')
    @classmethod
    def validate_email(cls, v: str) -> str:
        if '@' not in v or '.' not in v.split('@')[-1]:
            raise ValueError('Invalid email address')
        return v.strip().lower()


class UserSettingsUpdate(BaseModel):
    """Partial update of reminder preferences and timezone."""
    timezone: Optional[str] = None
    reminder_email: Optional[bool] = None
    reminder_telegram: Optional[bool] = None
    telegram_chat_id: Optional[str] = None
    email_verified: Optional[bool] = None

    # only telegram_chat_id may be cleared with null
    @field_validator('timezone', 'reminder_email', 'reminder_telegram', 'email_verified', mode='before')
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError('Field cannot be null')
        return v


# =====================================================================
# 2. OUTPUT SCHEMAS
# =====================================================================


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    email_verified: bool
    timezone: str
    reminder_email: bool
    reminder_telegram: bool
    telegram_chat_id: Optional[str] = None
    discipline_today: int
    discipline_weekly_average: int
    discipline_best_day: str
    discipline_last_updated: Optional[datetime] = None
    created_at: Optional[datetime] = None


class TimezoneOption(BaseModel):
    value: str
    label: str
