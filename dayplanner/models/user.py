# models/user.py

import enum
import uuid
from datetime import datetime, timezone
from sqlalchemy import (
    Column, String, Boolean, DateTime, Integer, Uuid
)
from sqlalchemy.orm import relationship
from dayplanner.core.config import Base

class User(Base):
    __tablename__ = "users"

    # ---- Base fields ----
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    email_verified = Column(Boolean, default=False, nullable=False)
    timezone = Column(String(64), default="UTC", nullable=False)

    # ---- Reminder channels ----
    reminder_email = Column(Boolean, default=True, nullable=False)
    reminder_telegram = Column(Boolean, default=False, nullable=False)
    telegram_chat_id = Column(String(64), nullable=True)

    # ---- Cached discipline snapshot (rewritten on every score computation) ----
    discipline_today = Column(Integer, default=0, nullable=False)
    discipline_weekly_average = Column(Integer, default=0, nullable=False)
    discipline_best_day = Column(String(16), default="", nullable=False)
    discipline_last_updated = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                        onupdate=lambda: datetime.now(timezone.utc))

    # ---- Relationships ----
    plans = relationship("Plan", back_populates="user", cascade="all, delete-orphan")
    task_logs = relationship("TaskLog", back_populates="user", cascade="all, delete-orphan")
    reflections = relationship("DailyReflection", back_populates="user", cascade="all, delete-orphan")

class ReminderChannel(enum.Enum):
    email = "email"
    telegram = "telegram"
