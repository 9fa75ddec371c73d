# models/daily_reflection.py

import enum
import uuid
from datetime import datetime, timezone
from sqlalchemy import (
    Column, Date, DateTime, Integer, ForeignKey, UniqueConstraint, Uuid,
    Enum as SqlEnum
)
from sqlalchemy.orm import relationship
from dayplanner.core.config import Base


class Mood(enum.Enum):
    great = "great"
    okay = "okay"
    bad = "bad"


class DailyReflection(Base):
    __tablename__ = "daily_reflections"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    mood = Column(SqlEnum(Mood), nullable=False)

    # Snapshot of the day's stats at submission time
    discipline_score = Column(Integer, default=0, nullable=False)
    tasks_completed = Column(Integer, default=0, nullable=False)
    tasks_missed = Column(Integer, default=0, nullable=False)
    total_snoozes = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                        onupdate=lambda: datetime.now(timezone.utc))

    user = relationship("User", back_populates="reflections")

    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_daily_reflection_user_date"),
    )
