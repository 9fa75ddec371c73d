# models/task_log.py

import enum
import uuid
from datetime import datetime, timezone
from sqlalchemy import (
    Column, Date, DateTime, Integer, JSON, ForeignKey, Index, UniqueConstraint, Uuid,
    Enum as SqlEnum
)
from sqlalchemy.orm import relationship
from dayplanner.core.config import Base


class TaskStatus(enum.Enum):
    pending = "pending"
    completed = "completed"
    snoozed = "snoozed"
    missed = "missed"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.completed, TaskStatus.missed)


class TaskLog(Base):
    """One row per (user, plan block, local date): how the user responded to that block."""

    __tablename__ = "task_logs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    plan_block_id = Column(Uuid(as_uuid=True), nullable=False)
    date = Column(Date, nullable=False)

    status = Column(SqlEnum(TaskStatus), default=TaskStatus.pending, nullable=False)
    snooze_count = Column(Integer, default=0, nullable=False)
    snooze_history = Column(JSON, default=list, nullable=False)  # [{"snoozed_at": iso, "duration_minutes": int}]
    completed_at = Column(DateTime(timezone=True), nullable=True)
    points_earned = Column(Integer, default=0, nullable=False)
    last_notified_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                        onupdate=lambda: datetime.now(timezone.utc))

    user = relationship("User", back_populates="task_logs")

    __table_args__ = (
        UniqueConstraint("user_id", "plan_block_id", "date", name="uq_task_log_user_block_date"),
        Index("ix_task_logs_user_date", "user_id", "date"),
    )
