# models/plan.py

import uuid
from datetime import datetime, timezone
from sqlalchemy import (
    Column, String, Boolean, Date, DateTime, Integer, ForeignKey, Index, Uuid
)
from sqlalchemy.orm import relationship
from dayplanner.core.config import Base


class Plan(Base):
    __tablename__ = "plans"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(100), nullable=False)
    date = Column(Date, nullable=True)  # optional calendar-day binding
    active = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                        onupdate=lambda: datetime.now(timezone.utc))

    # Relationships
    blocks = relationship(
        "PlanBlock",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="PlanBlock.order",
    )
    user = relationship("User", back_populates="plans")

    __table_args__ = (
        Index("ix_plans_user_active", "user_id", "active"),
    )


class PlanBlock(Base):
    __tablename__ = "plan_blocks"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    plan_id = Column(Uuid(as_uuid=True), ForeignKey("plans.id", ondelete="CASCADE"), nullable=False, index=True)
    start_time = Column(String(5), nullable=False)  # HH:mm
    end_time = Column(String(5), nullable=False)  # HH:mm
    activity = Column(String(200), nullable=False)
    topic = Column(String(200), nullable=True)
    order = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                        onupdate=lambda: datetime.now(timezone.utc))

    plan = relationship("Plan", back_populates="blocks")

    __table_args__ = (
        Index("ix_plan_blocks_plan_order", "plan_id", "order"),
    )
