# crud/task_log.py
import logging
from typing import Optional, List, Dict, Any
from uuid import UUID
from datetime import date, datetime
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified
from sqlalchemy.exc import IntegrityError

from dayplanner.core.exceptions import DatabaseConflictError
from dayplanner.models.task_log import TaskLog, TaskStatus

logger = logging.getLogger(__name__)

UNRESOLVED_STATUSES = (TaskStatus.pending, TaskStatus.snoozed)


class CRUDTaskLog:
    """
    Store for per-(user, block, date) interaction records.

    The (user_id, plan_block_id, date) triple is unique at the table
    level, so concurrent creators race safely: the loser gets a
    DatabaseConflictError instead of a duplicate row.
    """

    # ====================================================
    # CREATE
    # ====================================================

    def create(
        self,
        db: Session,
        *,
        user_id: UUID,
        plan_block_id: UUID,
        day: date,
        status: TaskStatus = TaskStatus.pending,
        snooze_count: int = 0,
        snooze_history: Optional[List[Dict[str, Any]]] = None,
        completed_at: Optional[datetime] = None,
        points_earned: int = 0,
        last_notified_at: Optional[datetime] = None,
    ) -> TaskLog:
        task_log = TaskLog(
            user_id=user_id,
            plan_block_id=plan_block_id,
            date=day,
            status=status,
            snooze_count=snooze_count,
            snooze_history=list(snooze_history or []),
            completed_at=completed_at,
            points_earned=points_earned,
            last_notified_at=last_notified_at,
        )
        db.add(task_log)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            logger.info(
                f"Task log for user {user_id}, block {plan_block_id} on {day} already exists"
            )
            raise DatabaseConflictError("Task log already exists for this block and date") from e
        db.refresh(task_log)
        return task_log

    # ====================================================
    # READ
    # ====================================================

    def get(
        self, db: Session, *, user_id: UUID, plan_block_id: UUID, day: date
    ) -> Optional[TaskLog]:
        return (
            db.query(TaskLog)
            .filter(TaskLog.user_id == user_id)
            .filter(TaskLog.plan_block_id == plan_block_id)
            .filter(TaskLog.date == day)
            .first()
        )

    def list_for_date(self, db: Session, *, user_id: UUID, day: date) -> List[TaskLog]:
        return (
            db.query(TaskLog)
            .filter(TaskLog.user_id == user_id)
            .filter(TaskLog.date == day)
            .order_by(TaskLog.created_at.asc())
            .all()
        )

    def list_for_date_range(
        self, db: Session, *, user_id: UUID, start_date: date, end_date: date
    ) -> List[TaskLog]:
        """Logs between two dates, both inclusive."""
        return (
            db.query(TaskLog)
            .filter(TaskLog.user_id == user_id)
            .filter(TaskLog.date >= start_date)
            .filter(TaskLog.date <= end_date)
            .order_by(TaskLog.date.asc(), TaskLog.created_at.asc())
            .all()
        )

    def count_for_date(self, db: Session, *, user_id: UUID, day: date) -> int:
        return (
            db.query(TaskLog)
            .filter(TaskLog.user_id == user_id)
            .filter(TaskLog.date == day)
            .count()
        )

    def list_unresolved(self, db: Session, *, user_id: UUID, up_to: date) -> List[TaskLog]:
        """Pending or snoozed logs dated on or before `up_to`."""
        return (
            db.query(TaskLog)
            .filter(TaskLog.user_id == user_id)
            .filter(TaskLog.date <= up_to)
            .filter(TaskLog.status.in_(UNRESOLVED_STATUSES))
            .order_by(TaskLog.date.asc())
            .all()
        )

    # ====================================================
    # UPDATE
    # ====================================================

    def update(self, db: Session, *, db_obj: TaskLog, **fields: Any) -> TaskLog:
        for field, value in fields.items():
            setattr(db_obj, field, value)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def append_snooze(
        self, db: Session, *, db_obj: TaskLog, snoozed_at: datetime, duration_minutes: int
    ) -> TaskLog:
        history = list(db_obj.snooze_history or [])
        history.append(
            {"snoozed_at": snoozed_at.isoformat(), "duration_minutes": duration_minutes}
        )
        db_obj.snooze_history = history
        db_obj.snooze_count = (db_obj.snooze_count or 0) + 1
        db_obj.status = TaskStatus.snoozed
        flag_modified(db_obj, "snooze_history")
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def mark_notified(self, db: Session, *, db_obj: TaskLog, notified_at: datetime) -> TaskLog:
        db_obj.last_notified_at = notified_at
        db.commit()
        db.refresh(db_obj)
        return db_obj


# Instantiate a reusable object
crud_task_log = CRUDTaskLog()
