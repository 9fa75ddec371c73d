# services/reflection.py
import logging
from datetime import date, datetime
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from dayplanner.core.timeutils import local_date, utc_now
from dayplanner.crud.daily_reflection import crud_daily_reflection
from dayplanner.crud.task_log import crud_task_log
from dayplanner.models.daily_reflection import DailyReflection, Mood
from dayplanner.models.task_log import TaskStatus
from dayplanner.models.user import User
from dayplanner.schemas.reflection import ReflectionStats
from dayplanner.services.discipline import DisciplineService, discipline_service

logger = logging.getLogger(__name__)


class ReflectionService:

    def __init__(self, discipline: DisciplineService = discipline_service):
        self.discipline = discipline

    def day_stats(self, db: Session, *, user: User, day: date) -> ReflectionStats:
        logs = crud_task_log.list_for_date(db, user_id=user.id, day=day)
        return ReflectionStats(
            discipline_score=self.discipline.score_for_date(db, user=user, day=day).percentage,
            tasks_completed=sum(1 for log in logs if log.status is TaskStatus.completed),
            tasks_missed=sum(1 for log in logs if log.status is TaskStatus.missed),
            total_snoozes=sum(log.snooze_count or 0 for log in logs),
        )

    def submit(
        self,
        db: Session,
        *,
        user: User,
        mood: Mood,
        day: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> Tuple[DailyReflection, bool]:
        """
        Record the mood for a day (today in the user's zone by default).

        Returns the reflection and whether it was newly created. A second
        submission for the same day overwrites mood and stats.
        """
        day = day or local_date(user.timezone, now or utc_now())
        created = crud_daily_reflection.get_by_user_and_date(db, user_id=user.id, day=day) is None
        stats = self.day_stats(db, user=user, day=day)
        reflection = crud_daily_reflection.upsert(
            db, user_id=user.id, day=day, mood=mood, stats=stats
        )
        logger.info(f"Reflection {'saved' if created else 'updated'} for user {user.id} on {day}")
        return reflection, created

    def list_history(self, db: Session, *, user: User, limit: int = 30) -> List[DailyReflection]:
        return crud_daily_reflection.list_recent(db, user_id=user.id, limit=limit)


# Create singleton instance
reflection_service = ReflectionService()
