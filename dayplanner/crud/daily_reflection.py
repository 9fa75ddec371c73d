# crud/daily_reflection.py
from typing import Optional, List
from uuid import UUID
from datetime import date
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from dayplanner.models.daily_reflection import DailyReflection, Mood
from dayplanner.schemas.reflection import ReflectionStats


class CRUDDailyReflection:

    def get_by_user_and_date(
        self, db: Session, *, user_id: UUID, day: date
    ) -> Optional[DailyReflection]:
        return (
            db.query(DailyReflection)
            .filter(DailyReflection.user_id == user_id)
            .filter(DailyReflection.date == day)
            .first()
        )

    def list_recent(self, db: Session, *, user_id: UUID, limit: int = 30) -> List[DailyReflection]:
        """Newest first."""
        return (
            db.query(DailyReflection)
            .filter(DailyReflection.user_id == user_id)
            .order_by(DailyReflection.date.desc())
            .limit(limit)
            .all()
        )

    def upsert(
        self, db: Session, *, user_id: UUID, day: date, mood: Mood, stats: ReflectionStats
    ) -> DailyReflection:
        """Create the reflection for (user, date) or overwrite mood and stats of the existing one."""
        reflection = self.get_by_user_and_date(db, user_id=user_id, day=day)
        if reflection is None:
            reflection = DailyReflection(user_id=user_id, date=day, mood=mood, **stats.model_dump())
            db.add(reflection)
            try:
                db.commit()
            except IntegrityError:
                # Lost a race with a concurrent submission: overwrite the winner.
                db.rollback()
                reflection = self.get_by_user_and_date(db, user_id=user_id, day=day)
                return self._overwrite(db, reflection=reflection, mood=mood, stats=stats)
            db.refresh(reflection)
            return reflection
        return self._overwrite(db, reflection=reflection, mood=mood, stats=stats)

    def _overwrite(
        self, db: Session, *, reflection: DailyReflection, mood: Mood, stats: ReflectionStats
    ) -> DailyReflection:
        reflection.mood = mood
        for field, value in stats.model_dump().items():
            setattr(reflection, field, value)
        db.commit()
        db.refresh(reflection)
        return reflection


# Create singleton instance
crud_daily_reflection = CRUDDailyReflection()
