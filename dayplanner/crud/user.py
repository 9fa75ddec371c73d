# crud/user.py
from typing import Optional, List
from uuid import UUID
from datetime import datetime
from sqlalchemy.orm import Session
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from dayplanner.core.exceptions import DatabaseConflictError
from dayplanner.models.user import User
from dayplanner.schemas.user import UserCreate, UserSettingsUpdate


class UserCRUD:
    """CRUD operations for User model."""

    # =====================================================================
    # CREATE OPERATIONS
    # =====================================================================

    def create(self, db: Session, *, obj_in: UserCreate) -> User:
        db_obj = User(
            email=obj_in.email,
            email_verified=obj_in.email_verified,
            timezone=obj_in.timezone,
            reminder_email=obj_in.reminder_email,
            reminder_telegram=obj_in.reminder_telegram,
            telegram_chat_id=obj_in.telegram_chat_id,
        )
        db.add(db_obj)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            raise DatabaseConflictError("Email already registered") from e
        db.refresh(db_obj)
        return db_obj

    # =====================================================================
    # READ OPERATIONS
    # =====================================================================

    def get(self, db: Session, *, id: UUID) -> Optional[User]:
        return db.query(User).filter(User.id == id).first()

    def list_reminder_eligible(self, db: Session) -> List[User]:
        """Verified users with at least one reminder channel switched on."""
        return (
            db.query(User)
            .filter(User.email_verified.is_(True))
            .filter(or_(User.reminder_email.is_(True), User.reminder_telegram.is_(True)))
            .order_by(User.created_at.asc())
            .all()
        )

    def list_verified(self, db: Session) -> List[User]:
        return (
            db.query(User)
            .filter(User.email_verified.is_(True))
            .order_by(User.created_at.asc())
            .all()
        )

    # =====================================================================
    # UPDATE OPERATIONS
    # =====================================================================

    def update_settings(
        self, db: Session, *, db_obj: User, obj_in: UserSettingsUpdate
    ) -> User:
        for field, value in obj_in.model_dump(exclude_unset=True).items():
            setattr(db_obj, field, value)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def update_discipline_snapshot(
        self,
        db: Session,
        *,
        db_obj: User,
        today: int,
        weekly_average: int,
        best_day: str,
        updated_at: datetime,
    ) -> User:
        db_obj.discipline_today = today
        db_obj.discipline_weekly_average = weekly_average
        db_obj.discipline_best_day = best_day
        db_obj.discipline_last_updated = updated_at
        db.commit()
        db.refresh(db_obj)
        return db_obj


# Create singleton instance
crud_user = UserCRUD()
