# services/users.py
import logging
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy.orm import Session

from dayplanner.core.exceptions import ConflictError, DatabaseConflictError, NotFoundError, ValidationError
from dayplanner.crud.user import crud_user
from dayplanner.models.user import User
from dayplanner.schemas.user import UserCreate, UserSettingsUpdate

logger = logging.getLogger(__name__)


def _check_timezone(zone: str) -> None:
    try:
        ZoneInfo(zone)
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        raise ValidationError(f"Unknown timezone: {zone}") from e


class UserService:

    def register(self, db: Session, *, user_in: UserCreate) -> User:
        _check_timezone(user_in.timezone)
        try:
            user = crud_user.create(db, obj_in=user_in)
        except DatabaseConflictError as e:
            raise ConflictError(str(e)) from e
        logger.info(f"Registered user {user.id}")
        return user

    def get_user(self, db: Session, *, user_id: UUID) -> User:
        user = crud_user.get(db, id=user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def update_settings(self, db: Session, *, user: User, settings_in: UserSettingsUpdate) -> User:
        """Timezone and reminder channel preferences. Telegram needs a chat id to be enabled."""
        if settings_in.timezone is not None:
            _check_timezone(settings_in.timezone)
        chat_id = (
            settings_in.telegram_chat_id
            if "telegram_chat_id" in settings_in.model_fields_set
            else user.telegram_chat_id
        )
        if settings_in.reminder_telegram and not chat_id:
            raise ValidationError("Link a Telegram chat before enabling Telegram reminders")
        return crud_user.update_settings(db, db_obj=user, obj_in=settings_in)


# Create singleton instance
user_service = UserService()
