# dayplanner/api/routers/users.py
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from dayplanner.core.config import get_db
from dayplanner.core.security import get_path_user
from dayplanner.core.timeutils import TIMEZONES
from dayplanner.models.user import User
from dayplanner.schemas.user import TimezoneOption, UserCreate, UserOut, UserSettingsUpdate
from dayplanner.services.users import user_service

router = APIRouter(prefix="/users", tags=["Users"])


@router.post(
    "",
    response_model=UserOut,
    status_code=status.HTTP_201_CREATED,
    summary="Register a user",
)
def create_user(user_in: UserCreate, db: Session = Depends(get_db)):
    """
    Create a user with a timezone and reminder channel preferences.

    - **email**: unique, stored lowercased
    - **timezone**: IANA zone name, defaults to UTC
    """
    return user_service.register(db, user_in=user_in)


@router.get("/timezones", response_model=List[TimezoneOption], summary="List supported timezones")
def list_timezones():
    return [TimezoneOption(value=value, label=label) for value, label in TIMEZONES]


@router.get("/{user_id}", response_model=UserOut, summary="Get a user")
def get_user(user: User = Depends(get_path_user)):
    return user


@router.patch("/{user_id}", response_model=UserOut, summary="Update user settings")
def update_settings(
    settings_in: UserSettingsUpdate,
    user: User = Depends(get_path_user),
    db: Session = Depends(get_db),
):
    """
    Update timezone and reminder preferences.

    Only provided fields are changed.
    """
    return user_service.update_settings(db, user=user, settings_in=settings_in)
