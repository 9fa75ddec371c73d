# dayplanner/api/routers/reflections.py
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from dayplanner.core.config import get_db
from dayplanner.core.security import get_path_user
from dayplanner.core.timeutils import utc_now
from dayplanner.models.user import User
from dayplanner.schemas.reflection import (
    DailyReflectionCreate,
    DailyReflectionOut,
    ReflectionSubmitResponse,
)
from dayplanner.services.reflection import reflection_service

router = APIRouter(prefix="/users/{user_id}/reflections", tags=["Reflections"])


@router.get("", response_model=List[DailyReflectionOut], summary="Reflection history")
def list_reflections(
    limit: int = Query(30, ge=1, le=365),
    user: User = Depends(get_path_user),
    db: Session = Depends(get_db),
):
    return reflection_service.list_history(db, user=user, limit=limit)


@router.post("", response_model=ReflectionSubmitResponse, summary="Submit a daily reflection")
def submit_reflection(
    reflection_in: DailyReflectionCreate,
    response: Response,
    user: User = Depends(get_path_user),
    db: Session = Depends(get_db),
    now: datetime = Depends(utc_now),
):
    """
    Record how the day went.

    - **mood**: great, okay or bad
    - **date**: defaults to today in the user's timezone

    Submitting again for the same date overwrites the earlier reflection.
    """
    reflection, created = reflection_service.submit(
        db, user=user, mood=reflection_in.mood, day=reflection_in.date, now=now
    )
    if created:
        response.status_code = status.HTTP_201_CREATED
    return ReflectionSubmitResponse(
        message="Reflection saved" if created else "Reflection updated",
        reflection=DailyReflectionOut.model_validate(reflection),
    )
