# dayplanner/api/routers/discipline.py
from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from dayplanner.core.config import get_db
from dayplanner.core.security import get_path_user
from dayplanner.core.timeutils import utc_now
from dayplanner.models.user import User
from dayplanner.schemas.discipline import DisciplineSummary
from dayplanner.services.discipline import discipline_service

router = APIRouter(prefix="/users/{user_id}/discipline", tags=["Discipline"])


@router.get("", response_model=DisciplineSummary, summary="Discipline score and weekly stats")
def get_discipline(
    user: User = Depends(get_path_user),
    db: Session = Depends(get_db),
    now: datetime = Depends(utc_now),
):
    """
    Today's score with breakdown and feedback, the weekly average,
    the best weekday, and the moods of the last seven reflections.
    """
    return discipline_service.get_summary(db, user=user, now=now)
