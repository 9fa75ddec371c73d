# dayplanner/api/routers/tasks.py
from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from dayplanner.core.config import get_db
from dayplanner.core.security import get_path_user
from dayplanner.core.timeutils import utc_now
from dayplanner.models.user import User
from dayplanner.schemas.task_log import (
    CurrentTaskResponse,
    MarkDoneResponse,
    SnoozeRequest,
    SnoozeResponse,
)
from dayplanner.services.task_state import task_service

router = APIRouter(prefix="/users/{user_id}/tasks", tags=["Tasks"])


@router.get("/current", response_model=CurrentTaskResponse, summary="What should I be doing now")
def get_current_task(
    user: User = Depends(get_path_user),
    db: Session = Depends(get_db),
    now: datetime = Depends(utc_now),
):
    """
    Current and next block of the active plan, in the user's timezone.

    The current task carries its remaining minutes and today's snooze count.
    """
    return task_service.get_current_task(db, user=user, now=now)


@router.post("/current/done", response_model=MarkDoneResponse, summary="Mark the current task done")
def mark_done(
    user: User = Depends(get_path_user),
    db: Session = Depends(get_db),
    now: datetime = Depends(utc_now),
):
    """
    Complete the current task.

    Completion within 30 minutes of the block start counts as on time.
    """
    return task_service.mark_done(db, user=user, now=now)


@router.post("/snooze", response_model=SnoozeResponse, summary="Snooze the current task")
def snooze(
    snooze_in: SnoozeRequest,
    user: User = Depends(get_path_user),
    db: Session = Depends(get_db),
    now: datetime = Depends(utc_now),
):
    """
    Snooze the current task.

    - **duration**: 10, 30, or "next" to push it past the next task
    """
    return task_service.snooze(db, user=user, duration=snooze_in.duration, now=now)
