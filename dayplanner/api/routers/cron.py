# dayplanner/api/routers/cron.py
from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from dayplanner.core.config import get_db
from dayplanner.core.security import verify_cron_secret
from dayplanner.core.timeutils import utc_now
from dayplanner.schemas.reminder import ReflectionRunResult, ReminderRunResult
from dayplanner.services.reminders import reminder_dispatcher

router = APIRouter(
    prefix="/cron",
    tags=["Scheduler"],
    dependencies=[Depends(verify_cron_secret)],
)


# =====================================================================
# TICKS - called every minute by an external scheduler
# =====================================================================

@router.api_route("/reminder", methods=["GET", "POST"], response_model=ReminderRunResult)
def reminder_tick(db: Session = Depends(get_db), now: datetime = Depends(utc_now)):
    """
    Send reminders for blocks that started within the reminder window.

    Safe to call repeatedly; a block is announced at most once per cooldown.
    """
    return reminder_dispatcher.run_reminder_tick(db, now=now)


@router.api_route("/reflection", methods=["GET", "POST"], response_model=ReflectionRunResult)
def reflection_tick(db: Session = Depends(get_db), now: datetime = Depends(utc_now)):
    """Prompt active users for their end-of-day reflection, once per local date."""
    return reminder_dispatcher.run_reflection_tick(db, now=now)
