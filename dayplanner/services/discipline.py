# services/discipline.py
from datetime import date, datetime, timedelta
from typing import Dict, Optional, Sequence, Union

from sqlalchemy.orm import Session

from dayplanner.core.config import Settings, settings as default_settings
from dayplanner.core.timeutils import local_date, utc_now
from dayplanner.crud.daily_reflection import crud_daily_reflection
from dayplanner.crud.plan import crud_plan
from dayplanner.crud.task_log import crud_task_log
from dayplanner.crud.user import crud_user
from dayplanner.models.task_log import TaskLog
from dayplanner.models.user import User
from dayplanner.schemas.discipline import (
    DisciplineSummary,
    ReflectionScore,
    ScoreBreakdown,
    TodayScore,
    WeeklyScore,
)
from dayplanner.services.scoring import (
    ScoreDenominator,
    calculate_daily_score,
    calculate_weekly_average,
    daily_scores,
    find_best_day,
    get_score_feedback,
    group_logs_by_date,
)


RECENT_REFLECTIONS = 7


class DisciplineService:
    """Builds score summaries from stored task logs and keeps the user's cached snapshot fresh."""

    def __init__(self, config: Settings = default_settings):
        self.config = config

    @property
    def denominator(self) -> ScoreDenominator:
        return ScoreDenominator(self.config.SCORE_DENOMINATOR)

    # =====================================================================
    # SCHEDULED TASK COUNTS
    # =====================================================================

    def active_plan_task_count(self, db: Session, *, user: User) -> int:
        plan = crud_plan.find_active_plan(db, user_id=user.id)
        if plan is None:
            return 0
        return crud_plan.count_blocks(db, plan_id=plan.id)

    def scheduled_tasks(
        self, db: Session, *, user: User, logs_by_date: Dict[date, Sequence[TaskLog]]
    ) -> Union[int, Dict[date, int]]:
        """Denominator for each scored date, following the configured source."""
        if self.denominator is ScoreDenominator.LOGGED_TASKS:
            return {day: len(logs) for day, logs in logs_by_date.items()}
        return self.active_plan_task_count(db, user=user)

    def score_for_date(self, db: Session, *, user: User, day: date) -> ScoreBreakdown:
        logs = crud_task_log.list_for_date(db, user_id=user.id, day=day)
        if self.denominator is ScoreDenominator.LOGGED_TASKS:
            total = len(logs)
        else:
            total = self.active_plan_task_count(db, user=user)
        return calculate_daily_score(logs, total)

    # =====================================================================
    # SUMMARY
    # =====================================================================

    def get_summary(
        self, db: Session, *, user: User, now: Optional[datetime] = None
    ) -> DisciplineSummary:
        """
        Today's score, the last week's per-day scores, and recent moods.

        Rewrites the user's discipline snapshot as a side effect.
        """
        now = now or utc_now()
        today = local_date(user.timezone, now)

        today_breakdown = self.score_for_date(db, user=user, day=today)

        since = today - timedelta(days=self.config.WEEKLY_LOOKBACK_DAYS)
        week_logs = crud_task_log.list_for_date_range(
            db, user_id=user.id, start_date=since, end_date=today
        )
        logs_by_date = group_logs_by_date(week_logs)
        scores = daily_scores(
            logs_by_date, self.scheduled_tasks(db, user=user, logs_by_date=logs_by_date)
        )
        weekly_average = calculate_weekly_average([s.score for s in scores])
        best_day = find_best_day(scores)

        crud_user.update_discipline_snapshot(
            db,
            db_obj=user,
            today=today_breakdown.percentage,
            weekly_average=weekly_average,
            best_day=best_day,
            updated_at=now,
        )

        reflections = crud_daily_reflection.list_recent(
            db, user_id=user.id, limit=RECENT_REFLECTIONS
        )

        return DisciplineSummary(
            today=TodayScore(
                score=today_breakdown.percentage,
                breakdown=today_breakdown,
                feedback=get_score_feedback(today_breakdown.percentage),
            ),
            weekly=WeeklyScore(average=weekly_average, best_day=best_day, daily_scores=scores),
            recent_reflections=[
                ReflectionScore(date=r.date, mood=r.mood, score=r.discipline_score)
                for r in reflections
            ],
            denominator=self.denominator.value,
        )


# Create singleton instance
discipline_service = DisciplineService()
