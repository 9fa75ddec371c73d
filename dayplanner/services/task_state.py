# services/task_state.py
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Protocol, Sequence, Union
from uuid import UUID

from sqlalchemy.orm import Session

from dayplanner.core.config import settings
from dayplanner.core.exceptions import ConflictError, DatabaseConflictError, ValidationError
from dayplanner.core.timeutils import (
    current_time_in_zone,
    format_remaining,
    local_now,
    time_to_minutes,
    utc_now,
)
from dayplanner.crud.plan import crud_plan
from dayplanner.crud.task_log import crud_task_log
from dayplanner.models.plan import PlanBlock
from dayplanner.models.task_log import TaskLog, TaskStatus
from dayplanner.models.user import User
from dayplanner.schemas.task_log import (
    CurrentTaskResponse,
    CurrentTaskView,
    MarkDoneResponse,
    NextTaskView,
    SnoozeResponse,
    TaskLogOut,
)
from dayplanner.services.scoring import (
    MISSED,
    calculate_task_points,
    get_snooze_feedback,
    is_completed_on_time,
)

logger = logging.getLogger(__name__)


# =====================================================================
# RESOLVER
# =====================================================================

class TimedBlock(Protocol):
    id: UUID
    start_time: str
    end_time: str
    activity: str
    topic: Optional[str]


@dataclass(frozen=True)
class TaskState:
    current: Optional[TimedBlock] = None
    next: Optional[TimedBlock] = None


def resolve_task_state(blocks: Sequence[TimedBlock], current_minutes: int) -> TaskState:
    """
    Find the current and the next block for a minute of the day.

    `blocks` must be sorted by start time. The current block is the
    first whose [start, end) interval holds `current_minutes`; the next
    block is the earliest one starting strictly later, whether or not a
    current block exists. Overlapping blocks are not deduplicated.
    """
    current = None
    upcoming = None
    for block in blocks:
        start = time_to_minutes(block.start_time)
        end = time_to_minutes(block.end_time)
        if current is None and start <= current_minutes < end:
            current = block
        if upcoming is None and start > current_minutes:
            upcoming = block
        if current is not None and upcoming is not None:
            break
    return TaskState(current=current, next=upcoming)


def build_next_task_view(block: TimedBlock) -> NextTaskView:
    return NextTaskView(
        id=block.id,
        activity=block.activity,
        topic=block.topic,
        start_time=block.start_time,
        end_time=block.end_time,
    )


def build_current_task_view(
    block: TimedBlock, task_log: Optional[TaskLog], current_minutes: int
) -> CurrentTaskView:
    remaining = time_to_minutes(block.end_time) - current_minutes
    return CurrentTaskView(
        id=block.id,
        activity=block.activity,
        topic=block.topic,
        start_time=block.start_time,
        end_time=block.end_time,
        remaining_minutes=remaining,
        remaining_formatted=format_remaining(remaining),
        snooze_count=task_log.snooze_count if task_log else 0,
        status=task_log.status if task_log else TaskStatus.pending,
    )


# =====================================================================
# SERVICE CLASS
# =====================================================================

class TaskService:
    """User actions on today's tasks: view, mark done, snooze, and the missed sweep."""

    SNOOZE_NEXT = "next"

    def __init__(self):
        self.plan_crud = crud_plan
        self.log_crud = crud_task_log

    # =====================================================================
    # HELPERS
    # =====================================================================

    def _active_blocks(self, db: Session, user: User) -> Optional[Sequence[PlanBlock]]:
        """Active plan blocks in start-time order, or None without an active plan."""
        plan = self.plan_crud.find_active_plan(db, user_id=user.id)
        if plan is None:
            return None
        return self.plan_crud.list_blocks(db, plan_id=plan.id, order_by="start_time")

    def _clock(self, user: User, now: Optional[datetime]):
        now = now or utc_now()
        local = local_now(user.timezone, now)
        return now, local.date(), local.hour * 60 + local.minute

    def _require_current(self, db: Session, user: User, current_minutes: int) -> TaskState:
        blocks = self._active_blocks(db, user)
        if blocks is None:
            raise ValidationError("No active plan")
        state = resolve_task_state(blocks, current_minutes)
        if state.current is None:
            raise ValidationError("No current task")
        return state

    def _get_or_create_log(
        self, db: Session, *, user: User, block_id: UUID, day: date
    ) -> TaskLog:
        task_log = self.log_crud.get(db, user_id=user.id, plan_block_id=block_id, day=day)
        if task_log is not None:
            return task_log
        try:
            return self.log_crud.create(
                db, user_id=user.id, plan_block_id=block_id, day=day
            )
        except DatabaseConflictError:
            return self.log_crud.get(db, user_id=user.id, plan_block_id=block_id, day=day)

    # =====================================================================
    # READ
    # =====================================================================

    def get_current_task(
        self, db: Session, *, user: User, now: Optional[datetime] = None
    ) -> CurrentTaskResponse:
        now, today, current_minutes = self._clock(user, now)
        current_time = current_time_in_zone(user.timezone, now)

        blocks = self._active_blocks(db, user)
        if blocks is None:
            return CurrentTaskResponse(
                current_time=current_time, timezone=user.timezone, message="No active plan"
            )
        if not blocks:
            return CurrentTaskResponse(
                current_time=current_time, timezone=user.timezone, message="No tasks scheduled"
            )

        state = resolve_task_state(blocks, current_minutes)
        current_view = None
        if state.current is not None:
            task_log = self.log_crud.get(
                db, user_id=user.id, plan_block_id=state.current.id, day=today
            )
            current_view = build_current_task_view(state.current, task_log, current_minutes)

        return CurrentTaskResponse(
            current_task=current_view,
            next_task=build_next_task_view(state.next) if state.next else None,
            current_time=current_time,
            timezone=user.timezone,
        )

    # =====================================================================
    # ACTIONS
    # =====================================================================

    def mark_done(
        self, db: Session, *, user: User, now: Optional[datetime] = None
    ) -> MarkDoneResponse:
        """
        Complete the current task.

        Raises:
            ValidationError: No active plan or no current task
            ConflictError: The task is already completed or missed today
        """
        now, today, current_minutes = self._clock(user, now)
        block = self._require_current(db, user, current_minutes).current

        task_log = self._get_or_create_log(db, user=user, block_id=block.id, day=today)
        if task_log.status.is_terminal:
            raise ConflictError(f"Task already {task_log.status.value}")

        on_time = is_completed_on_time(
            time_to_minutes(block.start_time),
            current_minutes,
            settings.ON_TIME_GRACE_MINUTES,
        )
        points = calculate_task_points(TaskStatus.completed, task_log.snooze_count, on_time)
        task_log = self.log_crud.update(
            db,
            db_obj=task_log,
            status=TaskStatus.completed,
            completed_at=now,
            points_earned=points,
        )
        logger.info(f"User {user.id} completed {block.activity!r} ({points} points)")

        return MarkDoneResponse(
            message="Task marked as done!",
            points_earned=points,
            on_time=on_time,
            task_log=TaskLogOut.model_validate(task_log),
        )

    def snooze(
        self,
        db: Session,
        *,
        user: User,
        duration: Union[int, str],
        now: Optional[datetime] = None,
    ) -> SnoozeResponse:
        """
        Snooze the current task for 10 or 30 minutes, or until the next task ends.

        Raises:
            ValidationError: Bad duration, no active plan, no current task,
                or "next" requested with nothing scheduled after now
            ConflictError: The task is already completed or missed today
        """
        now, today, current_minutes = self._clock(user, now)
        state = self._require_current(db, user, current_minutes)

        if duration == self.SNOOZE_NEXT:
            if state.next is None:
                raise ValidationError("No upcoming task to snooze until")
            snooze_minutes = time_to_minutes(state.next.end_time) - current_minutes
        elif duration in (10, 30):
            snooze_minutes = int(duration)
        else:
            raise ValidationError("Invalid snooze duration")

        task_log = self._get_or_create_log(db, user=user, block_id=state.current.id, day=today)
        if task_log.status.is_terminal:
            raise ConflictError(f"Task already {task_log.status.value}")

        task_log = self.log_crud.append_snooze(
            db, db_obj=task_log, snoozed_at=now, duration_minutes=snooze_minutes
        )
        return SnoozeResponse(
            message=f"Task snoozed for {snooze_minutes} minutes",
            snooze_count=task_log.snooze_count,
            snooze_duration=snooze_minutes,
            feedback_message=get_snooze_feedback(task_log.snooze_count),
            task_log=TaskLogOut.model_validate(task_log),
        )

    def mark_missed(
        self, db: Session, *, user: User, now: Optional[datetime] = None
    ) -> int:
        """
        Close out unresolved tasks whose window has elapsed.

        Pending or snoozed logs from earlier days are always missed; today's
        are missed once their block has ended. Logs whose block no longer
        exists in the active plan are only closed once their day is over.
        Returns how many logs changed.
        """
        now, today, current_minutes = self._clock(user, now)
        unresolved = self.log_crud.list_unresolved(db, user_id=user.id, up_to=today)
        if not unresolved:
            return 0

        block_ends = {}
        blocks = self._active_blocks(db, user) or []
        for block in blocks:
            block_ends[block.id] = time_to_minutes(block.end_time)

        changed = 0
        for task_log in unresolved:
            if task_log.date == today:
                end = block_ends.get(task_log.plan_block_id)
                if end is None or current_minutes < end:
                    continue
            task_log.status = TaskStatus.missed
            task_log.points_earned = MISSED
            changed += 1

        if changed:
            db.commit()
            logger.info(f"Marked {changed} task(s) missed for user {user.id}")
        return changed


# Create singleton instance
task_service = TaskService()
