# services/reminders.py
import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Sequence

from sqlalchemy.orm import Session

from dayplanner.core.config import Settings, settings as default_settings
from dayplanner.core.exceptions import DatabaseConflictError
from dayplanner.core.timeutils import ensure_utc, local_now, time_to_minutes, utc_now
from dayplanner.core.ttl_store import InMemoryTTLStore, TTLStore
from dayplanner.crud.plan import crud_plan
from dayplanner.crud.task_log import crud_task_log
from dayplanner.crud.user import crud_user
from dayplanner.models.task_log import TaskLog, TaskStatus
from dayplanner.models.user import User
from dayplanner.schemas.reminder import ReflectionRunResult, ReminderPayload, ReminderRunResult
from dayplanner.services.notifications import Notifier, default_notifiers
from dayplanner.services.task_state import TaskService, TimedBlock, task_service

logger = logging.getLogger(__name__)


def due_blocks(
    blocks: Sequence[TimedBlock], current_minutes: int, window: int = 2
) -> List[TimedBlock]:
    """Blocks that started between `window` minutes ago and now, inclusive."""
    due = []
    for block in blocks:
        minutes_since_start = current_minutes - time_to_minutes(block.start_time)
        if 0 <= minutes_since_start <= window:
            due.append(block)
    return due


class ReminderDispatcher:
    """
    Periodic, idempotent reminder and reflection-prompt runs.

    Every tick is safe to repeat: a block is only announced while its
    log is pending and not notified within the resend cooldown, and a
    reflection prompt is only sent once per user and local date.
    """

    def __init__(
        self,
        notifiers: Optional[Sequence[Notifier]] = None,
        ttl_store: Optional[TTLStore] = None,
        config: Settings = default_settings,
        tasks: TaskService = task_service,
    ):
        self.notifiers = list(notifiers) if notifiers is not None else default_notifiers(config)
        self.ttl_store = ttl_store if ttl_store is not None else InMemoryTTLStore()
        self.config = config
        self.tasks = tasks

    # =====================================================================
    # DELIVERY
    # =====================================================================

    def _deliver(self, user: User, send: Callable[[Notifier, str], bool]):
        """Send through every enabled channel independently. Returns (sent, failed)."""
        sent = failed = 0
        for notifier in self.notifiers:
            recipient = notifier.recipient_for(user)
            if not recipient:
                continue
            try:
                delivered = send(notifier, recipient)
            except Exception:
                logger.exception(f"{notifier.channel.value} notifier crashed for user {user.id}")
                delivered = False
            if delivered:
                sent += 1
                logger.info(f"Sent {notifier.channel.value} notification to user {user.id}")
            else:
                failed += 1
                logger.warning(f"{notifier.channel.value} notification to user {user.id} failed")
        return sent, failed

    # =====================================================================
    # BLOCK REMINDERS
    # =====================================================================

    def _recently_notified(self, task_log: TaskLog, now: datetime) -> bool:
        if task_log.last_notified_at is None:
            return False
        cooldown = timedelta(minutes=self.config.REMINDER_RESEND_COOLDOWN_MINUTES)
        return ensure_utc(task_log.last_notified_at) + cooldown > now

    def _remind_user(self, db: Session, user: User, now: datetime, result: ReminderRunResult):
        plan = crud_plan.find_active_plan(db, user_id=user.id)
        if plan is None:
            return
        blocks = crud_plan.list_blocks(db, plan_id=plan.id, order_by="start_time")
        local = local_now(user.timezone, now)
        today = local.date()
        current_minutes = local.hour * 60 + local.minute

        for block in due_blocks(blocks, current_minutes, self.config.REMINDER_WINDOW_MINUTES):
            task_log = crud_task_log.get(db, user_id=user.id, plan_block_id=block.id, day=today)
            if task_log is None:
                try:
                    task_log = crud_task_log.create(
                        db, user_id=user.id, plan_block_id=block.id, day=today
                    )
                except DatabaseConflictError:
                    # Another tick created it first and owns this reminder.
                    continue
                result.logs_created += 1
            elif task_log.status is not TaskStatus.pending:
                continue
            elif self._recently_notified(task_log, now):
                continue

            result.reminders_processed += 1
            payload = ReminderPayload(
                start_time=block.start_time,
                end_time=block.end_time,
                activity=block.activity,
                topic=block.topic,
            )
            sent, failed = self._deliver(
                user, lambda notifier, recipient: notifier.send_reminder(recipient, payload)
            )
            result.reminders_sent += sent
            result.reminders_failed += failed
            if sent:
                crud_task_log.mark_notified(db, db_obj=task_log, notified_at=now)

    def run_reminder_tick(self, db: Session, now: Optional[datetime] = None) -> ReminderRunResult:
        now = ensure_utc(now) if now else utc_now()
        result = ReminderRunResult(timestamp=now)

        for user in crud_user.list_reminder_eligible(db):
            result.users_checked += 1
            try:
                if self.config.MARK_MISSED_ON_TICK:
                    result.tasks_marked_missed += self.tasks.mark_missed(db, user=user, now=now)
                self._remind_user(db, user, now, result)
            except Exception:
                db.rollback()
                result.user_errors += 1
                logger.exception(f"Reminder tick failed for user {user.id}")

        logger.info(
            f"Reminder tick: {result.users_checked} users, {result.reminders_sent} sent, "
            f"{result.reminders_failed} failed"
        )
        return result

    # =====================================================================
    # REFLECTION PROMPTS
    # =====================================================================

    def _reflection_key(self, user: User, day) -> str:
        return f"reflection-prompt:{user.id}:{day.isoformat()}"

    def _prompt_user(self, db: Session, user: User, now: datetime, result: ReflectionRunResult):
        local = local_now(user.timezone, now)
        minutes_since_prompt = (
            local.hour * 60 + local.minute - time_to_minutes(self.config.REFLECTION_PROMPT_TIME)
        )
        if not 0 <= minutes_since_prompt <= self.config.REMINDER_WINDOW_MINUTES:
            return

        today = local.date()
        # Users who did not touch the app today are left alone.
        if crud_task_log.count_for_date(db, user_id=user.id, day=today) == 0:
            return

        key = self._reflection_key(user, today)
        ttl = timedelta(hours=self.config.REFLECTION_PROMPT_TTL_HOURS)
        if not self.ttl_store.add_if_absent(key, now.isoformat(), ttl):
            return

        sent, failed = self._deliver(
            user, lambda notifier, recipient: notifier.send_reflection_prompt(recipient, today)
        )
        result.reflections_sent += sent
        result.reflections_failed += failed
        if not sent:
            # Nothing went out; let the next tick in the window retry.
            self.ttl_store.delete(key)

    def run_reflection_tick(self, db: Session, now: Optional[datetime] = None) -> ReflectionRunResult:
        now = ensure_utc(now) if now else utc_now()
        result = ReflectionRunResult(timestamp=now)
        # dedup keys carry the date and are never read again once it passes
        self.ttl_store.sweep()

        for user in crud_user.list_verified(db):
            result.users_checked += 1
            try:
                self._prompt_user(db, user, now, result)
            except Exception:
                db.rollback()
                result.user_errors += 1
                logger.exception(f"Reflection tick failed for user {user.id}")

        logger.info(
            f"Reflection tick: {result.users_checked} users, {result.reflections_sent} sent"
        )
        return result


# Shared instance used by the cron endpoints
reminder_dispatcher = ReminderDispatcher()
