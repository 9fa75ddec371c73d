"""Tests for services/task_state.py: current/next resolution and the task actions."""

from dataclasses import dataclass, field
from typing import Optional
from uuid import UUID, uuid4

import pytest

from dayplanner.core.exceptions import ConflictError, ValidationError
from dayplanner.crud.task_log import crud_task_log
from dayplanner.models.task_log import TaskStatus
from dayplanner.services.task_state import (
    build_current_task_view,
    resolve_task_state,
    task_service,
)

from conftest import TODAY, at


@dataclass
class Block:
    start_time: str
    end_time: str
    activity: str = "Work"
    topic: Optional[str] = None
    id: UUID = field(default_factory=uuid4)


DAY = [
    Block("09:00", "10:00", "Deep work"),
    Block("10:00", "11:00", "Email"),
    Block("13:00", "14:00", "Gym"),
]


# =====================================================================
# RESOLVER
# =====================================================================

def test_current_block_and_remaining_minutes():
    state = resolve_task_state(DAY, 9 * 60 + 15)
    assert state.current is DAY[0]
    assert state.next is DAY[1]

    view = build_current_task_view(state.current, None, 9 * 60 + 15)
    assert view.remaining_minutes == 45
    assert view.remaining_formatted == "45m"
    assert view.status is TaskStatus.pending
    assert view.snooze_count == 0


def test_end_is_exclusive_start_is_inclusive():
    state = resolve_task_state(DAY, 10 * 60)
    assert state.current is DAY[1]
    assert state.next is DAY[2]


def test_gap_has_next_but_no_current():
    state = resolve_task_state(DAY, 12 * 60)
    assert state.current is None
    assert state.next is DAY[2]


def test_after_last_block_nothing_left():
    state = resolve_task_state(DAY, 20 * 60)
    assert state.current is None
    assert state.next is None


def test_empty_plan():
    state = resolve_task_state([], 600)
    assert state.current is None and state.next is None


def test_overlapping_blocks_first_match_wins():
    overlapping = [Block("09:00", "11:00", "Long"), Block("09:30", "10:00", "Short")]
    state = resolve_task_state(overlapping, 9 * 60 + 45)
    assert state.current is overlapping[0]
    # "Short" already started, so nothing is upcoming
    assert state.next is None


# =====================================================================
# CURRENT TASK VIEW
# =====================================================================

def test_get_current_task_without_plan(db, user):
    response = task_service.get_current_task(db, user=user, now=at(9, 15))
    assert response.message == "No active plan"
    assert response.current_task is None
    assert response.current_time == "09:15"


def test_get_current_task_reports_log_state(db, user, blocks):
    crud_task_log.create(
        db, user_id=user.id, plan_block_id=blocks[0].id, day=TODAY,
        status=TaskStatus.snoozed, snooze_count=2,
    )
    response = task_service.get_current_task(db, user=user, now=at(9, 15))
    assert response.current_task.activity == "Deep work"
    assert response.current_task.topic == "Chapter 3"
    assert response.current_task.snooze_count == 2
    assert response.current_task.status is TaskStatus.snoozed
    assert response.next_task.activity == "Email"
    assert response.timezone == "UTC"


def test_get_current_task_uses_user_timezone(db, user, blocks):
    user.timezone = "Asia/Kolkata"
    db.commit()
    # 03:40 UTC is 09:10 in Kolkata
    response = task_service.get_current_task(db, user=user, now=at(3, 40))
    assert response.current_time == "09:10"
    assert response.current_task.activity == "Deep work"


# =====================================================================
# MARK DONE
# =====================================================================

def test_mark_done_within_grace_is_on_time(db, user, blocks):
    result = task_service.mark_done(db, user=user, now=at(9, 25))
    assert result.on_time is True
    assert result.points_earned == 10
    log = crud_task_log.get(db, user_id=user.id, plan_block_id=blocks[0].id, day=TODAY)
    assert log.status is TaskStatus.completed
    assert log.completed_at is not None


def test_mark_done_after_grace_is_late(db, user, blocks):
    result = task_service.mark_done(db, user=user, now=at(9, 45))
    assert result.on_time is False
    assert result.points_earned == 5


def test_three_snoozes_then_on_time_completion_scores_zero(db, user, blocks):
    for _ in range(3):
        task_service.snooze(db, user=user, duration=10, now=at(9, 5))
    result = task_service.mark_done(db, user=user, now=at(9, 20))
    assert result.points_earned == 0


def test_mark_done_twice_conflicts(db, user, blocks):
    task_service.mark_done(db, user=user, now=at(9, 10))
    with pytest.raises(ConflictError):
        task_service.mark_done(db, user=user, now=at(9, 11))


def test_mark_done_outside_any_block(db, user, blocks):
    with pytest.raises(ValidationError):
        task_service.mark_done(db, user=user, now=at(12, 0))


# =====================================================================
# SNOOZE
# =====================================================================

def test_snooze_records_history_and_feedback(db, user, blocks):
    first = task_service.snooze(db, user=user, duration=10, now=at(9, 5))
    assert first.snooze_count == 1
    assert first.snooze_duration == 10
    assert first.feedback_message == "Task snoozed. Try not to make it a habit!"

    second = task_service.snooze(db, user=user, duration=30, now=at(9, 20))
    assert second.snooze_count == 2
    assert second.feedback_message == "You snoozed this task twice 👀"

    log = crud_task_log.get(db, user_id=user.id, plan_block_id=blocks[0].id, day=TODAY)
    assert log.status is TaskStatus.snoozed
    assert [entry["duration_minutes"] for entry in log.snooze_history] == [10, 30]


def test_snooze_until_next_task_ends(db, user, blocks):
    result = task_service.snooze(db, user=user, duration="next", now=at(9, 15))
    # next block ends at 11:00
    assert result.snooze_duration == 105


def test_snooze_next_without_upcoming_block(db, user, blocks):
    with pytest.raises(ValidationError):
        task_service.snooze(db, user=user, duration="next", now=at(13, 30))


def test_snooze_rejects_other_durations(db, user, blocks):
    with pytest.raises(ValidationError):
        task_service.snooze(db, user=user, duration=15, now=at(9, 15))


def test_snooze_completed_task_conflicts(db, user, blocks):
    task_service.mark_done(db, user=user, now=at(9, 10))
    with pytest.raises(ConflictError):
        task_service.snooze(db, user=user, duration=10, now=at(9, 12))


# =====================================================================
# MARK MISSED
# =====================================================================

def test_mark_missed_only_closes_elapsed_blocks(db, user, blocks):
    for block in blocks:
        crud_task_log.create(db, user_id=user.id, plan_block_id=block.id, day=TODAY)

    changed = task_service.mark_missed(db, user=user, now=at(10, 30))
    assert changed == 1

    statuses = {
        log.plan_block_id: log.status
        for log in crud_task_log.list_for_date(db, user_id=user.id, day=TODAY)
    }
    assert statuses[blocks[0].id] is TaskStatus.missed
    assert statuses[blocks[1].id] is TaskStatus.pending
    assert statuses[blocks[2].id] is TaskStatus.pending


def test_mark_missed_closes_earlier_days_and_leaves_completed(db, user, blocks):
    from datetime import timedelta

    yesterday = TODAY - timedelta(days=1)
    snoozed = crud_task_log.create(
        db, user_id=user.id, plan_block_id=blocks[2].id, day=yesterday,
        status=TaskStatus.snoozed, snooze_count=1,
    )
    crud_task_log.create(
        db, user_id=user.id, plan_block_id=blocks[0].id, day=yesterday,
        status=TaskStatus.completed, points_earned=10,
    )

    assert task_service.mark_missed(db, user=user, now=at(8, 0)) == 1
    db.refresh(snoozed)
    assert snoozed.status is TaskStatus.missed
    assert snoozed.points_earned == -15
    # a second sweep has nothing to do
    assert task_service.mark_missed(db, user=user, now=at(8, 1)) == 0
