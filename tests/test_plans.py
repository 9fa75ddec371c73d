"""Tests for crud/plan.py, crud/task_log.py and services/plans.py."""

import pytest

from dayplanner.core.exceptions import DatabaseConflictError, NotFoundError, ValidationError
from dayplanner.crud.plan import crud_plan
from dayplanner.crud.task_log import crud_task_log
from dayplanner.crud.user import crud_user
from dayplanner.schemas.plan import PlanBlockCreate, PlanBlockUpdate, PlanCreate, PlanUpdate
from dayplanner.schemas.user import UserCreate
from dayplanner.services.plans import plan_service

from conftest import TODAY, at


def test_new_plans_start_inactive_with_ordered_blocks(db, user):
    plan = plan_service.create_plan(
        db,
        user=user,
        plan_in=PlanCreate(
            title="  Weekend  ",
            blocks=[
                PlanBlockCreate(start_time="14:00", end_time="15:00", activity="Read"),
                PlanBlockCreate(start_time="08:00", end_time="09:00", activity="Run"),
            ],
        ),
    )
    assert plan.active is False
    assert plan.title == "Weekend"
    by_order = crud_plan.list_blocks(db, plan_id=plan.id)
    assert [(b.order, b.activity) for b in by_order] == [(0, "Read"), (1, "Run")]
    by_time = crud_plan.list_blocks(db, plan_id=plan.id, order_by="start_time")
    assert [b.activity for b in by_time] == ["Run", "Read"]


def test_unknown_block_ordering(db, plan):
    with pytest.raises(ValueError):
        crud_plan.list_blocks(db, plan_id=plan.id, order_by="activity")


def test_activating_a_plan_deactivates_the_others(db, user, plan):
    other = plan_service.create_plan(db, user=user, plan_in=PlanCreate(title="Other"))
    plan_service.update_plan(db, user=user, plan_id=other.id, plan_in=PlanUpdate(active=True))

    assert crud_plan.find_active_plan(db, user_id=user.id).id == other.id
    db.refresh(plan)
    assert plan.active is False


def test_replacing_blocks_recomputes_order(db, user, plan):
    plan_service.update_plan(
        db,
        user=user,
        plan_id=plan.id,
        plan_in=PlanUpdate(
            title="Revised",
            blocks=[PlanBlockCreate(start_time="07:00", end_time="07:30", activity="Stretch")],
        ),
    )
    blocks = crud_plan.list_blocks(db, plan_id=plan.id)
    assert [(b.order, b.activity) for b in blocks] == [(0, "Stretch")]
    assert crud_plan.get_by_id(db, plan_id=plan.id).title == "Revised"


def test_added_block_goes_last(db, user, plan):
    block = plan_service.add_block(
        db, user=user, plan_id=plan.id,
        block_in=PlanBlockCreate(start_time="06:00", end_time="06:30", activity="Walk"),
    )
    assert block.order == 3
    assert crud_plan.count_blocks(db, plan_id=plan.id) == 4


def test_block_update_keeps_start_before_end(db, user, plan, blocks):
    with pytest.raises(ValidationError):
        plan_service.update_block(
            db, user=user, plan_id=plan.id, block_id=blocks[0].id,
            block_in=PlanBlockUpdate(start_time="10:30"),
        )
    updated = plan_service.update_block(
        db, user=user, plan_id=plan.id, block_id=blocks[0].id,
        block_in=PlanBlockUpdate(end_time="09:45", topic="Chapter 4"),
    )
    assert (updated.end_time, updated.topic) == ("09:45", "Chapter 4")


def test_schema_rejects_inverted_or_malformed_blocks():
    with pytest.raises(ValueError):
        PlanBlockCreate(start_time="10:00", end_time="09:00", activity="Backwards")
    with pytest.raises(ValueError):
        PlanBlockCreate(start_time="9:00", end_time="10:00", activity="Loose")


def test_plans_are_scoped_to_their_owner(db, user, plan):
    stranger = crud_user.create(db, obj_in=UserCreate(email="eve@example.com"))
    with pytest.raises(NotFoundError):
        plan_service.get_plan(db, user=stranger, plan_id=plan.id)
    with pytest.raises(NotFoundError):
        plan_service.delete_plan(db, user=stranger, plan_id=plan.id)


def test_delete_plan_removes_blocks(db, user, plan, blocks):
    plan_service.delete_plan(db, user=user, plan_id=plan.id)
    assert crud_plan.get_by_id(db, plan_id=plan.id) is None
    assert crud_plan.count_blocks(db, plan_id=plan.id) == 0


def test_list_plans_includes_block_counts(db, user, plan):
    plan_service.create_plan(db, user=user, plan_in=PlanCreate(title="Empty"))
    counts = {p.title: count for p, count in plan_service.list_plans(db, user=user)}
    assert counts == {"Weekday": 3, "Empty": 0}


# =====================================================================
# TASK LOG STORE
# =====================================================================

def test_task_log_unique_per_block_and_date(db, user, blocks):
    crud_task_log.create(db, user_id=user.id, plan_block_id=blocks[0].id, day=TODAY)
    with pytest.raises(DatabaseConflictError):
        crud_task_log.create(db, user_id=user.id, plan_block_id=blocks[0].id, day=TODAY)
    # the session is still usable after the conflict
    assert crud_task_log.count_for_date(db, user_id=user.id, day=TODAY) == 1


def test_task_log_survives_block_replacement(db, user, plan, blocks):
    old_block_id = blocks[0].id
    crud_task_log.create(db, user_id=user.id, plan_block_id=old_block_id, day=TODAY)
    crud_plan.replace_blocks(
        db, db_obj=plan,
        blocks=[PlanBlockCreate(start_time="07:00", end_time="08:00", activity="New")],
    )
    assert crud_task_log.get(db, user_id=user.id, plan_block_id=old_block_id, day=TODAY) is not None


def test_append_snooze_tracks_history(db, user, blocks):
    log = crud_task_log.create(db, user_id=user.id, plan_block_id=blocks[0].id, day=TODAY)
    crud_task_log.append_snooze(db, db_obj=log, snoozed_at=at(9, 5), duration_minutes=10)
    crud_task_log.append_snooze(db, db_obj=log, snoozed_at=at(9, 20), duration_minutes=30)
    db.expire_all()

    reloaded = crud_task_log.get(db, user_id=user.id, plan_block_id=blocks[0].id, day=TODAY)
    assert reloaded.snooze_count == 2
    assert len(reloaded.snooze_history) == 2
    assert reloaded.snooze_history[0]["snoozed_at"].startswith("2026-03-02T09:05")
