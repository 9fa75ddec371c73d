# dayplanner/api/routers/plans.py
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from dayplanner.core.config import get_db
from dayplanner.core.security import get_path_user
from dayplanner.models.user import User
from dayplanner.schemas.plan import (
    PlanBlockCreate,
    PlanBlockOut,
    PlanBlockUpdate,
    PlanCreate,
    PlanDetail,
    PlanSummary,
    PlanUpdate,
)
from dayplanner.services.plans import plan_service

router = APIRouter(prefix="/users/{user_id}/plans", tags=["Plans"])


def _detail(db: Session, plan) -> PlanDetail:
    return PlanDetail(
        **PlanSummary.model_validate(plan).model_dump(exclude={"block_count"}),
        blocks=[PlanBlockOut.model_validate(b) for b in plan_service.list_blocks(db, plan=plan)],
    )


# =====================================================================
# PLANS
# =====================================================================

@router.get("", response_model=List[PlanSummary], summary="List my plans")
def list_plans(user: User = Depends(get_path_user), db: Session = Depends(get_db)):
    """All plans, newest first, with their block counts."""
    rows = plan_service.list_plans(db, user=user)
    return [
        PlanSummary.model_validate(plan).model_copy(update={"block_count": count})
        for plan, count in rows
    ]


@router.post(
    "",
    response_model=PlanDetail,
    status_code=status.HTTP_201_CREATED,
    summary="Create a plan",
)
def create_plan(
    plan_in: PlanCreate,
    user: User = Depends(get_path_user),
    db: Session = Depends(get_db),
):
    """
    Create an inactive plan.

    Blocks keep the order they are sent in.
    """
    plan = plan_service.create_plan(db, user=user, plan_in=plan_in)
    return _detail(db, plan)


@router.get("/{plan_id}", response_model=PlanDetail, summary="Get a plan with its blocks")
def get_plan(plan_id: UUID, user: User = Depends(get_path_user), db: Session = Depends(get_db)):
    plan = plan_service.get_plan(db, user=user, plan_id=plan_id)
    return _detail(db, plan)


@router.put("/{plan_id}", response_model=PlanDetail, summary="Update a plan")
def update_plan(
    plan_id: UUID,
    plan_in: PlanUpdate,
    user: User = Depends(get_path_user),
    db: Session = Depends(get_db),
):
    """
    Update title, date, active flag, or the whole block list.

    Setting **active** to true deactivates every other plan of the user.
    """
    plan = plan_service.update_plan(db, user=user, plan_id=plan_id, plan_in=plan_in)
    return _detail(db, plan)


@router.delete("/{plan_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a plan")
def delete_plan(plan_id: UUID, user: User = Depends(get_path_user), db: Session = Depends(get_db)):
    plan_service.delete_plan(db, user=user, plan_id=plan_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =====================================================================
# BLOCKS
# =====================================================================

@router.post(
    "/{plan_id}/blocks",
    response_model=PlanBlockOut,
    status_code=status.HTTP_201_CREATED,
    summary="Append a block",
)
def add_block(
    plan_id: UUID,
    block_in: PlanBlockCreate,
    user: User = Depends(get_path_user),
    db: Session = Depends(get_db),
):
    return plan_service.add_block(db, user=user, plan_id=plan_id, block_in=block_in)


@router.patch("/{plan_id}/blocks/{block_id}", response_model=PlanBlockOut, summary="Update a block")
def update_block(
    plan_id: UUID,
    block_id: UUID,
    block_in: PlanBlockUpdate,
    user: User = Depends(get_path_user),
    db: Session = Depends(get_db),
):
    return plan_service.update_block(
        db, user=user, plan_id=plan_id, block_id=block_id, block_in=block_in
    )


@router.delete(
    "/{plan_id}/blocks/{block_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a block",
)
def delete_block(
    plan_id: UUID,
    block_id: UUID,
    user: User = Depends(get_path_user),
    db: Session = Depends(get_db),
):
    plan_service.delete_block(db, user=user, plan_id=plan_id, block_id=block_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
