# services/plans.py
from typing import List, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from dayplanner.core.exceptions import NotFoundError, ValidationError
from dayplanner.core.timeutils import time_to_minutes
from dayplanner.crud.plan import crud_plan
from dayplanner.models.plan import Plan, PlanBlock
from dayplanner.models.user import User
from dayplanner.schemas.plan import PlanBlockCreate, PlanBlockUpdate, PlanCreate, PlanUpdate


class PlanService:
    """Plan and block management for a single user."""

    def __init__(self):
        self.plan_crud = crud_plan

    # =====================================================================
    # LOOKUP HELPERS
    # =====================================================================

    def get_plan(self, db: Session, *, user: User, plan_id: UUID) -> Plan:
        plan = self.plan_crud.get_for_user(db, plan_id=plan_id, user_id=user.id)
        if plan is None:
            raise NotFoundError("Plan not found")
        return plan

    def _get_block(self, db: Session, *, plan: Plan, block_id: UUID) -> PlanBlock:
        block = self.plan_crud.get_block(db, plan_id=plan.id, block_id=block_id)
        if block is None:
            raise NotFoundError("Block not found")
        return block

    # =====================================================================
    # PLANS
    # =====================================================================

    def create_plan(self, db: Session, *, user: User, plan_in: PlanCreate) -> Plan:
        """New plans start inactive."""
        return self.plan_crud.create(db, user_id=user.id, obj_in=plan_in)

    def list_plans(self, db: Session, *, user: User) -> List[Tuple[Plan, int]]:
        return self.plan_crud.get_all_by_user(db, user_id=user.id)

    def list_blocks(self, db: Session, *, plan: Plan) -> List[PlanBlock]:
        return self.plan_crud.list_blocks(db, plan_id=plan.id)

    def update_plan(
        self, db: Session, *, user: User, plan_id: UUID, plan_in: PlanUpdate
    ) -> Plan:
        """
        Apply any of title, date, active flag and full block list.

        Activating a plan deactivates the user's other plans. A block list
        replaces the existing blocks wholesale.
        """
        plan = self.get_plan(db, user=user, plan_id=plan_id)
        data = plan_in.model_dump(exclude_unset=True)

        if data.get("title") is not None:
            plan = self.plan_crud.update_title(db, db_obj=plan, title=data["title"])
        if "date" in data:
            plan.date = data["date"]
            db.commit()
            db.refresh(plan)
        if data.get("active") is not None:
            plan = self.plan_crud.set_active(db, db_obj=plan, active=data["active"])
        if plan_in.blocks is not None:
            self.plan_crud.replace_blocks(db, db_obj=plan, blocks=plan_in.blocks)
        return plan

    def delete_plan(self, db: Session, *, user: User, plan_id: UUID) -> None:
        plan = self.get_plan(db, user=user, plan_id=plan_id)
        self.plan_crud.delete(db, db_obj=plan)

    # =====================================================================
    # BLOCKS
    # =====================================================================

    def add_block(
        self, db: Session, *, user: User, plan_id: UUID, block_in: PlanBlockCreate
    ) -> PlanBlock:
        plan = self.get_plan(db, user=user, plan_id=plan_id)
        return self.plan_crud.add_block(db, db_obj=plan, obj_in=block_in)

    def update_block(
        self,
        db: Session,
        *,
        user: User,
        plan_id: UUID,
        block_id: UUID,
        block_in: PlanBlockUpdate,
    ) -> PlanBlock:
        plan = self.get_plan(db, user=user, plan_id=plan_id)
        block = self._get_block(db, plan=plan, block_id=block_id)

        start = block_in.start_time or block.start_time
        end = block_in.end_time or block.end_time
        if time_to_minutes(start) >= time_to_minutes(end):
            raise ValidationError("End time must be after start time")

        return self.plan_crud.update_block(db, db_obj=block, obj_in=block_in)

    def delete_block(self, db: Session, *, user: User, plan_id: UUID, block_id: UUID) -> None:
        plan = self.get_plan(db, user=user, plan_id=plan_id)
        block = self._get_block(db, plan=plan, block_id=block_id)
        self.plan_crud.delete_block(db, db_obj=block)


# Create singleton instance
plan_service = PlanService()
