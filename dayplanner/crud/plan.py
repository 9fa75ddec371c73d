# crud/plan.py
from typing import Optional, List, Sequence, Tuple
from uuid import UUID
from sqlalchemy.orm import Session
from sqlalchemy import func

from dayplanner.models.plan import Plan, PlanBlock
from dayplanner.schemas.plan import PlanBlockCreate, PlanBlockUpdate, PlanCreate


class CRUDPlan:
    # ====================================================
    # PLANS
    # ====================================================

    def create(self, db: Session, *, user_id: UUID, obj_in: PlanCreate) -> Plan:
        """Create an inactive plan together with its blocks (order = list index)."""
        plan = Plan(user_id=user_id, title=obj_in.title, date=obj_in.date, active=False)
        db.add(plan)
        db.flush()

        self._add_blocks(db, plan_id=plan.id, blocks=obj_in.blocks)

        db.commit()
        db.refresh(plan)
        return plan

    def get_by_id(self, db: Session, *, plan_id: UUID) -> Optional[Plan]:
        return db.query(Plan).filter(Plan.id == plan_id).first()

    def get_for_user(self, db: Session, *, plan_id: UUID, user_id: UUID) -> Optional[Plan]:
        """Get a plan only if it belongs to the user."""
        return (
            db.query(Plan)
            .filter(Plan.id == plan_id)
            .filter(Plan.user_id == user_id)
            .first()
        )

    def get_all_by_user(self, db: Session, *, user_id: UUID) -> List[Tuple[Plan, int]]:
        """All plans of a user, newest first, each with its block count."""
        counts = (
            db.query(PlanBlock.plan_id, func.count(PlanBlock.id).label("block_count"))
            .group_by(PlanBlock.plan_id)
            .subquery()
        )
        rows = (
            db.query(Plan, func.coalesce(counts.c.block_count, 0))
            .outerjoin(counts, counts.c.plan_id == Plan.id)
            .filter(Plan.user_id == user_id)
            .order_by(Plan.created_at.desc())
            .all()
        )
        return [(plan, int(count)) for plan, count in rows]

    def find_active_plan(self, db: Session, *, user_id: UUID) -> Optional[Plan]:
        return (
            db.query(Plan)
            .filter(Plan.user_id == user_id)
            .filter(Plan.active.is_(True))
            .first()
        )

    def update_title(self, db: Session, *, db_obj: Plan, title: str) -> Plan:
        db_obj.title = title
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def set_active(self, db: Session, *, db_obj: Plan, active: bool) -> Plan:
        """Toggle a plan; activating it deactivates every other plan of the same user."""
        if active:
            (
                db.query(Plan)
                .filter(Plan.user_id == db_obj.user_id)
                .filter(Plan.id != db_obj.id)
                .update({Plan.active: False}, synchronize_session="fetch")
            )
        db_obj.active = active
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def delete(self, db: Session, *, db_obj: Plan) -> None:
        """Delete a plan; its blocks go with it."""
        db.delete(db_obj)
        db.commit()

    # ====================================================
    # BLOCKS
    # ====================================================

    def _add_blocks(
        self, db: Session, *, plan_id: UUID, blocks: Sequence[PlanBlockCreate], start_order: int = 0
    ) -> None:
        for index, block in enumerate(blocks):
            db.add(
                PlanBlock(
                    plan_id=plan_id,
                    start_time=block.start_time,
                    end_time=block.end_time,
                    activity=block.activity,
                    topic=block.topic,
                    order=start_order + index,
                )
            )

    def list_blocks(
        self, db: Session, *, plan_id: UUID, order_by: str = "order"
    ) -> List[PlanBlock]:
        """
        Blocks of a plan.

        order_by="order" gives the editing sequence, order_by="start_time"
        the chronological sequence used for time resolution.
        """
        query = db.query(PlanBlock).filter(PlanBlock.plan_id == plan_id)
        if order_by == "start_time":
            query = query.order_by(PlanBlock.start_time.asc(), PlanBlock.order.asc())
        elif order_by == "order":
            query = query.order_by(PlanBlock.order.asc())
        else:
            raise ValueError(f"Unknown block ordering: {order_by}")
        return query.all()

    def count_blocks(self, db: Session, *, plan_id: UUID) -> int:
        return db.query(PlanBlock).filter(PlanBlock.plan_id == plan_id).count()

    def get_block(self, db: Session, *, plan_id: UUID, block_id: UUID) -> Optional[PlanBlock]:
        return (
            db.query(PlanBlock)
            .filter(PlanBlock.plan_id == plan_id)
            .filter(PlanBlock.id == block_id)
            .first()
        )

    def replace_blocks(
        self, db: Session, *, db_obj: Plan, blocks: Sequence[PlanBlockCreate]
    ) -> List[PlanBlock]:
        """Swap the whole block list; order is recomputed from list position."""
        db.query(PlanBlock).filter(PlanBlock.plan_id == db_obj.id).delete(
            synchronize_session="fetch"
        )
        self._add_blocks(db, plan_id=db_obj.id, blocks=blocks)
        db.commit()
        db.refresh(db_obj)
        return self.list_blocks(db, plan_id=db_obj.id)

    def add_block(self, db: Session, *, db_obj: Plan, obj_in: PlanBlockCreate) -> PlanBlock:
        """Append a block after the current last one."""
        last_order = (
            db.query(func.max(PlanBlock.order))
            .filter(PlanBlock.plan_id == db_obj.id)
            .scalar()
        )
        block = PlanBlock(
            plan_id=db_obj.id,
            start_time=obj_in.start_time,
            end_time=obj_in.end_time,
            activity=obj_in.activity,
            topic=obj_in.topic,
            order=0 if last_order is None else last_order + 1,
        )
        db.add(block)
        db.commit()
        db.refresh(block)
        return block

    def update_block(
        self, db: Session, *, db_obj: PlanBlock, obj_in: PlanBlockUpdate
    ) -> PlanBlock:
        for field, value in obj_in.model_dump(exclude_unset=True).items():
            setattr(db_obj, field, value)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def delete_block(self, db: Session, *, db_obj: PlanBlock) -> None:
        db.delete(db_obj)
        db.commit()


# Instantiate a reusable object
crud_plan = CRUDPlan()
