"""Shared test fixtures for the day planner tests."""

import os

# Keep the app module from creating a database file on import.
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from dayplanner.core.config import Base, get_db
from dayplanner.core.timeutils import utc_now
from dayplanner.crud.plan import crud_plan
from dayplanner.crud.user import crud_user
import dayplanner.models  # noqa: F401  registers every table on Base.metadata
from dayplanner.models.user import ReminderChannel
from dayplanner.schemas.plan import PlanBlockCreate, PlanCreate
from dayplanner.schemas.user import UserCreate
from dayplanner.services.notifications import Notifier

UTC = timezone.utc

# Monday
TODAY = datetime(2026, 3, 2, tzinfo=UTC).date()


def at(hour: int, minute: int = 0, day: int = 2) -> datetime:
    """Aware UTC instant on March `day`, 2026."""
    return datetime(2026, 3, day, hour, minute, tzinfo=UTC)


class FakeNotifier(Notifier):
    """Records what would have been sent instead of calling a provider."""

    def __init__(self, channel: ReminderChannel, succeed: bool = True):
        self.channel = channel
        self.succeed = succeed
        self.reminders = []
        self.prompts = []

    def recipient_for(self, user):
        if self.channel is ReminderChannel.email:
            return user.email if user.reminder_email else None
        if user.reminder_telegram and user.telegram_chat_id:
            return user.telegram_chat_id
        return None

    def send_reminder(self, recipient, payload):
        self.reminders.append((recipient, payload))
        return self.succeed

    def send_reflection_prompt(self, recipient, day):
        self.prompts.append((recipient, day))
        return self.succeed


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def user(db):
    return crud_user.create(
        db,
        obj_in=UserCreate(
            email="ada@example.com",
            email_verified=True,
            timezone="UTC",
            reminder_email=True,
            reminder_telegram=True,
            telegram_chat_id="424242",
        ),
    )


@pytest.fixture
def plan(db, user):
    """Active plan: 09:00 deep work, 10:00 email, 13:00 gym."""
    created = crud_plan.create(
        db,
        user_id=user.id,
        obj_in=PlanCreate(
            title="Weekday",
            blocks=[
                PlanBlockCreate(start_time="09:00", end_time="10:00", activity="Deep work", topic="Chapter 3"),
                PlanBlockCreate(start_time="10:00", end_time="11:00", activity="Email"),
                PlanBlockCreate(start_time="13:00", end_time="14:00", activity="Gym"),
            ],
        ),
    )
    return crud_plan.set_active(db, db_obj=created, active=True)


@pytest.fixture
def blocks(db, plan):
    return crud_plan.list_blocks(db, plan_id=plan.id, order_by="start_time")


@pytest.fixture
def email_notifier():
    return FakeNotifier(ReminderChannel.email)


@pytest.fixture
def telegram_notifier():
    return FakeNotifier(ReminderChannel.telegram)


@pytest.fixture
def clock():
    """Mutable holder for the instant the API sees as now."""
    return {"now": at(9, 15)}


@pytest.fixture
def client(session_factory, clock):
    from fastapi.testclient import TestClient
    from main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[utc_now] = lambda: clock["now"]
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
