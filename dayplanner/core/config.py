from typing import Generator, List, Optional
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session, declarative_base
from pydantic_settings import BaseSettings


# =====================================================================
# SETTINGS
# =====================================================================


class Settings(BaseSettings):
    # App
    APP_NAME: str = "Day Planner API"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    APP_URL: str = "http://localhost:3000"

    # Database
    DATABASE_URL: str = "sqlite:///./dayplanner.db"

    # Scheduler trigger
    CRON_SECRET: Optional[str] = None

    # Time handling
    DEFAULT_TIMEZONE: str = "UTC"

    # Reminders
    REMINDER_WINDOW_MINUTES: int = 2
    REMINDER_RESEND_COOLDOWN_MINUTES: int = 5
    MARK_MISSED_ON_TICK: bool = True

    # End-of-day reflection prompt (local time of each user)
    REFLECTION_PROMPT_TIME: str = "21:00"
    REFLECTION_PROMPT_TTL_HOURS: int = 24

    # Scoring
    ON_TIME_GRACE_MINUTES: int = 30
    SCORE_DENOMINATOR: str = "active_plan"  # "active_plan" | "logged_tasks"
    WEEKLY_LOOKBACK_DAYS: int = 7

    # Notification channels
    TELEGRAM_BOT_TOKEN: Optional[str] = None
    TELEGRAM_API_URL: str = "https://api.telegram.org"
    EMAIL_API_URL: str = "https://api.resend.com/emails"
    EMAIL_API_KEY: Optional[str] = None
    EMAIL_FROM: Optional[str] = None
    NOTIFY_TIMEOUT_SECONDS: int = 10

    CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:3000",
    ]

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()


# =====================================================================
# DATABASE
# =====================================================================

engine = create_engine(
    settings.DATABASE_URL,
    connect_args=(
        {"check_same_thread": False} if "sqlite" in settings.DATABASE_URL else {}
    ),
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Database session dependency."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
