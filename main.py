import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dayplanner.core.config import Base, engine, settings
from dayplanner.core.exceptions import register_exception_handlers
from dayplanner.api.routers import cron, discipline, plans, reflections, tasks, users

# =====================================================================
# LOGGING
# =====================================================================

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("dayplanner")

# =====================================================================
# CREATE APP
# =====================================================================

app = FastAPI(
    title=settings.APP_NAME,
    debug=settings.DEBUG,
    description="Time-blocked day plans with reminders and discipline scoring",
    version="1.0.0",
)

# =====================================================================
# CORS MIDDLEWARE
# =====================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)
logger.info(f"CORS allowed origins: {settings.CORS_ORIGINS}")

register_exception_handlers(app)

# =====================================================================
# DATABASE INITIALIZATION
# =====================================================================

Base.metadata.create_all(bind=engine)

# =====================================================================
# HEALTH CHECK (before routers)
# =====================================================================


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


# =====================================================================
# ROUTES
# =====================================================================

app.include_router(users.router)
app.include_router(plans.router)
app.include_router(tasks.router)
app.include_router(discipline.router)
app.include_router(reflections.router)
app.include_router(cron.router)

# =====================================================================
# ROOT ENDPOINT
# =====================================================================


@app.get("/")
def root():
    """API root endpoint."""
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": "1.0.0",
        "docs": "/docs",
        "endpoints": {
            "users": "/users",
            "plans": "/users/{user_id}/plans",
            "tasks": "/users/{user_id}/tasks",
            "discipline": "/users/{user_id}/discipline",
            "reflections": "/users/{user_id}/reflections",
            "cron": "/cron",
        },
    }
