import logging
from fastapi import status
from fastapi.responses import JSONResponse
from fastapi.requests import Request

logger = logging.getLogger(__name__)

# ---------------------------
# CRUD (Database abstraction)
# ---------------------------

class DatabaseError(Exception):
    """Base class for all database-related errors."""
    pass

class DatabaseConflictError(DatabaseError):
    """Raised when a unique key is violated (e.g. a second log for the same block and day)."""
    pass

# ---------------------------
# Service (Business logic)
# ---------------------------

class BusinessError(Exception):
    """Base class for all business logic errors."""
    pass

class NotFoundError(BusinessError):
    """Raised when a requested resource does not exist or belongs to someone else."""
    pass

class ConflictError(BusinessError):
    """Raised when an action conflicts with the current state of a resource."""
    pass

class ValidationError(BusinessError):
    """Raised when business rule validation fails (e.g. no current task to act on)."""
    pass

class TimeFormatError(ValidationError, ValueError):
    """Raised when a wall-clock string is not a 24-hour HH:mm value."""
    pass


# ---------------------------
# FastAPI Exception Handlers
# ---------------------------

def register_exception_handlers(app):
    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": str(exc)},
        )

    @app.exception_handler(ConflictError)
    async def conflict_handler(request: Request, exc: ConflictError):
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"detail": str(exc)},
        )

    @app.exception_handler(DatabaseConflictError)
    async def db_conflict_handler(request: Request, exc: DatabaseConflictError):
        logger.info(f"Unique key conflict on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"detail": str(exc)},
        )

    @app.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError):
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": str(exc)},
        )
