import logging
import secrets
from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, Query, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from dayplanner.core.config import get_db, settings
from dayplanner.services.users import user_service
from dayplanner.models.user import User

logger = logging.getLogger(__name__)

# auto_error is off so the query-string secret can be used instead of the header
cron_bearer = HTTPBearer(auto_error=False)


# =====================================================================
# SCHEDULER AUTHENTICATION
# =====================================================================

def verify_cron_secret(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(cron_bearer),
    secret: Optional[str] = Query(None, description="Alternative to the Bearer header"),
) -> None:
    """
    Accept a trigger call carrying CRON_SECRET as a Bearer token or `?secret=`.

    Raises:
        HTTPException: 401 when the secret is missing, wrong, or not configured
    """
    expected = settings.CRON_SECRET
    if not expected:
        logger.warning("CRON_SECRET is not configured; refusing scheduler call")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )

    supplied = credentials.credentials if credentials else secret
    if not supplied or not secrets.compare_digest(supplied, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )


# =====================================================================
# USER LOOKUP
# =====================================================================

def get_path_user(user_id: UUID, db: Session = Depends(get_db)) -> User:
    """Resolve the `{user_id}` path parameter to a user, 404 if unknown."""
    return user_service.get_user(db, user_id=user_id)
