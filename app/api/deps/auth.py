from typing import Optional

import structlog
from descope import AuthException
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps.database import get_db
from app.core.config import settings
from app.models.user import User
from app.services import auth as auth_module
from app.services.auth import AuthService

logger = structlog.get_logger(__name__)

# HTTP Bearer token extractor; a missing header is answered with 401 below
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Get current authenticated user.

    - In production: Validates Descope JWT token and looks the user up
    - In test/dev: Falls back to the token being the user id if Descope is
      not configured
    """
    if credentials is None or not credentials.credentials:
        raise _unauthorized("Not authenticated")

    token = credentials.credentials
    descope_client = auth_module.descope_client

    if not descope_client:
        logger.debug("Descope not configured, using development auth fallback")
        user = await _get_user_dev_fallback(token, db)
    else:
        try:
            audience = settings.DESCOPE_AUDIENCE
            jwt_response = (
                descope_client.validate_session(token, audience)
                if audience
                else descope_client.validate_session(token)
            )
        except AuthException as e:
            logger.error("Descope authentication error", error=str(e))
            raise _unauthorized("Authentication failed")

        descope_user_id = jwt_response.get("sub")
        user = await AuthService.get_user_by_descope_id(descope_user_id, db)
        if not user:
            logger.warning(
                "User not found for Descope user", descope_user_id=descope_user_id
            )
            raise _unauthorized("User account not found. Please complete setup first.")

    if not user.is_active:
        logger.warning("Inactive user attempted access", user_id=user.id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is inactive",
        )

    structlog.contextvars.bind_contextvars(user_id=user.id)
    return user


async def _get_user_dev_fallback(token: str, db: AsyncSession) -> User:
    """
    Development/test fallback authentication.
    Expects token to be a simple user ID string.
    """
    try:
        user_id = int(token)
    except ValueError:
        raise _unauthorized("Invalid user ID format")

    user = await AuthService.get_user_by_id(user_id, db)
    if not user:
        raise _unauthorized("User not found")
    return user
