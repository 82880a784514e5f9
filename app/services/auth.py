from typing import Optional

import structlog
from descope import AuthException, DescopeClient
from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.models.user import User

logger = structlog.get_logger(__name__)

# Initialize Descope client (only if configured)
descope_client = None
if settings.DESCOPE_PROJECT_ID:
    try:
        descope_client = DescopeClient(
            project_id=settings.DESCOPE_PROJECT_ID,
            management_key=settings.DESCOPE_MANAGEMENT_KEY,
        )
        logger.info(
            "Descope client initialized",
            project_id=settings.DESCOPE_PROJECT_ID[:4] + "***",
        )
    except Exception as e:
        logger.error("Failed to initialize Descope client", error=str(e))
        descope_client = None


class AuthService:
    """Authentication service for handling user lookup and first login."""

    @staticmethod
    async def get_or_create_user_from_descope(
        descope_user_id: str, email: str, name: str, db: AsyncSession
    ) -> User:
        """
        Get existing user or create a new one on first login.

        Args:
            descope_user_id: Descope user ID
            email: User email
            name: User name
            db: Database session

        Returns:
            User: The user (existing or newly created)
        """
        existing_user = await AuthService.get_user_by_descope_id(descope_user_id, db)
        if existing_user:
            logger.info(
                "Found existing user by descope_user_id",
                user_id=existing_user.id,
                descope_user_id=descope_user_id,
            )
            return existing_user

        # Account created before the identity provider was linked
        result = await db.execute(select(User).where(User.email == email))
        existing_user = result.scalar_one_or_none()

        if existing_user:
            logger.info(
                "Found existing user by email, updating descope_user_id",
                user_id=existing_user.id,
                descope_user_id=descope_user_id,
            )
            existing_user.descope_user_id = descope_user_id
            await db.commit()
            await db.refresh(existing_user)
            return existing_user

        try:
            user = User(
                email=email,
                name=name,
                descope_user_id=descope_user_id,
                is_active=True,
            )
            db.add(user)
            await db.commit()
            await db.refresh(user)

            logger.info(
                "Successfully created new user",
                user_id=user.id,
                descope_user_id=descope_user_id,
            )
            return user

        except IntegrityError as e:
            await db.rollback()
            logger.error(
                "Failed to create user due to integrity error",
                error=str(e),
                descope_user_id=descope_user_id,
            )
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="User creation failed due to data conflict",
            )
        except Exception as e:
            await db.rollback()
            logger.error(
                "Failed to create user",
                error=str(e),
                descope_user_id=descope_user_id,
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to create user account",
            )

    @staticmethod
    async def get_user_by_descope_id(
        descope_user_id: str, db: AsyncSession
    ) -> Optional[User]:
        result = await db.execute(
            select(User).where(User.descope_user_id == descope_user_id)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_user_by_id(user_id: int, db: AsyncSession) -> Optional[User]:
        result = await db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def validate_descope_token(token: str) -> dict:
        """
        Validate Descope JWT token and extract user information.

        Args:
            token: JWT token from Descope

        Returns:
            dict: User information from token

        Raises:
            HTTPException: If token is invalid or Descope is not configured
        """
        if not descope_client:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Authentication service not configured",
            )

        try:
            user_info = descope_client.validate_session(token)

            descope_user_id = user_info.get("sub")  # Subject (user ID)

            # Descope puts custom claims under "nsec"
            nsec_claims = user_info.get("nsec", {})
            email = nsec_claims.get("email") or user_info.get("email")
            name = (
                nsec_claims.get("name")
                or user_info.get("name")
                or user_info.get("given_name")
            )

            if not name and email:
                name = email.split("@")[0]
            elif not name:
                name = "User"

            if not descope_user_id:
                logger.error("No user ID found in JWT token")
                raise HTTPException(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    detail="Invalid token format",
                )

            return {
                "descope_user_id": descope_user_id,
                "email": email,
                "name": name,
            }

        except AuthException as e:
            logger.error("Descope authentication error", error=str(e))
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Authentication failed",
            )
        except HTTPException:
            raise
        except Exception as e:
            logger.error("Unexpected authentication error", error=str(e))
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Authentication service error",
            )
